"""Errors raised by the vote contract."""

from __future__ import annotations


class VoteLedgerError(Exception):
    """Base class for vote contract errors."""


class AlreadyExistsError(VoteLedgerError):
    def __init__(self, voter_id: str) -> None:
        super().__init__(f"The vote from voter {voter_id} already exists")
        self.voter_id = voter_id


class NotFoundError(VoteLedgerError):
    def __init__(self, voter_id: str) -> None:
        super().__init__(f"The vote from voter {voter_id} does not exist")
        self.voter_id = voter_id


class DecodeError(VoteLedgerError):
    """Stored bytes do not parse as a vote."""

    def __init__(self, raw: bytes, reason: str, key: str | None = None) -> None:
        location = f" at key {key}" if key is not None else ""
        super().__init__(f"Value{location} is not a vote: {reason}")
        self.raw = raw
        self.reason = reason
        self.key = key


class UnknownTransactionError(VoteLedgerError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unsupported transaction: {name}")
        self.name = name
