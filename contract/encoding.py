"""Canonical, key-order independent encoding of ledger records."""

from __future__ import annotations

import json
from collections.abc import Mapping

from pydantic import BaseModel, ValidationError

from .errors import DecodeError
from .schemas import Vote


def sort_keys_recursive(value: object) -> object:
    """Return a copy of value with mapping keys sorted at every level.

    Lists and tuples keep their order; their elements are walked. Pydantic
    models are dumped by alias first.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True)
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda item: str(item[0]))
        return {str(key): sort_keys_recursive(item) for key, item in items}
    if isinstance(value, (list, tuple)):
        return [sort_keys_recursive(item) for item in value]
    return value


def canonical_encode(record: Mapping[str, object] | BaseModel) -> bytes:
    """Serialize record to compact, deterministic UTF-8 JSON."""
    payload = json.dumps(
        sort_keys_recursive(record),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return payload.encode("utf-8")


def raw_text(raw: bytes) -> str:
    return bytes(raw).decode("utf-8", errors="replace")


def decode_record(raw: bytes, key: str | None = None) -> tuple[Vote, dict[str, object]]:
    """Parse stored bytes as a Vote, also returning the JSON object as stored.

    Only the ledger field names (VoterID, CandidateID, Station) are accepted.

    Raises:
        DecodeError: If the bytes are not UTF-8 JSON describing a vote
    """
    try:
        text = bytes(raw).decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(raw, "invalid UTF-8", key=key) from e
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(raw, f"invalid JSON ({e.msg})", key=key) from e
    if not isinstance(payload, dict):
        raise DecodeError(raw, "expected a JSON object", key=key)
    try:
        vote = Vote.model_validate(payload, by_alias=True, by_name=False)
    except ValidationError as e:
        raise DecodeError(raw, f"{e.error_count()} validation error(s)", key=key) from e
    return vote, payload


def decode_vote(raw: bytes, key: str | None = None) -> Vote:
    """Parse stored bytes as a Vote.

    Raises:
        DecodeError: If the bytes are not UTF-8 JSON describing a vote
    """
    vote, _ = decode_record(raw, key=key)
    return vote
