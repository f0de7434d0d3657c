"""Ledger configuration with YAML support."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import Field, field_validator

from contract.schemas import BaseSchema, Vote
from contract.votes import DEFAULT_VOTES, VoteContract
from ledger.transaction import SqliteLedger


class LedgerConfig(BaseSchema):
    """Where the World State lives and how the contract is seeded."""

    db_path: str = "data/world_state.db"
    page_size: int = Field(default=100, ge=1)  # rows fetched per range-scan page
    log_level: str = "INFO"
    seed_votes: list[Vote] = Field(default_factory=lambda: list(DEFAULT_VOTES))

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def build_ledger(self) -> SqliteLedger:
        return SqliteLedger(self.db_path, page_size=self.page_size)

    def build_contract(self) -> VoteContract:
        return VoteContract(seed_votes=self.seed_votes)


def load_config(yaml_path: str | Path) -> LedgerConfig:
    """Load ledger configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        LedgerConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or has bad fields
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not data or not isinstance(data, dict):
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

    try:
        return LedgerConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: LedgerConfig, yaml_path: str | Path) -> None:
    """Save ledger configuration to YAML file."""
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)


def load_votes(yaml_path: str | Path) -> list[Vote]:
    """Read votes for bulk loading.

    The file holds either a list of votes or a mapping with a ``votes`` list.
    Each vote uses the ledger field names (VoterID, CandidateID, Station).
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Votes file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("votes")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of votes in {yaml_path}")

    votes: list[Vote] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Vote #{index} in {yaml_path} is not a mapping")
        try:
            votes.append(Vote.from_dict(item))
        except Exception as e:
            raise ValueError(f"Invalid vote #{index} in {yaml_path}: {e}") from e
    return votes
