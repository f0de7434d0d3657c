from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypeAlias, TypeVar

from pydantic import BaseModel, ConfigDict, Field


TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str | bytes) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class Vote(BaseSchema):
    """One voter's vote. Serialized with the ledger's field names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    voter_id: str = Field(alias="VoterID", min_length=1)
    candidate_id: str = Field(alias="CandidateID")
    station: str = Field(alias="Station")


@dataclass(frozen=True)
class Decoded:
    key: str
    vote: Vote
    # JSON object as stored, including fields a Vote does not carry.
    stored: dict[str, object] | None = field(default=None, compare=False)

    def to_json_value(self) -> object:
        if self.stored is not None:
            return dict(self.stored)
        return self.vote.to_dict()


@dataclass(frozen=True)
class Raw:
    """A stored value that did not decode as a vote, kept as text."""

    key: str
    value: str

    def to_json_value(self) -> object:
        return self.value


ScanEntry: TypeAlias = Decoded | Raw
