import pytest
from pydantic import ValidationError

from contract.schemas import Decoded, Raw, Vote


def test_vote_create_and_serialize() -> None:
    vote = Vote(voter_id="v1", candidate_id="cA", station="s1")

    json_payload = vote.to_json()
    restored = Vote.from_json(json_payload)

    assert restored == vote
    assert vote.to_dict() == {"VoterID": "v1", "CandidateID": "cA", "Station": "s1"}


def test_vote_load_from_ledger_names() -> None:
    vote = Vote.from_dict({"VoterID": "v1", "CandidateID": "cA", "Station": "s1"})

    assert vote.voter_id == "v1"
    assert vote.candidate_id == "cA"
    assert vote.station == "s1"


def test_vote_requires_voter_id() -> None:
    with pytest.raises(ValidationError):
        _ = Vote(voter_id="", candidate_id="cA", station="s1")


def test_vote_is_immutable() -> None:
    vote = Vote(voter_id="v1", candidate_id="cA", station="s1")

    with pytest.raises(ValidationError):
        vote.candidate_id = "cB"


def test_scan_entries_render_for_json() -> None:
    vote = Vote(voter_id="v1", candidate_id="cA", station="s1")

    assert Decoded(key="v1", vote=vote).to_json_value() == vote.to_dict()
    assert Raw(key="v2", value="garbage").to_json_value() == "garbage"
