import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from admin.cli import app
from admin.config import LedgerConfig, save_config
from ledger.transaction import SqliteLedger

runner = CliRunner()


def _args(tmp_path: Path, *rest: str) -> list[str]:
    return [
        "--config", str(tmp_path / "ledger.yaml"),
        "--db", str(tmp_path / "world_state.db"),
        "--log-level", "WARNING",
        *rest,
    ]


def _register_three(tmp_path: Path) -> None:
    for voter_id, candidate_id, station in [("v1", "cA", "s1"), ("v2", "cA", "s2"), ("v3", "cB", "s3")]:
        result = runner.invoke(app, _args(tmp_path, "register", voter_id, candidate_id, station))
        assert result.exit_code == 0, result.output


def test_register_and_read(tmp_path: Path) -> None:
    result = runner.invoke(app, _args(tmp_path, "register", "v1", "cA", "s1"))
    assert result.exit_code == 0
    assert "Vote from v1 registered" in result.output

    result = runner.invoke(app, _args(tmp_path, "read", "v1"))
    assert result.exit_code == 0
    assert '{"CandidateID":"cA","Station":"s1","VoterID":"v1"}' in result.output


def test_register_twice_fails(tmp_path: Path) -> None:
    _ = runner.invoke(app, _args(tmp_path, "register", "v1", "cA", "s1"))

    result = runner.invoke(app, _args(tmp_path, "register", "v1", "cB", "s2"))

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_missing_vote_commands_fail(tmp_path: Path) -> None:
    for command in (["read", "v9"], ["update", "v9", "cA", "s1"], ["delete", "v9"]):
        result = runner.invoke(app, _args(tmp_path, *command))
        assert result.exit_code == 1
        assert "does not exist" in result.output


def test_exists_update_delete(tmp_path: Path) -> None:
    result = runner.invoke(app, _args(tmp_path, "exists", "v1"))
    assert result.output.strip() == "false"

    _ = runner.invoke(app, _args(tmp_path, "register", "v1", "cA", "s1"))
    result = runner.invoke(app, _args(tmp_path, "exists", "v1"))
    assert result.output.strip() == "true"

    result = runner.invoke(app, _args(tmp_path, "update", "v1", "cB", "s2"))
    assert result.exit_code == 0
    result = runner.invoke(app, _args(tmp_path, "read", "v1"))
    assert '"CandidateID":"cB"' in result.output

    result = runner.invoke(app, _args(tmp_path, "delete", "v1"))
    assert result.exit_code == 0
    result = runner.invoke(app, _args(tmp_path, "exists", "v1"))
    assert result.output.strip() == "false"


def test_tally_and_list(tmp_path: Path) -> None:
    _register_three(tmp_path)
    with SqliteLedger(tmp_path / "world_state.db").transaction() as ctx:
        ctx.stub.put_state("v4", b"corrupted")

    result = runner.invoke(app, _args(tmp_path, "tally", "--json"))
    assert result.exit_code == 0
    assert json.loads(result.output) == {"cA": 2, "cB": 1}

    result = runner.invoke(app, _args(tmp_path, "tally"))
    assert "cA: 2" in result.output
    assert "cB: 1" in result.output

    result = runner.invoke(app, _args(tmp_path, "list"))
    assert "v1: cA @ s1" in result.output
    assert "v4: <undecodable> corrupted" in result.output

    result = runner.invoke(app, _args(tmp_path, "list", "--json"))
    assert json.loads(result.output)[-1] == "corrupted"


def test_delete_all(tmp_path: Path) -> None:
    _register_three(tmp_path)

    result = runner.invoke(app, _args(tmp_path, "delete-all"), input="n\n")
    assert result.exit_code == 1
    assert runner.invoke(app, _args(tmp_path, "exists", "v1")).output.strip() == "true"

    result = runner.invoke(app, _args(tmp_path, "delete-all", "--yes"))
    assert result.exit_code == 0
    assert "Deleted 3 entries" in result.output

    result = runner.invoke(app, _args(tmp_path, "delete-all", "--yes"))
    assert result.exit_code == 0
    assert "Deleted 0 entries" in result.output

    result = runner.invoke(app, _args(tmp_path, "tally"))
    assert "No votes found." in result.output


def test_init_seeds_ledger(tmp_path: Path) -> None:
    result = runner.invoke(app, _args(tmp_path, "init"))

    assert result.exit_code == 0
    assert "initialized with 2 vote(s)" in result.output
    assert runner.invoke(app, _args(tmp_path, "exists", "voter2")).output.strip() == "true"


def test_load_skips_existing_voters(tmp_path: Path) -> None:
    _ = runner.invoke(app, _args(tmp_path, "register", "v1", "cA", "s1"))
    votes_path = tmp_path / "votes.yaml"
    with open(votes_path, "w") as f:
        yaml.dump(
            {
                "votes": [
                    {"VoterID": "v1", "CandidateID": "cB", "Station": "s1"},
                    {"VoterID": "v2", "CandidateID": "cB", "Station": "s2"},
                    {"VoterID": "v3", "CandidateID": "cB", "Station": "s3"},
                ]
            },
            f,
        )

    result = runner.invoke(app, _args(tmp_path, "load", str(votes_path)))

    assert result.exit_code == 0
    assert "Registered 2 vote(s)" in result.output
    assert "Skipped 1 existing voter(s)" in result.output
    result = runner.invoke(app, _args(tmp_path, "tally", "--json"))
    assert json.loads(result.output) == {"cA": 1, "cB": 2}


def test_load_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, _args(tmp_path, "load", str(tmp_path / "nope.yaml")))

    assert result.exit_code == 1
    assert "Votes file not found" in result.output


def test_invoke_by_transaction_name(tmp_path: Path) -> None:
    result = runner.invoke(app, _args(tmp_path, "invoke", "RegisterVote", "v1", "cA", "s1"))
    assert result.exit_code == 0

    result = runner.invoke(app, _args(tmp_path, "invoke", "GetVoteStatistics"))
    assert json.loads(result.output) == {"cA": 1}

    result = runner.invoke(app, _args(tmp_path, "invoke", "StealVotes"))
    assert result.exit_code == 1
    assert "Unsupported transaction" in result.output


def test_transactions_listing(tmp_path: Path) -> None:
    result = runner.invoke(app, _args(tmp_path, "transactions"))

    assert result.exit_code == 0
    assert "RegisterVote" in result.output
    assert "evaluate" in result.output
    assert "submit" in result.output


def test_config_file_is_used(tmp_path: Path) -> None:
    db_path = tmp_path / "from_config.db"
    config_path = tmp_path / "ledger.yaml"
    save_config(LedgerConfig(db_path=str(db_path), log_level="WARNING"), config_path)

    result = runner.invoke(app, ["--config", str(config_path), "register", "v1", "cA", "s1"])

    assert result.exit_code == 0
    assert db_path.exists()


def test_invalid_config_fails(tmp_path: Path) -> None:
    config_path = tmp_path / "ledger.yaml"
    config_path.write_text("page_size: -1\n")

    result = runner.invoke(app, ["--config", str(config_path), "tally"])

    assert result.exit_code == 1
    assert "Invalid config" in result.output


def test_report_command_writes_files(tmp_path: Path) -> None:
    _register_three(tmp_path)
    output_dir = tmp_path / "out"

    result = runner.invoke(app, _args(tmp_path, "report", "--output-dir", str(output_dir)))

    assert result.exit_code == 0
    assert (output_dir / "report.md").exists()
    assert (output_dir / "report.html").exists()
    assert (output_dir / "tally.png").exists()
