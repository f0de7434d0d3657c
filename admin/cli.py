"""CLI interface for the vote ledger."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from tqdm import tqdm

from admin.config import LedgerConfig, load_config, load_votes
from admin.plotting import TallyPlotter, sorted_tally
from admin.report import TallyReport
from contract.errors import AlreadyExistsError, VoteLedgerError
from contract.registry import invoke as invoke_transaction
from contract.schemas import Decoded
from contract.votes import VoteContract
from ledger.transaction import SqliteLedger

app = typer.Typer(help="Vote Ledger CLI")

logger = logging.getLogger(__name__)


def _fail(message: str) -> NoReturn:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _config(ctx: typer.Context) -> LedgerConfig:
    return ctx.ensure_object(LedgerConfig)


def _open(ctx: typer.Context) -> tuple[SqliteLedger, VoteContract]:
    config = _config(ctx)
    return config.build_ledger(), config.build_contract()


def _run(ctx: typer.Context, name: str, *args: str) -> str:
    ledger, contract = _open(ctx)
    try:
        return invoke_transaction(ledger, contract, name, *args)
    except (VoteLedgerError, ValueError) as e:
        _fail(str(e))


@app.callback()
def main(
    ctx: typer.Context,
    config_path: str = typer.Option("ledger.yaml", "--config", help="Ledger YAML config"),
    db_path: Optional[str] = typer.Option(None, "--db", help="Override the World State database path"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the log level"),
) -> None:
    """Manage votes recorded in the ledger World State."""
    overrides: dict[str, object] = {}
    if db_path is not None:
        overrides["db_path"] = db_path
    if log_level is not None:
        overrides["log_level"] = log_level

    try:
        if Path(config_path).exists():
            config = load_config(config_path)
        else:
            config = LedgerConfig()
        if overrides:
            config = LedgerConfig.from_dict({**config.to_dict(), **overrides})
    except ValueError as e:
        _fail(f"Invalid config: {e}")

    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = config


@app.command()
def init(ctx: typer.Context) -> None:
    """Seed the ledger with the configured sample votes."""
    _ = _run(ctx, "InitLedger")
    typer.secho(
        f"✅ Ledger initialized with {len(_config(ctx).seed_votes)} vote(s)",
        fg=typer.colors.GREEN,
    )


@app.command()
def register(
    ctx: typer.Context,
    voter_id: str = typer.Argument(..., help="Voter ID (ledger key)"),
    candidate_id: str = typer.Argument(..., help="Candidate the vote is for"),
    station: str = typer.Argument(..., help="Polling station"),
) -> None:
    """Record a new vote."""
    _ = _run(ctx, "RegisterVote", voter_id, candidate_id, station)
    typer.secho(f"✅ Vote from {voter_id} registered", fg=typer.colors.GREEN)


@app.command()
def read(
    ctx: typer.Context,
    voter_id: str = typer.Argument(..., help="Voter ID to read"),
) -> None:
    """Print the stored vote exactly as it is on the ledger."""
    typer.echo(_run(ctx, "ReadVote", voter_id))


@app.command()
def update(
    ctx: typer.Context,
    voter_id: str = typer.Argument(..., help="Voter ID (ledger key)"),
    candidate_id: str = typer.Argument(..., help="New candidate"),
    station: str = typer.Argument(..., help="New polling station"),
) -> None:
    """Replace an existing vote."""
    _ = _run(ctx, "UpdateVote", voter_id, candidate_id, station)
    typer.secho(f"✅ Vote from {voter_id} updated", fg=typer.colors.GREEN)


@app.command()
def delete(
    ctx: typer.Context,
    voter_id: str = typer.Argument(..., help="Voter ID to delete"),
) -> None:
    """Delete an existing vote."""
    _ = _run(ctx, "DeleteVote", voter_id)
    typer.secho(f"✅ Vote from {voter_id} deleted", fg=typer.colors.GREEN)


@app.command()
def exists(
    ctx: typer.Context,
    voter_id: str = typer.Argument(..., help="Voter ID to check"),
) -> None:
    """Print true if a vote is stored for the voter."""
    typer.echo(_run(ctx, "VoteExists", voter_id))


@app.command(name="list")
def list_votes(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the raw GetAllVotes JSON"),
) -> None:
    """List every entry in the World State."""
    if as_json:
        typer.echo(_run(ctx, "GetAllVotes"))
        return

    ledger, contract = _open(ctx)
    count = 0
    with ledger.transaction(read_only=True) as tx:
        for entry in contract.get_all_votes(tx):
            count += 1
            if isinstance(entry, Decoded):
                typer.echo(f"  {entry.key}: {entry.vote.candidate_id} @ {entry.vote.station}")
            else:
                typer.secho(f"  {entry.key}: <undecodable> {entry.value}", fg=typer.colors.YELLOW)

    if count == 0:
        typer.secho("No votes found.", fg=typer.colors.YELLOW)


@app.command(name="delete-all")
def delete_all(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every entry from the World State."""
    if not yes:
        _ = typer.confirm("Delete every vote on the ledger?", abort=True)
    deleted = _run(ctx, "DeleteAllVotes")
    typer.secho(f"✅ Deleted {deleted} entr{'y' if deleted == '1' else 'ies'}", fg=typer.colors.GREEN)


@app.command()
def tally(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the raw GetVoteStatistics JSON"),
) -> None:
    """Count votes per candidate."""
    if as_json:
        typer.echo(_run(ctx, "GetVoteStatistics"))
        return

    ledger, contract = _open(ctx)
    with ledger.transaction(read_only=True) as tx:
        counts = contract.get_vote_statistics(tx)

    if not counts:
        typer.secho("No votes found.", fg=typer.colors.YELLOW)
        return

    typer.secho(f"\n🗳️  {sum(counts.values())} vote(s) counted:\n", fg=typer.colors.BLUE)
    for candidate, count in sorted_tally(counts):
        typer.echo(f"  {candidate}: {count}")


@app.command()
def load(
    ctx: typer.Context,
    votes_file: str = typer.Argument(..., help="YAML file with votes to register"),
) -> None:
    """Register every vote from a YAML file, skipping voters already on the ledger."""
    try:
        votes = load_votes(votes_file)
    except FileNotFoundError as e:
        _fail(str(e))
    except ValueError as e:
        _fail(f"Invalid votes file: {e}")

    ledger, contract = _open(ctx)
    registered = 0
    skipped = 0
    for vote in tqdm(votes, desc="Registering votes", unit="vote"):
        try:
            with ledger.transaction() as tx:
                contract.register_vote(tx, vote.voter_id, vote.candidate_id, vote.station)
        except AlreadyExistsError as e:
            tqdm.write(f"  ⏭️  {e}")
            skipped += 1
            continue
        registered += 1

    logger.info(f"Loaded {registered} vote(s) from {votes_file}, skipped {skipped}")
    typer.secho(f"✅ Registered {registered} vote(s)", fg=typer.colors.GREEN)
    if skipped:
        typer.secho(f"⚠️  Skipped {skipped} existing voter(s)", fg=typer.colors.YELLOW)


@app.command()
def invoke(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Transaction name, e.g. RegisterVote"),
    args: Optional[List[str]] = typer.Argument(None, help="Transaction arguments"),
) -> None:
    """Invoke a contract transaction by name and print its result."""
    result = _run(ctx, name, *(args or []))
    if result:
        typer.echo(result)


@app.command()
def transactions(ctx: typer.Context) -> None:
    """List the transactions the contract exposes."""
    _, contract = _open(ctx)
    for name, info in contract.transactions().items():
        kind = "submit" if info.submit else "evaluate"
        typer.echo(f"  {name:<20} {kind}")


@app.command()
def report(
    ctx: typer.Context,
    output_dir: str = typer.Option(".", help="Output directory for report files"),
) -> None:
    """Generate Markdown and HTML tally reports with a bar chart."""
    config = _config(ctx)
    ledger, contract = _open(ctx)
    with ledger.transaction(read_only=True) as tx:
        counts = contract.get_vote_statistics(tx)
        raw_count = sum(1 for entry in contract.get_all_votes(tx) if not isinstance(entry, Decoded))

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    chart_path = output_path / "tally.png"
    has_chart = TallyPlotter().plot_tally(counts, chart_path)

    generator = TallyReport(counts, raw_count=raw_count, ledger_path=config.db_path)
    md_path = output_path / "report.md"
    html_path = output_path / "report.html"
    generator.generate_markdown(md_path, chart_path if has_chart else None)
    generator.generate_html(html_path, chart_path if has_chart else None)

    typer.secho("✅ Reports generated successfully!", fg=typer.colors.GREEN)
    typer.echo(f"   Markdown: {md_path}")
    typer.echo(f"   HTML:     {html_path}")
    if has_chart:
        typer.echo(f"   Chart:    {chart_path}")


if __name__ == "__main__":
    app()
