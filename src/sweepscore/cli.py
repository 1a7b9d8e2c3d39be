"""CLI entrypoint.

Primary mode:
- sweepscore run OUTER INNER ...

Utilities:
- sweepscore cancel SCORE_ID

CONTRACT
- Inputs: Command line arguments (parsed by Typer), optional YAML config,
  SWEEPSCORE_URL / SWEEPSCORE_KEY environment variables
- Outputs (required):
  - Exit code 0 on success, 1 on a cancelled or failed run
  - Console summary of the run
- Invariants:
  - Command line values override the config file
  - Scoreboard URL and key are required unless --offline
- Failure:
  - Invalid arguments raise Typer usage errors (exit code 2)
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import FileConfig, RunConfig, load_config_file
from .errors import ScoreboardError
from .orchestrator import RunResult, run_scoring_session
from .scoreboard.http import HttpScoreboardClient

app = typer.Typer(add_completion=False, help="Live scorer for outer/inner sweep competitions.")

console = Console()


def _version_callback(value: bool):
    if value:
        console.print(f"sweepscore version: {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<green>{time:HH:mm:ss}</green> <level>{level: <8}</level> {message}",
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    _setup_logging(verbose)


_URL_OPTION = typer.Option(
    None,
    "--url",
    "-u",
    envvar="SWEEPSCORE_URL",
    help="URL of the scoreboard service.",
)
_KEY_OPTION = typer.Option(
    None,
    "--key",
    "-k",
    envvar="SWEEPSCORE_KEY",
    help="API key for the scoreboard.",
)
_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="YAML config file.",
)


def _load_file_config(config: Path | None) -> FileConfig:
    if config is None:
        return FileConfig()
    if not config.exists():
        raise typer.BadParameter(f"Config file not found: {config}")
    try:
        return load_config_file(config)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _summary(result: RunResult) -> Table:
    table = Table(title="sweepscore")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Status", result.status)
    table.add_row("Score ID", result.score_id or "-")
    table.add_row("Score", "-" if result.score is None else f"{result.score:f}")
    table.add_row("Outer samples", str(result.outer_samples))
    table.add_row("Inner samples", str(result.inner_samples))
    if result.message:
        table.add_row("Message", result.message)
    return table


@app.command()
def run(
    outer_file: Path = typer.Argument(..., help="Outer sweep file."),
    inner_file: Path = typer.Argument(..., help="Inner sweep file."),
    url: str | None = _URL_OPTION,
    key: str | None = _KEY_OPTION,
    name: str | None = typer.Option(None, "--name", "-n", help="Name of contestant being scored."),
    email: str | None = typer.Option(None, "--email", "-e", help="Email of competitor."),
    competition_class: str | None = typer.Option(
        None, "--class", "-c", help="Competition class e.g. unlimited."
    ),
    config: Path | None = _CONFIG_OPTION,
    offline: bool = typer.Option(False, "--offline", help="Score locally without a scoreboard."),
    no_follow: bool = typer.Option(False, "--no-follow", help="Stop at end of file instead of waiting for data."),
    no_reopen: bool = typer.Option(False, "--no-reopen", help="Do not reopen rotated files."),
    tick: float | None = typer.Option(None, "--tick", min=0.01, help="Seconds between score updates."),
    poll: float | None = typer.Option(None, "--poll", min=0.01, help="Seconds between file polls."),
    events_file: Path | None = typer.Option(None, "--events-file", help="Append JSONL run events here."),
) -> None:
    """Score a pair of sweep files. Send SIGUSR1 to finish, SIGINT/SIGTERM to cancel."""
    fc = _load_file_config(config)

    scoreboard = replace(
        fc.scoreboard,
        url=url or fc.scoreboard.url,
        api_key=key or fc.scoreboard.api_key,
    )
    if not offline and (not scoreboard.url or not scoreboard.api_key):
        raise typer.BadParameter("--url and --key are required (or use --offline).")

    contestant = replace(
        fc.contestant,
        name=name if name is not None else fc.contestant.name,
        competition_class=competition_class if competition_class is not None else fc.contestant.competition_class,
        email=email or fc.contestant.email,
    )
    tail = fc.tail
    if no_follow:
        tail = replace(tail, follow=False)
    if no_reopen:
        tail = replace(tail, reopen=False)
    if poll is not None:
        tail = replace(tail, poll_interval_s=poll)

    cfg = RunConfig(
        outer_path=outer_file,
        inner_path=inner_file,
        scoreboard=scoreboard,
        contestant=contestant,
        tail=tail,
        tick_interval_s=tick if tick is not None else fc.tick_interval_s,
        offline=offline,
        events_path=events_file,
    )
    result = asyncio.run(run_scoring_session(cfg))
    console.print(_summary(result))
    if not result.ok:
        console.print(f"[red]{result.message or result.status}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]DONE[/green]")


@app.command()
def cancel(
    score_id: str = typer.Argument(..., help="Score id to cancel."),
    url: str | None = _URL_OPTION,
    key: str | None = _KEY_OPTION,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Cancel a scoring run left open on the scoreboard."""
    fc = _load_file_config(config)
    url = url or fc.scoreboard.url
    key = key or fc.scoreboard.api_key
    if not url or not key:
        raise typer.BadParameter("--url and --key are required.")

    async def _cancel() -> None:
        client = HttpScoreboardClient(base_url=url, api_key=key, timeout_s=fc.scoreboard.timeout_s)
        try:
            await client.cancel(score_id)
        finally:
            await client.aclose()

    try:
        asyncio.run(_cancel())
    except ScoreboardError as e:
        console.print(f"[red]Unable to cancel {score_id}:[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]Cancelled[/green] {score_id}")


if __name__ == "__main__":
    app()
