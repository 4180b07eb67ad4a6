"""CLI entry point for the snapshot engine."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from snapshotter.errors import SnapshotterError
from snapshotter.models.config import SnapshotConfig
from snapshotter.models.result import SummaryReport
from snapshotter.orchestrator import Orchestrator

DEFAULT_CONFIG = ".snapshotter.json"

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> SnapshotConfig:
    try:
        return SnapshotConfig.load(path)
    except FileNotFoundError:
        err_console.print(f"[red]Config file not found: {path}[/red]")
        err_console.print("Run 'snapshotter init' to create a default config.")
        sys.exit(1)
    except ValidationError as e:
        err_console.print(f"[red]Invalid config {path}:[/red]\n{escape(str(e))}")
        sys.exit(1)


def _orchestrator(config: str) -> Orchestrator:
    cfg = _load_config(config)
    return Orchestrator(cfg, base_dir=Path(config).resolve().parent)


def _summary_table(summary: SummaryReport, failed: int | None = None) -> Table:
    table = Table(title="Snapshot Summary")
    table.add_column("Result", style="bold")
    table.add_column("Count")
    table.add_row("New", f"[blue]{len(summary.new_examples)}[/blue]")
    table.add_row("Diff", f"[yellow]{len(summary.diff_examples)}[/yellow]")
    table.add_row("Okay", f"[green]{len(summary.okay_examples)}[/green]")
    if failed is not None:
        table.add_row("Failed", f"[red]{failed}[/red]")
    return table


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual regression snapshots for rendered examples"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def run(config: str) -> None:
    """Render all examples and compare them against their baselines."""
    orchestrator = _orchestrator(config)
    try:
        outcome = orchestrator.run()
    except (SnapshotterError, FileNotFoundError, ValidationError) as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    console.print(_summary_table(outcome.summary, failed=len(outcome.failures)))
    for entry in outcome.summary.diff_examples:
        console.print(f"  [yellow]diff[/yellow] {escape(entry.description)} @{entry.viewport}")
    console.print(f"Summary: [blue]{orchestrator.store.summary_path}[/blue]")
    sys.exit(outcome.exit_code)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def summary(config: str) -> None:
    """Show the summary of the last run."""
    orchestrator = _orchestrator(config)
    try:
        report = orchestrator.load_summary()
    except FileNotFoundError as e:
        err_console.print(f"[yellow]{escape(str(e))}[/yellow]")
        sys.exit(1)
    console.print(_summary_table(report))


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def clean(config: str) -> None:
    """Delete all snapshots and the result summary."""
    orchestrator = _orchestrator(config)
    if orchestrator.clean():
        console.print(f"[green]Removed {orchestrator.store.root}[/green]")
    else:
        console.print("[yellow]Nothing to clean[/yellow]")


@cli.command()
@click.option("--source", "-s", multiple=True, default=["examples/*.py"], help="Example file or glob")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def init(source: tuple[str, ...], config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = SnapshotConfig(source_files=list(source))
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nDefine examples in your source files, e.g.:")
    console.print("  [blue]snapshot.define('Button', lambda: '<button>OK</button>')[/blue]")
    console.print("\nThen run:")
    console.print("  [blue]snapshotter run[/blue]")


if __name__ == "__main__":
    cli()
