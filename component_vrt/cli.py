"""CLI entry point for component visual regression testing."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from component_vrt.errors import ConfigurationError, VrtError
from component_vrt.models.config import VrtConfig, parse_viewport_spec
from component_vrt.models.snapshot import ComparisonStatus, RunOutcome
from component_vrt.orchestrator import VrtOrchestrator

console = Console()

DEFAULT_CONFIG = "vrt-config.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(path: str) -> VrtConfig:
    """Load the config file; a missing default file means built-in defaults."""
    try:
        return VrtConfig.load(path)
    except FileNotFoundError:
        if path != DEFAULT_CONFIG:
            raise
        return VrtConfig()


def apply_overrides(
    cfg: VrtConfig,
    threshold: Optional[float] = None,
    output: Optional[str] = None,
    viewports: tuple[str, ...] = (),
    base_url: Optional[str] = None,
    root: Optional[str] = None,
    workers: Optional[int] = None,
) -> VrtConfig:
    """Return a copy of ``cfg`` with command line options applied."""
    data = cfg.model_dump()
    if threshold is not None:
        data["threshold"]["percentage"] = threshold
    if output:
        data["report_output_dir"] = output
        data["snapshot_dir"] = str(Path(output) / "snapshots")
    if viewports:
        data["viewports"] = [parse_viewport_spec(v).model_dump() for v in viewports]
    if base_url:
        data["base_url"] = base_url
    if root:
        data["art_root"] = root
    if workers:
        data["max_parallel_captures"] = workers
    try:
        return VrtConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def print_summary(outcome: RunOutcome) -> None:
    summary = outcome.summary
    table = Table(title="Visual Regression Results")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Total", str(summary.total))
    table.add_row("Passed", f"[green]{summary.passed}[/green]")
    table.add_row("Failed", f"[red]{summary.failed}[/red]")
    table.add_row("New", f"[blue]{summary.new}[/blue]")
    table.add_row("Errors", f"[yellow]{summary.skipped}[/yellow]")
    table.add_row("Duration", f"{summary.duration_ms / 1000:.2f}s")
    console.print(table)

    for r in outcome.results:
        if r.status == ComparisonStatus.FAILED:
            console.print(f"  [red]FAILED[/red] {r.identity} ({r.diff_percentage:.3f}%)")
        elif r.status == ComparisonStatus.ERROR:
            console.print(f"  [yellow]ERROR[/yellow] {r.identity}: {r.error_message}")


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str) -> None:
    """Visual regression testing for component gallery variants."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


def _config_from(ctx: click.Context) -> VrtConfig:
    path = ctx.obj["config_path"]
    try:
        return load_config(path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {path}[/red]")
        console.print("Run 'component-vrt init' to create a default config.")
        sys.exit(1)


@cli.command()
@click.option("--threshold", "-t", type=click.FloatRange(0, 100), default=None,
              help="Maximum diff percentage that still passes")
@click.option("--output", "-o", default=None, help="Output directory for reports and snapshots")
@click.option("--viewport", "viewports", multiple=True,
              help="Viewport preset or WxH[@scale]; repeatable")
@click.option("--update", "-u", is_flag=True, help="Accept all captures as new baselines")
@click.option("--json", "json_report", is_flag=True, help="Write a JSON report instead of HTML")
@click.option("--ci", is_flag=True, help="Exit non-zero when any snapshot fails")
@click.option("--fail-on-error", is_flag=True, help="In CI mode, also fail on capture errors")
@click.option("--base-url", "-b", default=None, help="Gallery dev server URL")
@click.option("--root", default=None, help="Directory to scan for art files")
@click.option("--workers", type=click.IntRange(1), default=None,
              help="Captures to run in parallel")
@click.pass_context
def run(
    ctx: click.Context,
    threshold: Optional[float],
    output: Optional[str],
    viewports: tuple[str, ...],
    update: bool,
    json_report: bool,
    ci: bool,
    fail_on_error: bool,
    base_url: Optional[str],
    root: Optional[str],
    workers: Optional[int],
) -> None:
    """Capture every variant and compare it against its baseline."""
    try:
        cfg = apply_overrides(
            _config_from(ctx), threshold=threshold, output=output, viewports=viewports,
            base_url=base_url, root=root, workers=workers,
        )
        orchestrator = VrtOrchestrator(cfg)
        outcome = orchestrator.run(update_baselines=update)
        formats = ["json"] if json_report else list(cfg.report_formats)
        if ci and cfg.ci.json_report and "json" not in formats:
            formats.append("json")
        reports = orchestrator.report(outcome, formats=formats)
    except VrtError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    print_summary(outcome)
    for fmt, path in reports.items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")

    if ci and outcome.summary.gates_ci(
        fail_on_diff=cfg.ci.fail_on_diff,
        fail_on_error=fail_on_error or cfg.ci.fail_on_error,
    ):
        console.print("[red]CI mode: exiting with error due to failures[/red]")
        sys.exit(1)


@cli.command()
@click.argument("pattern", required=False)
@click.option("--threshold", "-t", type=click.FloatRange(0, 100), default=None,
              help="Maximum diff percentage that still passes")
@click.option("--output", "-o", default=None, help="Output directory for reports and snapshots")
@click.option("--viewport", "viewports", multiple=True,
              help="Viewport preset or WxH[@scale]; repeatable")
@click.option("--base-url", "-b", default=None, help="Gallery dev server URL")
@click.option("--root", default=None, help="Directory to scan for art files")
@click.pass_context
def approve(
    ctx: click.Context,
    pattern: Optional[str],
    threshold: Optional[float],
    output: Optional[str],
    viewports: tuple[str, ...],
    base_url: Optional[str],
    root: Optional[str],
) -> None:
    """Re-run and approve failed snapshots, optionally filtered by PATTERN (e.g. "Button/*")."""
    try:
        cfg = apply_overrides(
            _config_from(ctx), threshold=threshold, output=output, viewports=viewports,
            base_url=base_url, root=root,
        )
        outcome, approved = VrtOrchestrator(cfg).approve(pattern)
    except VrtError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if outcome.summary.failed == 0:
        console.print("[yellow]No failed snapshots to approve[/yellow]")
        return
    console.print(f"[green]Approved {approved} snapshot(s)[/green]")


@cli.command()
@click.option("--output", "-o", default=None, help="Output directory for reports and snapshots")
@click.option("--viewport", "viewports", multiple=True,
              help="Viewport preset or WxH[@scale]; repeatable")
@click.option("--root", default=None, help="Directory to scan for art files")
@click.pass_context
def clean(
    ctx: click.Context,
    output: Optional[str],
    viewports: tuple[str, ...],
    root: Optional[str],
) -> None:
    """Remove baselines that no declared variant maps to.

    Pass the same --output and --viewport values the snapshots were captured
    with; baselines for viewports not listed count as orphans.
    """
    try:
        cfg = apply_overrides(_config_from(ctx), output=output, viewports=viewports, root=root)
        removed = VrtOrchestrator(cfg).clean()
    except VrtError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if not removed:
        console.print("No orphaned snapshots found.")
        return
    for path in removed:
        console.print(f"  removed {path.name}")
    console.print(f"[green]Cleaned {len(removed)} orphaned snapshot(s)[/green]")


@cli.command()
@click.option("--base-url", "-b", default="http://localhost:5173", help="Gallery dev server URL")
@click.pass_context
def init(ctx: click.Context, base_url: str) -> None:
    """Create a default configuration file."""
    config_path = Path(ctx.obj["config_path"])
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = VrtConfig(base_url=base_url)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print("  [blue]component-vrt run[/blue]")


if __name__ == "__main__":
    cli()
