"""CLI for the Design Grading Engine.

Provides command-line interface for grading design workbooks against the
fixed rubric.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import GraderConfig, find_config_file, load_config, save_default_config
from .grader import WorkbookGrader, run_advisories, run_preflight
from .loader import WorkbookLoadError, load_workbook
from .schema import AdvisoryResult, ScoreReport

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool, config: GraderConfig) -> None:
    """Route library logging through rich on stderr."""
    level = logging.DEBUG if verbose else getattr(logging, config.output.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def resolve_config(config_path: Optional[str]) -> GraderConfig:
    """Load an explicit config file, or the first one found on the search path."""
    path = Path(config_path) if config_path else find_config_file()
    return load_config(path) if path else GraderConfig()


@click.group()
@click.version_option(version="1.0.0", prog_name="design-grader")
def main():
    """Design Grading Engine.

    Grades aircraft design workbooks against a fixed rubric and explains
    every deduction.
    """
    pass


@main.command("grade")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results (default: stdout)"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.option(
    "--advisory", "-a",
    is_flag=True,
    help="Also run the advisory rule sets (never scored)"
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to grader configuration YAML"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show the full feedback log and debug logging"
)
def grade_cmd(
    paths: tuple,
    out: Optional[str],
    json_output: bool,
    advisory: bool,
    config_path: Optional[str],
    verbose: bool,
):
    """Grade one or more design workbooks.

    Examples:
        design-grader grade design.xlsx
        design-grader grade team1.xlsx team2.xlsx -j -o scores.json
        design-grader grade design.xlsx --advisory -v
    """
    try:
        config = resolve_config(config_path)
        setup_logging(verbose, config)
        grader = WorkbookGrader(config=config)

        results = []
        for path in paths:
            workbook = load_workbook(path, config)
            report = grader.grade(workbook)
            advisories = run_advisories(workbook) if advisory else []
            results.append((report, advisories))

        if json_output:
            output_json(results, out, include_advisories=advisory)
        else:
            for report, advisories in results:
                display_report(report, verbose, config.output.show_bucket_table)
                if advisories:
                    display_advisories(advisories)
            if out:
                output_json(results, out, include_advisories=advisory)
                console.print(f"\n[green]Results saved to {out}[/green]")

    except (WorkbookLoadError, ValidationError, yaml.YAMLError, OSError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


@main.command("preflight")
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to grader configuration YAML"
)
def preflight_cmd(path: str, config_path: Optional[str]):
    """Check a workbook for missing geometry and Excel errors without grading.

    Exits with status 1 when the geometry inputs are incomplete.
    """
    try:
        workbook = load_workbook(path, resolve_config(config_path))
    except (WorkbookLoadError, ValidationError, yaml.YAMLError, OSError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    result = run_preflight(workbook)
    for note in result.notes:
        console.print(f"[yellow]•[/yellow] {note}")

    if result.passed:
        console.print(f"[green]✓ Geometry inputs complete: {path}[/green]")
        sys.exit(0)

    console.print(f"[red]✗ {result.geometry_message}[/red]")
    sys.exit(1)


def display_report(report: ScoreReport, verbose: bool, show_bucket_table: bool = True):
    """Display a score report in formatted text."""
    color = "green" if report.score >= 85 else "yellow" if report.score > 0 else "red"
    console.print(Panel(
        f"[bold]{report.display_name or 'Workbook'}[/bold]\n\n"
        f"Threshold: {report.threshold_score:.1f} / 85 | Objectives: +{report.objective_score:.1f} / 15\n"
        f"Score: [{color}]{report.score:.1f} / {report.max_score:g}[/{color}]",
        title="Grade",
    ))

    if report.short_circuited:
        console.print(f"[red]{report.score_line}[/red]")
        return

    if show_bucket_table:
        table = Table(title="Buckets")
        table.add_column("Bucket", style="cyan")
        table.add_column("Result")
        table.add_column("Reasons", style="dim")
        for bucket in report.buckets:
            result = "[green]PASS[/green]" if bucket.passed else f"[red]FAIL (-{bucket.deduction:g})[/red]"
            table.add_row(bucket.label, result, "; ".join(bucket.reasons))
        console.print(table)

        objectives = ", ".join(
            f"{label} {'[green]PASS[/green]' if met else '[red]FAIL[/red]'}"
            for label, met in report.objectives.items()
        )
        console.print(f"Objectives: {objectives}")

    if report.checks_not_met:
        console.print(f"\n[yellow]Checks not met:[/yellow] {', '.join(report.checks_not_met)}")

    if verbose:
        console.print("\n[bold]Feedback log:[/bold]")
        console.print(report.feedback_log, markup=False, highlight=False)
    console.print()


def display_advisories(advisories: list[AdvisoryResult]):
    """Display advisory results."""
    console.print("[bold]Advisories (not scored):[/bold]")
    for result in advisories:
        if not result.feedback:
            console.print(f"  [green]✓[/green] {result.name}")
            continue
        console.print(f"  [yellow]•[/yellow] {result.name} ({result.delta:+d})")
        for line in result.feedback:
            console.print(f"      {line}", markup=False)
    console.print()


def output_json(results: list, out_path: Optional[str], include_advisories: bool = False):
    """Output reports as JSON; a single workbook yields a single object."""
    payload = []
    for report, advisories in results:
        data = report.model_dump(mode="json")
        if include_advisories:
            data["advisories"] = [a.model_dump(mode="json") for a in advisories]
        payload.append(data)
    json_str = json.dumps(payload[0] if len(payload) == 1 else payload, indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="grader-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default grader configuration file."""
    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out} (use --force to overwrite)")
        sys.exit(1)

    try:
        save_default_config(out_path)
        console.print(f"[green]✓[/green] Config file created: {out}")
    except OSError as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
