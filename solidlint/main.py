"""solidlint CLI - design-principle checks for JavaScript and TypeScript."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click
import typer
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from solidlint.analyzer.engine import RuleEngine
from solidlint.analyzer.parser import LanguageParser
from solidlint.analyzer.reporter import Diagnostic, Severity
from solidlint.config import __version__, get_config, load_rule_settings
from solidlint.rules.catalog import RULES, build_detectors
from solidlint.utils.logger import setup_logging
from solidlint.utils.safe_console import SafeConsole

app = typer.Typer(
    name="solidlint",
    help="SOLID and clean-architecture checks for JavaScript and TypeScript",
    add_completion=False
)
console = SafeConsole()

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = {
    'node_modules', 'bower_components', 'dist', 'build', 'out', 'coverage',
    '.git', '.next', '.nuxt', '.cache', 'vendor',
}

SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


def discover_files(paths: List[Path]) -> List[Path]:
    """Expand files and directories into the supported source files under them.

    Explicit file arguments are kept even inside excluded directories.
    """
    files = []
    seen = set()
    for path in paths:
        if path.is_file():
            candidates = [path] if LanguageParser.is_supported(path) else []
        else:
            candidates = sorted(
                p for p in path.rglob('*')
                if p.is_file() and LanguageParser.is_supported(p)
                and not any(part in EXCLUDED_DIRS for part in p.relative_to(path).parts)
            )
        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                files.append(candidate)
    return files


def count_by_severity(diagnostics: List[Diagnostic]) -> Dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for diagnostic in diagnostics:
        counts[diagnostic.severity.value] += 1
    return counts


def run_analysis(engine: RuleEngine, files: List[Path],
                 show_progress: bool) -> Tuple[List[Diagnostic], List[Path]]:
    """Analyze every file.

    Returns:
        (diagnostics in file order, files that could not be analyzed)
    """
    diagnostics = []
    skipped = []
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
        disable=not show_progress,
    )
    with progress:
        task = progress.add_task("[cyan]Analyzing...", total=len(files))
        for file_path in files:
            result = engine.analyze_file(file_path)
            if result is None:
                skipped.append(file_path)
            else:
                diagnostics.extend(result)
            progress.advance(task)
    return diagnostics, skipped


def print_table(diagnostics: List[Diagnostic], file_count: int):
    if not diagnostics:
        console.print(f"[bold green]✓ No problems found in {file_count} file(s)[/bold green]")
        return

    table = Table(title="Design Violations", show_header=True, header_style="bold magenta")
    table.add_column("Location", style="cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Rule", style="magenta")
    table.add_column("Message", no_wrap=False)

    for diagnostic in diagnostics:
        style = SEVERITY_STYLES[diagnostic.severity]
        table.add_row(
            escape(str(diagnostic.location)),
            f"[{style}]{diagnostic.severity.value}[/{style}]",
            diagnostic.rule_id,
            escape(diagnostic.message),
        )
    console.print(table)

    counts = count_by_severity(diagnostics)
    console.print(
        f"\n[bold]{len(diagnostics)} problem(s)[/bold] in {file_count} file(s): "
        f"{counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info"
    )


def print_json(diagnostics: List[Diagnostic], file_count: int):
    payload = {
        'files': file_count,
        'summary': count_by_severity(diagnostics),
        'diagnostics': [diagnostic.to_dict() for diagnostic in diagnostics],
    }
    typer.echo(json.dumps(payload, indent=2))


def fail(message: str, code: int = 2):
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code)


@app.command()
def check(
    paths: Optional[List[Path]] = typer.Argument(None, help="Files or directories to analyze (default: current directory)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Rules file (default: $SOLIDLINT_CONFIG or .solidlint.json)"),
    output_format: str = typer.Option("table", "--format", "-f", click_type=click.Choice(["table", "json"]), help="Output format"),
    only: Optional[List[str]] = typer.Option(None, "--rule", "-r", help="Run only this rule (repeatable)"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=1, help="Syntax tree traversal depth bound"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Analyze JavaScript/TypeScript sources and report design violations.

    Exits with 1 when any error-severity violation is found and with 2 on
    usage or configuration problems.
    """
    config = get_config()
    try:
        setup_logging("DEBUG" if verbose else config.log_level, SafeConsole(stderr=True))
    except ValueError as e:
        fail(str(e))

    targets = paths or [Path(".")]
    missing = [p for p in targets if not p.exists()]
    if missing:
        fail(f"Path does not exist: {missing[0]}")

    try:
        if config_path is not None:
            settings = load_rule_settings(config_path, required=True)
        else:
            settings = load_rule_settings(config.rules_file)
        detectors = build_detectors(settings, only=only)
        depth = max_depth or config.max_depth
    except (FileNotFoundError, ValueError) as e:
        fail(str(e))

    files = discover_files(targets)
    logger.debug("Discovered %d file(s), %d rule(s) active", len(files), len(detectors))

    engine = RuleEngine(detectors, max_depth=depth)
    diagnostics, skipped = run_analysis(
        engine, files, show_progress=output_format == "table" and console.is_terminal
    )
    for file_path in skipped:
        logger.warning("Skipped unreadable file: %s", file_path)

    if output_format == "json":
        print_json(diagnostics, len(files))
    else:
        print_table(diagnostics, len(files))

    if any(d.severity == Severity.ERROR for d in diagnostics):
        raise typer.Exit(1)


@app.command("rules")
def list_rules():
    """List available rules and whether they run by default."""
    table = Table(title="Available Rules", show_header=True, header_style="bold cyan")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Default", style="green")
    table.add_column("Description", no_wrap=False)

    for rule_id, detector_cls in RULES.items():
        table.add_row(
            rule_id,
            "on" if detector_cls.enabled_by_default else "off",
            detector_cls.description,
        )
    console.print(table)


def version_callback(value: bool):
    if value:
        typer.echo(f"solidlint {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True,
                                 help="Show version and exit"),
):
    """solidlint - SOLID and clean-architecture checks for JavaScript and TypeScript."""


if __name__ == "__main__":
    app()
