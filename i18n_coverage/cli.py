"""Command-line interface for the i18n coverage service."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .cache.store import CacheStore
from .config import config
from .coverage import CoverageCalculator, coverage_color, coverage_status, format_coverage_text
from .errors import CoverageError
from .gateway.github import GitHubGateway
from .models.repository import RepositoryCoordinate
from .utils.logger_utils import LoggerUtils
from .web.services.badge_generator import BadgeGenerator

console = Console()

T = TypeVar("T")

STATUS_STYLES = {"excellent": "green", "good": "yellow", "fair": "dark_orange", "poor": "red"}


def _calculator() -> CoverageCalculator:
    return CoverageCalculator(GitHubGateway(settings=config), CacheStore(config), config)


def _run(action: Callable[[CoverageCalculator], Awaitable[T]]) -> T:
    """Run an async action against a fresh calculator, reporting engine errors."""
    async def runner() -> T:
        calculator = _calculator()
        try:
            return await action(calculator)
        finally:
            await calculator.close()

    try:
        return asyncio.run(runner())
    except CoverageError as err:
        console.print(f"[red]{err.code.value}:[/red] {err.message}")
        raise click.Abort()


def _coordinate(repository: str, path: Optional[str]) -> RepositoryCoordinate:
    coordinate = RepositoryCoordinate.parse(repository, path)
    if not coordinate.owner or not coordinate.repo:
        raise click.BadParameter("expected OWNER/REPO", param_hint="REPOSITORY")
    return coordinate


def _styled_status(percentage: float) -> str:
    status = coverage_status(percentage)
    style = STATUS_STYLES[status]
    return f"[{style}]{status}[/{style}]"


@click.group()
@click.version_option(version="0.1.0")
@click.option("--log-level", default=None, help="Logging level (defaults to LOG_LEVEL)")
def cli(log_level: Optional[str]):
    """Translation coverage for GitHub repositories."""
    LoggerUtils.configure(log_level or config.log_level, config.log_file)


@cli.command()
@click.argument("repository")
@click.option("--lang", "-l", default=None, help="Single language to report")
@click.option("--path", "-p", default=None, help="Explicit i18n directory in the repository")
def coverage(repository: str, lang: Optional[str], path: Optional[str]):
    """Show translation coverage of REPOSITORY (OWNER/REPO)."""
    coordinate = _coordinate(repository, path)

    if lang:
        result = _run(lambda calculator: calculator.language_coverage(coordinate, lang))
        table = Table(title=f"{coordinate.full_name} - {lang}")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Coverage", f"{result.coverage:.1f}%")
        table.add_row("Completion", f"{result.completion:.1f}%")
        table.add_row("Translated", f"{result.translated}/{result.total}")
        table.add_row("Missing", str(result.missing))
        table.add_row("TODO placeholders", str(result.todo_count))
        table.add_row("Status", _styled_status(result.coverage))
        console.print(table)
        if result.is_fallback:
            console.print(f"[yellow]Served from fallback (last updated {result.last_updated})[/yellow]")
        return

    summary = _run(lambda calculator: calculator.repository_coverage(coordinate))

    table = Table(title=f"Coverage for {coordinate.full_name}")
    table.add_column("Language", style="cyan")
    table.add_column("Coverage", justify="right")
    table.add_column("Completion", justify="right")
    table.add_column("Translated", justify="right")
    table.add_column("Missing", justify="right")
    table.add_column("Status")

    for language, result in summary.languages.items():
        name = f"{language} (base)" if language == summary.base_language else language
        partial = "" if result.is_fully_parsed else " [dim]*[/dim]"
        table.add_row(
            name + partial,
            f"{result.coverage:.1f}%",
            f"{result.completion:.1f}%",
            f"{result.translated}/{result.total}",
            str(result.missing),
            _styled_status(result.coverage),
        )

    console.print(table)
    console.print(Panel(
        f"[bold]Overall coverage:[/bold] {summary.overall.coverage:.1f}%\n"
        f"[bold]Overall completion:[/bold] {summary.overall.completion:.1f}%\n"
        f"[dim]Languages:[/dim] {format_coverage_text(summary)}\n"
        f"[dim]Base keys:[/dim] {summary.overall.total_keys}",
        title="Summary",
    ))
    if summary.is_fallback:
        console.print(f"[yellow]Served from fallback (last updated {summary.last_updated})[/yellow]")


@cli.command()
@click.argument("repository")
@click.option("--path", "-p", default=None, help="Explicit i18n directory in the repository")
def structure(repository: str, path: Optional[str]):
    """Show the detected i18n layout of REPOSITORY (OWNER/REPO)."""
    coordinate = _coordinate(repository, path)
    detected = _run(lambda calculator: calculator.detector.detect(coordinate))

    table = Table(title=f"i18n structure of {coordinate.full_name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Base path", detected.base_path)
    table.add_row("Pattern", detected.pattern.value)
    table.add_row("Languages", ", ".join(detected.languages))
    table.add_row("Namespaces", ", ".join(sorted(detected.namespaces)) or "[dim]-[/dim]")
    console.print(table)


@cli.command()
@click.argument("repository")
@click.option("--lang", "-l", default=None, help="Language badge instead of the overall badge")
@click.option("--path", "-p", default=None, help="Explicit i18n directory in the repository")
@click.option("--output", "-o", "output_path", type=click.Path(), default=None,
              help="SVG file to write (defaults to <repo>[-<lang>].svg)")
@click.option("--style", type=click.Choice(["flat", "flat-square", "plastic"]), default="flat")
@click.option("--logo", type=click.Choice(["translate", "github"]), default=None)
@click.option("--label", default=None, help="Badge label")
def badge(
    repository: str,
    lang: Optional[str],
    path: Optional[str],
    output_path: Optional[str],
    style: str,
    logo: Optional[str],
    label: Optional[str],
):
    """Write a coverage badge for REPOSITORY (OWNER/REPO) as SVG."""
    coordinate = _coordinate(repository, path)
    generator = BadgeGenerator()

    if lang:
        result = _run(lambda calculator: calculator.language_coverage(coordinate, lang))
        svg = generator.generate_svg(
            label or lang, format_coverage_text(result, lang), coverage_color(result.coverage),
            style=style, logo=logo,
        )
    else:
        summary = _run(lambda calculator: calculator.repository_coverage(coordinate))
        svg = generator.generate_svg(
            label or "i18n coverage", format_coverage_text(summary),
            coverage_color(summary.overall.coverage), style=style, logo=logo,
        )

    output = Path(output_path or (f"{coordinate.repo}-{lang}.svg" if lang else f"{coordinate.repo}.svg"))
    output.write_text(svg, encoding="utf-8")
    console.print(f"[green]Wrote:[/green] {output}")


@cli.command()
def quota():
    """Show the remaining GitHub API budget of the current credential."""
    for warning in config.validate():
        console.print(f"[yellow]{warning}[/yellow]")

    credential = _run(lambda calculator: calculator.gateway.refresh_quota())

    table = Table(title="GitHub API quota")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Credential", credential.label)
    table.add_row("Remaining", str(credential.remaining))
    table.add_row("Limit", str(credential.limit))
    if credential.reset_at:
        reset = datetime.fromtimestamp(credential.reset_at, tz=timezone.utc)
        table.add_row("Resets at", reset.strftime("%Y-%m-%d %H:%M:%S UTC"))
    console.print(table)


if __name__ == "__main__":
    cli()
