"""Rich console utilities for the prjbuild command line."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from prjbuild.application.discovery import UnitGraph
from prjbuild.domain.exceptions import VersionUndefined
from prjbuild.domain.models import BatchResult, OperationStatus, Project
from prjbuild.domain.naming import solution_version_label
from prjbuild.domain.versioning import (
    format_version,
    primary_version,
    validate_solution,
    validate_unit,
)

# Shared console instances
console = Console()
error_console = Console(stderr=True)

_STATUS_STYLES = {
    OperationStatus.SUCCEEDED: "green",
    OperationStatus.FAILED: "bold red",
    OperationStatus.SKIPPED: "yellow",
}


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print a styled header panel."""
    content = Text(title, style="bold blue")
    if subtitle:
        content.append(f"\n{subtitle}", style="dim")
    console.print(Panel(content, expand=False))


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def _version_label(project: Project) -> str:
    version = primary_version(project)
    return format_version(version) if version is not None else "-"


def _flag(value: bool) -> str:
    return "[green]yes[/green]" if value else "[red]no[/red]"


def print_graph(graph: UnitGraph) -> None:
    """Print solutions and projects with version and archive state."""
    table = Table(show_header=True)
    table.add_column("Solution / Project", style="cyan")
    table.add_column("Version")
    table.add_column("Consistent")
    table.add_column("Archived")
    table.add_column("Runtimes")
    table.add_column("Retired", style="dim")

    for solution in graph.solutions:
        try:
            solution_version = solution_version_label(solution)
        except VersionUndefined:
            solution_version = "-"
        table.add_row(
            f"[bold]{solution.name}[/bold]",
            solution_version,
            _flag(validate_solution(solution.projects)),
            _flag(solution.are_all_archives_present),
            "",
            "yes" if solution.is_retired else "",
        )
        for project in solution.projects:
            table.add_row(
                f"  {project.name}",
                _version_label(project),
                _flag(validate_unit(project.version_sources)),
                _flag(project.is_archived),
                ", ".join(project.supported_runtimes),
                "yes" if project.is_retired else "",
            )

    console.print(table)


def print_order(projects: Sequence[Project]) -> None:
    """Print a processing order, one project per line."""
    for i, project in enumerate(projects, 1):
        console.print(f"  {i:>3}. {project.qualified_name}")


def print_batch_result(result: BatchResult, verbose: bool = False) -> None:
    """Print per-unit outcomes of a batch operation."""
    table = Table(show_header=True, box=None)
    table.add_column("Unit", style="cyan")
    table.add_column("Operation", style="magenta")
    table.add_column("Status")
    table.add_column("Detail")

    for r in result.results:
        style = _STATUS_STYLES[r.status]
        detail = r.messages[-1] if r.messages else ""
        table.add_row(
            Text(r.unit_name), r.operation, Text(r.status.value, style=style), Text(detail)
        )
    console.print(table)

    if verbose:
        for r in result.results:
            if not r.messages:
                continue
            console.print(f"\n[cyan]--- {r.unit_name} ({r.operation}) ---[/cyan]")
            for line in r.messages:
                console.print(f"  {line}", markup=False, highlight=False)

    if result.succeeded:
        console.print(Panel(f"{result.operation} completed", border_style="green"))
    else:
        names = ", ".join(r.unit_name for r in result.failed)
        console.print(
            Panel(f"{result.operation} failed for: {names}", border_style="red")
        )
