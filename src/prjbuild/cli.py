"""Click command line for prjbuild.

This module is the composition root: it loads configuration, wires the
infrastructure adapters into the application services, and renders results
with rich.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

import click

from prjbuild.application.archive_status import ArchiveStatusOracle
from prjbuild.application.discovery import DiscoveryService, UnitGraph
from prjbuild.application.operations import BatchRunner
from prjbuild.console import (
    error_console,
    print_batch_result,
    print_error,
    print_graph,
    print_header,
    print_order,
)
from prjbuild.domain.exceptions import ConfigurationAbsent, ConfigurationError
from prjbuild.domain.interfaces import ArchiveWriterInterface, BuildToolchainInterface
from prjbuild.domain.models import BatchResult, Project
from prjbuild.domain.sequencing import dependency_order
from prjbuild.domain.settings import Settings
from prjbuild.infrastructure.archive import ZipArchiveWriter
from prjbuild.infrastructure.config import (
    SETTINGS_FILE_NAME,
    find_settings_file,
    load_settings,
)
from prjbuild.infrastructure.manifests import MsBuildManifestReader
from prjbuild.infrastructure.toolchain import DotnetToolchain
from prjbuild.logging_setup import setup_logging

logger = logging.getLogger(__name__)

EXIT_UNIT_FAILED = 1
EXIT_CONFIGURATION = 2


@dataclass
class AppContext:
    """Per-invocation state shared by every command."""

    config_path: Path | None = None
    verbose: bool = False
    toolchain: BuildToolchainInterface | None = None
    archive_writer: ArchiveWriterInterface | None = None

    def settings(self) -> Settings:
        try:
            path = self.config_path or find_settings_file(Path.cwd())
            return load_settings(path)
        except ConfigurationAbsent as e:
            print_error(str(e), hint=f"Create {SETTINGS_FILE_NAME} or pass --config")
        except ConfigurationError as e:
            print_error(str(e))
        raise click.exceptions.Exit(EXIT_CONFIGURATION)

    def discover(self) -> UnitGraph:
        graph = DiscoveryService(self.settings(), MsBuildManifestReader()).discover()
        ArchiveStatusOracle().refresh(graph)
        return graph

    def runner(self) -> BatchRunner:
        return BatchRunner(
            toolchain=self.toolchain or DotnetToolchain(),
            archive_writer=self.archive_writer or ZipArchiveWriter(),
        )


F = TypeVar("F", bound=Callable[..., Any])


def selection_options(func: F) -> F:
    """
    Decorator adding project selection to a click command.

    Options added:
        NAMES: Project or solution names (a solution selects all its projects)
        --all: Select every discovered project
        --include-retired: Keep retired solutions and projects in the selection
    """

    @click.argument("names", nargs=-1)
    @click.option("--all", "select_all", is_flag=True, help="Select every project")
    @click.option(
        "--include-retired",
        is_flag=True,
        help="Include retired solutions and projects",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _select(
    graph: UnitGraph, names: tuple[str, ...], select_all: bool, include_retired: bool
) -> list[Project]:
    if not names and not select_all:
        raise click.UsageError("Name at least one project or solution, or pass --all")

    if select_all:
        return graph.select_all(include_retired=include_retired)

    selected, unknown = graph.select(names, include_retired=include_retired)
    for name in unknown:
        error_console.print(f"[yellow]No project or solution named '{name}'[/yellow]")
    if not selected:
        raise click.UsageError("Nothing selected")
    return selected


def _finish(result: BatchResult, verbose: bool) -> None:
    print_batch_result(result, verbose=verbose)
    if not result.succeeded:
        raise click.exceptions.Exit(EXIT_UNIT_FAILED)


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Path to {SETTINGS_FILE_NAME} (default: search upward from cwd)",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to log file",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose (DEBUG) logging to console",
)
@click.pass_context
def cli(
    ctx: click.Context, config_path: Path | None, log_file: str | None, verbose: bool
) -> None:
    """Discover solutions, build them in dependency order and archive them."""
    setup_logging("prjbuild", log_file=log_file, verbose=verbose)
    app = ctx.ensure_object(AppContext)
    app.config_path = config_path
    app.verbose = verbose


@cli.command(name="list")
@click.pass_obj
def list_units(app: AppContext) -> None:
    """Show every solution and project with version and archive state."""
    graph = app.discover()
    print_header("prjbuild", f"{len(graph.solutions)} solutions")
    print_graph(graph)


@cli.command()
@selection_options
@click.pass_obj
def order(
    app: AppContext, names: tuple[str, ...], select_all: bool, include_retired: bool
) -> None:
    """Print the dependency order for a selection."""
    graph = app.discover()
    print_order(dependency_order(_select(graph, names, select_all, include_retired)))


def _toolchain_command(name: str, summary: str) -> None:
    @cli.command(name=name, help=summary)
    @selection_options
    @click.pass_obj
    def command(
        app: AppContext, names: tuple[str, ...], select_all: bool, include_retired: bool
    ) -> None:
        graph = app.discover()
        selection = _select(graph, names, select_all, include_retired)
        _finish(getattr(app.runner(), name.replace("-", "_"))(selection), app.verbose)


_toolchain_command("restore", "Restore package dependencies for a selection.")
_toolchain_command(
    "update-packages", "Update outdated package references for a selection."
)
_toolchain_command("build", "Build a selection in dependency order.")
_toolchain_command("clean", "Clean build outputs (bin/obj) for a selection.")
_toolchain_command("rebuild", "Clean then build a selection.")
_toolchain_command("publish", "Publish a selection for each supported runtime.")


@cli.command()
@selection_options
@click.option("--force", is_flag=True, help="Rewrite archives that already exist")
@click.pass_obj
def archive(
    app: AppContext,
    names: tuple[str, ...],
    select_all: bool,
    include_retired: bool,
    force: bool,
) -> None:
    """Publish and archive a selection, then archive solution sources."""
    graph = app.discover()
    selection = _select(graph, names, select_all, include_retired)
    _finish(app.runner().archive(selection, force=force, graph=graph), app.verbose)


if __name__ == "__main__":
    cli()
