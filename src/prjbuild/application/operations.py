"""
BatchRunner: runs an operation over an explicit selection of projects.

The selection is always put in dependency order first, so a referenced
project is processed before its referrer. Each unit reports its own result;
a failure on one unit never stops the rest of the batch.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Sequence
from pathlib import Path

from prjbuild.application.archive_status import ArchiveStatusOracle, is_archivable
from prjbuild.application.discovery import UnitGraph
from prjbuild.domain.exceptions import VersionUndefined
from prjbuild.domain.interfaces import ArchiveWriterInterface, BuildToolchainInterface
from prjbuild.domain.models import (
    BatchResult,
    OperationResult,
    OperationStatus,
    Project,
    Solution,
    ToolchainResult,
)
from prjbuild.domain.naming import runtime_archive_path, source_archive_path
from prjbuild.domain.sequencing import dependency_order

logger = logging.getLogger(__name__)

# Directories removed by clean, relative to the project directory
BUILD_OUTPUT_DIRS = ("bin", "obj")


def publish_directory(project: Project, runtime: str) -> Path:
    """Where a project's publish output for one runtime is placed."""
    return project.root_path / "bin" / "publish" / runtime


class BatchRunner:
    """
    Orchestrates toolchain and archive operations across a selection.

    Owns no graph state; the selection is passed into every call.
    """

    def __init__(
        self,
        toolchain: BuildToolchainInterface,
        archive_writer: ArchiveWriterInterface,
        oracle: ArchiveStatusOracle | None = None,
    ):
        """
        Args:
            toolchain: External build/restore/publish/clean adapter
            archive_writer: Adapter that writes archives and manifests
            oracle: Archive status oracle (a default one if None)
        """
        self._toolchain = toolchain
        self._writer = archive_writer
        self._oracle = oracle or ArchiveStatusOracle()

    # -------------------------------------------------------------------------
    # Toolchain operations
    # -------------------------------------------------------------------------

    def restore(self, selection: Sequence[Project]) -> BatchResult:
        return self._run_each(
            "restore", selection, lambda p: self._toolchain.restore(p.manifest_path)
        )

    def build(self, selection: Sequence[Project]) -> BatchResult:
        return self._run_each(
            "build", selection, lambda p: self._toolchain.build(p.manifest_path)
        )

    def update_packages(self, selection: Sequence[Project]) -> BatchResult:
        """Update outdated package references, referenced projects first."""
        return self._run_each(
            "update-packages",
            selection,
            lambda p: self._toolchain.update_packages(p.manifest_path),
        )

    def clean(self, selection: Sequence[Project]) -> BatchResult:
        return self._run_each("clean", selection, self._clean_project)

    def rebuild(self, selection: Sequence[Project]) -> BatchResult:
        def rebuild_project(project: Project) -> ToolchainResult:
            cleaned = self._clean_project(project)
            if not cleaned.success:
                return cleaned
            built = self._toolchain.build(project.manifest_path)
            return ToolchainResult(built.success, cleaned.output + built.output)

        return self._run_each("rebuild", selection, rebuild_project)

    def publish(self, selection: Sequence[Project]) -> BatchResult:
        def publish_project(project: Project) -> ToolchainResult:
            output: list[str] = []
            for runtime in project.supported_runtimes:
                result = self._toolchain.publish(
                    project.manifest_path, runtime, publish_directory(project, runtime)
                )
                output.extend(result.output)
                if not result.success:
                    output.append(f"Publish failed for runtime {runtime}")
                    return ToolchainResult(False, tuple(output))
            return ToolchainResult(True, tuple(output))

        return self._run_each("publish", selection, publish_project)

    def _clean_project(self, project: Project) -> ToolchainResult:
        result = self._toolchain.clean(project.manifest_path)
        output = list(result.output)
        for name in BUILD_OUTPUT_DIRS:
            directory = project.root_path / name
            if not directory.is_dir():
                continue
            try:
                shutil.rmtree(directory)
            except OSError as e:
                logger.error("Error deleting %s: %s", directory, e)
                output.append(f"Error: could not delete {directory}: {e}")
                return ToolchainResult(False, tuple(output))
            output.append(f"Deleted directory: {directory}")
            logger.info("Deleted %s directory for project %s", name, project.name)
        return ToolchainResult(result.success, tuple(output))

    def _run_each(
        self,
        operation: str,
        selection: Sequence[Project],
        action: Callable[[Project], ToolchainResult],
    ) -> BatchResult:
        results = []
        for project in dependency_order(selection):
            logger.info("Running %s for project %s", operation, project.qualified_name)
            try:
                outcome = action(project)
            except OSError as e:
                logger.error("Error during %s of %s: %s", operation, project.name, e)
                outcome = ToolchainResult(False, (f"Error: {e}",))

            if outcome.success:
                logger.info("Completed %s for project %s", operation, project.name)
                status = OperationStatus.SUCCEEDED
            else:
                logger.warning("%s failed for project %s", operation, project.name)
                status = OperationStatus.FAILED
            results.append(
                OperationResult(project.qualified_name, operation, status, outcome.output)
            )
        return BatchResult(operation, tuple(results))

    # -------------------------------------------------------------------------
    # Archiving
    # -------------------------------------------------------------------------

    def archive(
        self,
        selection: Sequence[Project],
        force: bool = False,
        graph: UnitGraph | None = None,
    ) -> BatchResult:
        """Publish and archive each selected project, then its solution sources.

        Args:
            selection: Projects to archive
            force: Rewrite archives that already exist
            graph: If given, its archive flags are refreshed afterwards

        Returns:
            One result per project, followed by one per touched solution
        """
        results: list[OperationResult] = []
        solutions: list[Solution] = []

        for project in dependency_order(selection):
            if project.solution not in solutions:
                solutions.append(project.solution)
            results.append(self._archive_project(project, force))

        for solution in solutions:
            results.append(self._archive_solution_sources(solution, force))

        if graph is not None:
            self._oracle.refresh(graph)
        return BatchResult("archive", tuple(results))

    def _archive_project(self, project: Project, force: bool) -> OperationResult:
        name = project.qualified_name
        if project.is_retired:
            return OperationResult(
                name, "archive", OperationStatus.SKIPPED, ("Project is retired",)
            )
        if not is_archivable(project):
            return OperationResult(
                name,
                "archive",
                OperationStatus.SKIPPED,
                ("Project is excluded from archiving",),
            )
        if not force and self._oracle.is_project_archived(project):
            logger.info("Project %s is already archived", project.name)
            return OperationResult(
                name, "archive", OperationStatus.SKIPPED, ("Already archived",)
            )

        logger.info("Archiving project %s", project.name)
        messages: list[str] = []
        written: list[Path] = []
        for runtime in project.supported_runtimes:
            try:
                target = runtime_archive_path(project, runtime)
            except VersionUndefined as e:
                logger.error("Cannot archive project %s: %s", project.name, e)
                messages.append(f"Error: {e}")
                return OperationResult(
                    name, "archive", OperationStatus.FAILED, tuple(messages)
                )

            output_dir = publish_directory(project, runtime)
            published = self._toolchain.publish(
                project.manifest_path, runtime, output_dir
            )
            messages.extend(published.output)
            if not published.success:
                messages.append(f"Publish failed for runtime {runtime}")
                return OperationResult(
                    name, "archive", OperationStatus.FAILED, tuple(messages), tuple(written)
                )

            policy = project.effective_policy
            result = self._writer.write_archive(
                output_dir,
                target,
                policy.ignored_names,
                policy.ignored_path_fragments,
            )
            if not result.success:
                messages.append(f"Error: {result.error}")
                return OperationResult(
                    name, "archive", OperationStatus.FAILED, tuple(messages), tuple(written)
                )
            written.append(result.archive_path)
            messages.append(f"Created binary archive: {result.archive_path}")
            logger.info(
                "Created binary archive for project %s and runtime %s",
                project.name,
                runtime,
            )

        return OperationResult(
            name, "archive", OperationStatus.SUCCEEDED, tuple(messages), tuple(written)
        )

    def _archive_solution_sources(
        self, solution: Solution, force: bool
    ) -> OperationResult:
        name = solution.name
        try:
            target = source_archive_path(solution)
        except VersionUndefined as e:
            logger.error("Cannot archive sources of solution %s: %s", name, e)
            return OperationResult(
                name, "archive-source", OperationStatus.FAILED, (f"Error: {e}",)
            )

        if not force and target.exists():
            return OperationResult(
                name, "archive-source", OperationStatus.SKIPPED, ("Already archived",)
            )

        policy = solution.effective_policy
        result = self._writer.write_archive(
            solution.root_path,
            target,
            policy.ignored_names,
            policy.ignored_path_fragments,
        )
        if not result.success:
            return OperationResult(
                name, "archive-source", OperationStatus.FAILED, (f"Error: {result.error}",)
            )
        logger.info("Created source archive for solution %s", name)
        return OperationResult(
            name,
            "archive-source",
            OperationStatus.SUCCEEDED,
            (f"Created source archive: {result.archive_path}",),
            (result.archive_path,),
        )
