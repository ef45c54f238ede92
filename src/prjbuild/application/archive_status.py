"""
Archive status oracle.

Answers "is this unit already fully archived?" by checking that every
expected archive path exists right now. Contents are not inspected.
"""

from __future__ import annotations

import logging
from pathlib import Path

from prjbuild.application.discovery import UnitGraph
from prjbuild.domain.exceptions import VersionUndefined
from prjbuild.domain.models import Project, Solution
from prjbuild.domain.naming import runtime_archive_path, source_archive_path

logger = logging.getLogger(__name__)


def is_archivable(project: Project) -> bool:
    """Retired projects and projects excluded from archiving produce no archives."""
    return not project.is_retired and not project.is_excluded_from_archiving


class ArchiveStatusOracle:
    """Existence checks against the filesystem at call time."""

    def project_paths(self, project: Project) -> list[Path]:
        """Expected binary archive paths for a project, one per runtime.

        Raises:
            VersionUndefined: If the project has no usable version
        """
        if not is_archivable(project):
            return []
        return [runtime_archive_path(project, rt) for rt in project.supported_runtimes]

    def expected_paths(self, solution: Solution) -> list[Path]:
        """Source archive plus every expected binary archive of a solution.

        Raises:
            VersionUndefined: If any required name cannot be computed
        """
        paths = [source_archive_path(solution)]
        for project in solution.projects:
            paths.extend(self.project_paths(project))
        return paths

    def is_project_archived(self, project: Project) -> bool:
        try:
            paths = self.project_paths(project)
        except VersionUndefined as e:
            logger.debug("Project %s is not archived: %s", project.name, e)
            return False
        return all(p.exists() for p in paths)

    def is_solution_archived(self, solution: Solution) -> bool:
        try:
            paths = self.expected_paths(solution)
        except VersionUndefined as e:
            logger.debug("Solution %s is not archived: %s", solution.name, e)
            return False
        return all(p.exists() for p in paths)

    def refresh(self, graph: UnitGraph) -> None:
        """Recompute the derived archive flags for every unit in the graph."""
        for solution in graph.solutions:
            for project in solution.projects:
                project.is_archived = self.is_project_archived(project)
                if project.is_archived:
                    logger.debug("Project %s is already archived", project.name)
                else:
                    logger.debug("Project %s needs to be archived", project.name)
            solution.are_all_archives_present = self.is_solution_archived(solution)
