"""
Discovery: builds the unit graph from the configured root directories.

Solutions are the solution manifests found in the directories directly below
each root. Projects are the project manifests found anywhere below a
solution's directory. Every object is filtered by its ancestor's effective
ignore policy, and policy is resolved at discovery time by exact unit name.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from prjbuild.domain.interfaces import ManifestReaderInterface
from prjbuild.domain.models import PolicyConfig, Project, Solution
from prjbuild.domain.policy import (
    is_ignored,
    normalize_relative_path,
    project_policy,
    solution_policy,
)
from prjbuild.domain.settings import RootDirectoryConfig, Settings, SolutionConfig

logger = logging.getLogger(__name__)

SOLUTION_PATTERN = "*.sln"
PROJECT_SUFFIX = ".csproj"


def _sort_key(path: Path) -> str:
    return path.name.casefold()


@dataclass
class UnitGraph:
    """Solutions and projects from one discovery pass."""

    solutions: list[Solution] = field(default_factory=list)

    def projects(self) -> list[Project]:
        """Every project, in discovery order."""
        return [p for s in self.solutions for p in s.projects]

    def find_solution(self, name: str) -> Solution | None:
        folded = name.casefold()
        return next((s for s in self.solutions if s.name.casefold() == folded), None)

    def find_project(self, name: str) -> Project | None:
        folded = name.casefold()
        return next(
            (p for p in self.projects() if p.name.casefold() == folded), None
        )

    def find_projects(self, name: str) -> list[Project]:
        """Every project with this name, across all solutions."""
        folded = name.casefold()
        return [p for p in self.projects() if p.name.casefold() == folded]

    def select(
        self, names: Iterable[str], include_retired: bool = False
    ) -> tuple[list[Project], list[str]]:
        """Resolve names to projects.

        A name selects every project with that name, in any solution, and
        every project of each solution with that name (case-insensitive).
        Retired projects, and projects of retired solutions, are left out
        unless include_retired is set.

        Returns:
            (selected projects without duplicates, names that matched nothing)
        """
        selected: list[Project] = []
        unknown: list[str] = []
        seen: set[int] = set()

        for name in names:
            folded = name.casefold()
            matches = self.find_projects(name)
            for solution in self.solutions:
                if solution.name.casefold() == folded:
                    matches.extend(solution.projects)
            if not matches:
                unknown.append(name)
                continue
            for project in matches:
                if id(project) in seen:
                    continue
                seen.add(id(project))
                if self._is_selectable(project, include_retired):
                    selected.append(project)
        return selected, unknown

    def select_all(self, include_retired: bool = False) -> list[Project]:
        """Every project in discovery order, subject to the retirement rule."""
        return [p for p in self.projects() if self._is_selectable(p, include_retired)]

    @staticmethod
    def _is_selectable(project: Project, include_retired: bool) -> bool:
        if include_retired:
            return True
        if project.is_retired or project.solution.is_retired:
            logger.debug("Skipping retired project %s", project.qualified_name)
            return False
        return True


class DiscoveryService:
    """
    Walks the configured roots and builds a UnitGraph.

    Each call to discover() builds a fresh graph; nothing is carried over
    between passes.
    """

    def __init__(self, settings: Settings, manifest_reader: ManifestReaderInterface):
        """
        Args:
            settings: Loaded configuration (all three policy tiers and roots)
            manifest_reader: Adapter supplying version sources and references
        """
        self._settings = settings
        self._reader = manifest_reader

    def discover(self) -> UnitGraph:
        """Run a full discovery pass over every configured root."""
        graph = UnitGraph()
        for root in self._settings.root_directories:
            graph.solutions.extend(self._discover_root(root))

        logger.info(
            "Discovered %d solutions with %d projects",
            len(graph.solutions),
            len(graph.projects()),
        )
        return graph

    # -------------------------------------------------------------------------
    # Solutions
    # -------------------------------------------------------------------------

    def _discover_root(self, root: RootDirectoryConfig) -> list[Solution]:
        if not root.path.is_dir():
            logger.warning("Root directory %s does not exist", root.path)
            return []

        logger.info("Discovering solutions in %s", root.path)
        global_policy = self._settings.policy()
        solutions: list[Solution] = []

        try:
            directories = sorted(
                (d for d in root.path.iterdir() if d.is_dir()), key=_sort_key
            )
        except OSError as e:
            logger.error("Error enumerating directories in %s: %s", root.path, e)
            return []

        for directory in directories:
            if is_ignored(directory.name, directory.name, global_policy):
                logger.debug("Ignoring directory %s (global ignore rules)", directory)
                continue
            try:
                manifests = sorted(directory.glob(SOLUTION_PATTERN), key=_sort_key)
            except OSError as e:
                logger.error("Error enumerating solutions in %s: %s", directory, e)
                continue

            for manifest in manifests:
                if not manifest.is_file():
                    continue
                relative = normalize_relative_path(
                    os.path.relpath(manifest, root.path)
                )
                if is_ignored(manifest.name, relative, global_policy):
                    logger.debug("Ignoring solution manifest %s", manifest)
                    continue
                solutions.append(self._build_solution(root, directory, manifest))
        return solutions

    def _build_solution(
        self, root: RootDirectoryConfig, directory: Path, manifest: Path
    ) -> Solution:
        name = manifest.stem
        logger.info("Found solution: %s at %s", name, manifest)

        solution_config = self._settings.find_solution(name)
        solution = Solution(
            name=name,
            root_path=directory,
            manifest_path=manifest,
            archive_directory=root.archive_directory,
            effective_policy=solution_policy(self._settings, solution_config),
        )
        self._discover_projects(solution, solution_config)
        self._resolve_references(solution)
        return solution

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    def _discover_projects(
        self, solution: Solution, solution_config: SolutionConfig | None
    ) -> None:
        for manifest in self._walk_project_manifests(solution):
            name = manifest.stem
            project_config = (
                solution_config.find_project(name) if solution_config else None
            )
            logger.info("Found project: %s at %s", name, manifest)

            project = Project(
                name=name,
                root_path=manifest.parent,
                manifest_path=manifest,
                solution=solution,
                effective_policy=project_policy(
                    self._settings, solution_config, project_config
                ),
            )
            if project_config is not None:
                project.supported_runtimes = list(project_config.supported_runtimes)
                project.is_excluded_from_archiving = (
                    project_config.exclude_from_archiving
                )

            project.version_sources = self._reader.read_version_sources(
                project.root_path, manifest
            )
            project.declared_references = self._reader.read_project_references(
                manifest
            )
            if project_config is not None:
                project.declared_references.extend(project_config.references)

            solution.projects.append(project)

    def _walk_project_manifests(self, solution: Solution) -> Iterator[Path]:
        """Project manifests below the solution directory, in sorted order.

        Ignored directories are pruned; names and relative paths are checked
        against the solution's effective policy.
        """
        policy: PolicyConfig = solution.effective_policy
        base = solution.root_path

        def on_error(error: OSError) -> None:
            logger.error("Error enumerating %s: %s", error.filename, error)

        for current, dirnames, filenames in os.walk(base, onerror=on_error):
            kept = []
            for d in sorted(dirnames, key=str.casefold):
                relative = os.path.relpath(os.path.join(current, d), base)
                if is_ignored(d, relative, policy):
                    logger.debug("Ignoring directory %s", os.path.join(current, d))
                    continue
                kept.append(d)
            dirnames[:] = kept

            for f in sorted(filenames, key=str.casefold):
                if not f.lower().endswith(PROJECT_SUFFIX):
                    continue
                path = Path(current) / f
                if is_ignored(f, os.path.relpath(path, base), policy):
                    logger.debug(
                        "Ignoring project %s because it matches ignore patterns",
                        path.stem,
                    )
                    continue
                yield path

    def _resolve_references(self, solution: Solution) -> None:
        """Turn declared reference names into in-graph project links."""
        by_name = {}
        for project in solution.projects:
            by_name.setdefault(project.name.casefold(), project)

        for project in solution.projects:
            for ref_name in project.declared_references:
                target = by_name.get(ref_name.casefold())
                if target is None:
                    logger.debug(
                        "Project %s references unknown project %s",
                        project.qualified_name,
                        ref_name,
                    )
                    continue
                if target is project or target in project.referenced_projects:
                    continue
                project.referenced_projects.append(target)
