"""
Configuration records (structures only).

Loading and validation of the configuration file live in the infrastructure
layer. These records hold the three policy tiers (global, solution, project)
and the roots to scan.
"""

from dataclasses import dataclass
from pathlib import Path

from prjbuild.domain.models import PolicyConfig


@dataclass(frozen=True)
class RootDirectoryConfig:
    """A directory scanned for solutions and where its archives go."""

    path: Path
    archive_directory: Path


@dataclass(frozen=True)
class ProjectConfig:
    """Project tier configuration."""

    name: str
    supported_runtimes: tuple[str, ...] = ()
    exclude_from_archiving: bool | None = None
    is_retired: bool = False
    ignored_names: tuple[str, ...] = ()
    ignored_path_fragments: tuple[str, ...] = ()
    references: tuple[str, ...] = ()

    def policy(self) -> PolicyConfig:
        return PolicyConfig(
            frozenset(self.ignored_names),
            frozenset(self.ignored_path_fragments),
            self.is_retired,
        )


@dataclass(frozen=True)
class SolutionConfig:
    """Solution tier configuration."""

    name: str
    is_retired: bool = False
    projects: tuple[ProjectConfig, ...] = ()
    ignored_names: tuple[str, ...] = ()
    ignored_path_fragments: tuple[str, ...] = ()

    def policy(self) -> PolicyConfig:
        return PolicyConfig(
            frozenset(self.ignored_names),
            frozenset(self.ignored_path_fragments),
            self.is_retired,
        )

    def find_project(self, name: str) -> ProjectConfig | None:
        """First project entry with exactly this name."""
        return next((p for p in self.projects if p.name == name), None)


@dataclass(frozen=True)
class Settings:
    """Global tier configuration plus the solution and project tiers beneath it."""

    root_directories: tuple[RootDirectoryConfig, ...] = ()
    solutions: tuple[SolutionConfig, ...] = ()
    ignored_names: tuple[str, ...] = ()
    ignored_path_fragments: tuple[str, ...] = ()

    def policy(self) -> PolicyConfig:
        return PolicyConfig(
            frozenset(self.ignored_names), frozenset(self.ignored_path_fragments)
        )

    def find_solution(self, name: str) -> SolutionConfig | None:
        """First solution entry with exactly this name."""
        return next((s for s in self.solutions if s.name == name), None)
