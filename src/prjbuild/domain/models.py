"""
Domain models for the project graph.

Version and policy records are immutable (frozen dataclasses). Solution and
Project nodes are built up during a single discovery pass and are the only
mutable types; their derived archive flags are written by the status oracle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# =============================================================================
# VERSIONS
# =============================================================================


class VersionSourceKind(Enum):
    """Where a version string was declared."""

    PROJECT_MANIFEST = "project_manifest"  # <Version> in the project file
    ASSEMBLY_METADATA = "assembly_metadata"  # AssemblyVersion("...") attribute
    APP_MANIFEST = "app_manifest"  # <assemblyIdentity version="..."/>


@dataclass(frozen=True)
class Version:
    """Four-part numeric version. Absent build/revision are stored as 0."""

    major: int
    minor: int = 0
    build: int = 0
    revision: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}.{self.revision}"


@dataclass(frozen=True)
class VersionSource:
    """
    A single declared version string and its parse outcome.

    ``parsed`` is derived from ``raw_text`` at construction and is None when
    the text is not a dotted numeric version.
    """

    kind: VersionSourceKind
    origin_path: str
    raw_text: str
    parsed: Version | None = field(init=False, compare=False)

    def __post_init__(self) -> None:
        # Local import keeps models free of a module-level cycle
        from prjbuild.domain.versioning import parse_version

        object.__setattr__(self, "parsed", parse_version(self.raw_text))


# =============================================================================
# POLICY
# =============================================================================


@dataclass(frozen=True)
class PolicyConfig:
    """Ignore rules and retirement flag for one tier (or a merged result)."""

    ignored_names: frozenset[str] = frozenset()
    ignored_path_fragments: frozenset[str] = frozenset()
    is_retired: bool = False


# =============================================================================
# UNIT GRAPH NODES
# =============================================================================


@dataclass(eq=False)
class Project:
    """Project node. Owned by its solution; references are lookups only."""

    name: str
    root_path: Path
    manifest_path: Path
    solution: Solution
    effective_policy: PolicyConfig = field(default_factory=PolicyConfig)
    version_sources: list[VersionSource] = field(default_factory=list)
    supported_runtimes: list[str] = field(default_factory=list)
    referenced_projects: list[Project] = field(default_factory=list)
    declared_references: list[str] = field(default_factory=list)
    is_excluded_from_archiving: bool | None = None
    is_archived: bool = False

    @property
    def is_retired(self) -> bool:
        return self.effective_policy.is_retired

    @property
    def qualified_name(self) -> str:
        return f"{self.solution.name}/{self.name}"

    def __repr__(self) -> str:
        return f"Project({self.qualified_name!r})"


@dataclass(eq=False)
class Solution:
    """Solution node owning its projects in discovery order."""

    name: str
    root_path: Path
    manifest_path: Path
    archive_directory: Path
    effective_policy: PolicyConfig = field(default_factory=PolicyConfig)
    projects: list[Project] = field(default_factory=list)
    are_all_archives_present: bool = False

    @property
    def is_retired(self) -> bool:
        return self.effective_policy.is_retired

    def __repr__(self) -> str:
        return f"Solution({self.name!r})"


# =============================================================================
# OPERATION RESULTS
# =============================================================================


@dataclass(frozen=True)
class ToolchainResult:
    """Outcome of one external build/restore/publish/clean invocation."""

    success: bool
    output: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArchiveResult:
    """Outcome of writing one archive and its manifest."""

    success: bool
    archive_path: Path
    manifest_path: Path
    entries: tuple[str, ...] = ()
    error: str = ""


class OperationStatus(Enum):
    """Per-unit outcome of a batch operation."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"  # Retired, excluded, or already archived


@dataclass(frozen=True)
class OperationResult:
    """Result of one operation on one unit."""

    unit_name: str
    operation: str
    status: OperationStatus
    messages: tuple[str, ...] = ()
    artifacts: tuple[Path, ...] = ()


@dataclass(frozen=True)
class BatchResult:
    """Results of one operation across a selection, in processing order."""

    operation: str
    results: tuple[OperationResult, ...] = ()

    @property
    def succeeded(self) -> bool:
        return all(r.status != OperationStatus.FAILED for r in self.results)

    @property
    def failed(self) -> tuple[OperationResult, ...]:
        return tuple(r for r in self.results if r.status == OperationStatus.FAILED)
