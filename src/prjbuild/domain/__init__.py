"""
Domain layer for the project graph.

Contains models, version reconciliation, policy resolution, sequencing and
archive naming, with no external dependencies.
"""

from prjbuild.domain.exceptions import (
    ConfigurationAbsent,
    ConfigurationError,
    VersionUndefined,
)
from prjbuild.domain.interfaces import (
    ArchiveWriterInterface,
    BuildToolchainInterface,
    ManifestReaderInterface,
)
from prjbuild.domain.models import (
    ArchiveResult,
    BatchResult,
    OperationResult,
    OperationStatus,
    PolicyConfig,
    Project,
    Solution,
    ToolchainResult,
    Version,
    VersionSource,
    VersionSourceKind,
)
from prjbuild.domain.settings import (
    ProjectConfig,
    RootDirectoryConfig,
    Settings,
    SolutionConfig,
)

__all__ = [
    # Models
    "Version",
    "VersionSource",
    "VersionSourceKind",
    "PolicyConfig",
    "Project",
    "Solution",
    "ToolchainResult",
    "ArchiveResult",
    "OperationStatus",
    "OperationResult",
    "BatchResult",
    # Settings (structures only)
    "Settings",
    "RootDirectoryConfig",
    "SolutionConfig",
    "ProjectConfig",
    # Interfaces
    "ManifestReaderInterface",
    "BuildToolchainInterface",
    "ArchiveWriterInterface",
    # Exceptions
    "ConfigurationError",
    "ConfigurationAbsent",
    "VersionUndefined",
]
