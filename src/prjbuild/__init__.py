"""
prjbuild: project graph discovery, version reconciliation and archiving.

Discovers solutions and their projects under configured root directories,
resolves each unit's policy and version, orders work by project references,
and writes deterministic, version-named archives.

Example:
    from pathlib import Path
    from prjbuild import BatchRunner, DiscoveryService
    from prjbuild.infrastructure import (
        DotnetToolchain,
        MsBuildManifestReader,
        ZipArchiveWriter,
        load_settings,
    )

    settings = load_settings(Path("prjbuild.json"))
    graph = DiscoveryService(settings, MsBuildManifestReader()).discover()
    runner = BatchRunner(DotnetToolchain(), ZipArchiveWriter())
    result = runner.archive(graph.select_all(), graph=graph)
"""

# Application layer (orchestration)
from prjbuild.application.archive_status import ArchiveStatusOracle
from prjbuild.application.discovery import DiscoveryService, UnitGraph
from prjbuild.application.operations import BatchRunner

# Domain exceptions
from prjbuild.domain.exceptions import (
    ConfigurationAbsent,
    ConfigurationError,
    VersionUndefined,
)

# Domain interfaces (for type hints and custom implementations)
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
from prjbuild.domain.naming import runtime_archive_path, source_archive_path
from prjbuild.domain.sequencing import dependency_order
from prjbuild.domain.versioning import (
    format_version,
    parse_version,
    primary_source,
    validate_solution,
    validate_unit,
    versions_equal,
)

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Domain models
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
    # Version reconciliation
    "parse_version",
    "versions_equal",
    "primary_source",
    "validate_unit",
    "validate_solution",
    "format_version",
    # Sequencing and naming
    "dependency_order",
    "source_archive_path",
    "runtime_archive_path",
    # Domain interfaces
    "ManifestReaderInterface",
    "BuildToolchainInterface",
    "ArchiveWriterInterface",
    # Domain exceptions
    "ConfigurationError",
    "ConfigurationAbsent",
    "VersionUndefined",
    # Application layer
    "DiscoveryService",
    "UnitGraph",
    "ArchiveStatusOracle",
    "BatchRunner",
]
