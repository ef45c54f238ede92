"""
Domain interfaces (Ports) for the project graph.

These abstract base classes define the contracts adapters must satisfy.
They have no external dependencies.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prjbuild.domain.models import ArchiveResult, ToolchainResult, VersionSource


class ManifestReaderInterface(ABC):
    """
    Port for reading unit manifests.

    Supplies version declarations and first-party project references. Missing
    files are not errors; they simply contribute nothing.
    """

    @abstractmethod
    def read_version_sources(
        self, project_dir: Path, manifest_path: Path
    ) -> list["VersionSource"]:
        """
        Collect every version declaration for a project.

        Args:
            project_dir: Directory containing the project manifest
            manifest_path: The project manifest file

        Returns:
            Version sources in declaration order (manifest first)
        """
        pass

    @abstractmethod
    def read_project_references(self, manifest_path: Path) -> list[str]:
        """
        Names of projects referenced by a project manifest.

        Args:
            manifest_path: The project manifest file

        Returns:
            Referenced project names, in declaration order
        """
        pass


class BuildToolchainInterface(ABC):
    """
    Port for the external compiler toolchain.

    Each call is keyed by the project manifest path and runs to completion.
    The engine only looks at the success flag; output lines are passed
    through for display.
    """

    @abstractmethod
    def restore(self, manifest_path: Path) -> "ToolchainResult":
        """Restore package dependencies for a project."""
        pass

    @abstractmethod
    def build(self, manifest_path: Path, runtime: str | None = None) -> "ToolchainResult":
        """Build a project, optionally for a specific runtime identifier."""
        pass

    @abstractmethod
    def publish(
        self, manifest_path: Path, runtime: str, output_dir: Path
    ) -> "ToolchainResult":
        """Publish a project for a runtime identifier into output_dir."""
        pass

    @abstractmethod
    def clean(self, manifest_path: Path) -> "ToolchainResult":
        """Remove build outputs for a project."""
        pass

    @abstractmethod
    def update_packages(self, manifest_path: Path) -> "ToolchainResult":
        """Move every outdated package reference of a project to its latest version."""
        pass


class ArchiveWriterInterface(ABC):
    """
    Port for deterministic archive construction.

    Implementations must traverse in a fixed, sorted order so that the same
    tree and rules always produce the same entries in the same order.
    """

    @abstractmethod
    def write_archive(
        self,
        source_dir: Path,
        dest_path: Path,
        ignored_names: "Iterable[str]" = (),
        ignored_path_fragments: "Iterable[str]" = (),
    ) -> "ArchiveResult":
        """
        Archive a directory tree and write a sibling manifest.

        Args:
            source_dir: Directory to archive; entries are relative to it
            dest_path: Archive file to create (replaced if present)
            ignored_names: Base names to skip (case-insensitive)
            ignored_path_fragments: Relative-path substrings to skip

        Returns:
            ArchiveResult; callers judge success from it, not from the
            presence of files on disk
        """
        pass
