"""
Infrastructure layer for the project graph.

Contains adapters for external concerns (configuration files, manifests,
archives, build toolchains).
"""

from prjbuild.infrastructure.archive import ZipArchiveWriter
from prjbuild.infrastructure.config import find_settings_file, load_settings
from prjbuild.infrastructure.manifests import MsBuildManifestReader
from prjbuild.infrastructure.toolchain import DotnetToolchain, MockToolchain

__all__ = [
    # Configuration
    "find_settings_file",
    "load_settings",
    # Manifests
    "MsBuildManifestReader",
    # Archives
    "ZipArchiveWriter",
    # Toolchains
    "DotnetToolchain",
    "MockToolchain",
]
