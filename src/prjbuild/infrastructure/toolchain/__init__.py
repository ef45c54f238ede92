"""
Build toolchain adapters.
"""

from prjbuild.infrastructure.toolchain.dotnet import DotnetToolchain
from prjbuild.infrastructure.toolchain.mock import MockToolchain

__all__ = [
    "DotnetToolchain",
    "MockToolchain",
]
