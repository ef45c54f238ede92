"""
Application layer for the project graph.

Orchestrates discovery, archive status and batch operations using domain
logic and injected adapters.
"""

from prjbuild.application.archive_status import ArchiveStatusOracle
from prjbuild.application.discovery import DiscoveryService, UnitGraph
from prjbuild.application.operations import BatchRunner

__all__ = [
    "ArchiveStatusOracle",
    "BatchRunner",
    "DiscoveryService",
    "UnitGraph",
]
