"""
Archive naming.

Maps a solution (source archive) or a project plus runtime identifier
(binary archive) to ``{archive_dir}/{name}-{format(version)}-{suffix}.zip``.
Names are a pure function of the current graph, so a version bump changes
the target path and older archives are left in place.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from prjbuild.domain.exceptions import VersionUndefined
from prjbuild.domain.versioning import format_version, primary_version

if TYPE_CHECKING:
    from prjbuild.domain.models import Project, Solution

ARCHIVE_EXTENSION = "zip"
MANIFEST_EXTENSION = "txt"
SOURCE_SUFFIX = "src"


def archive_file_name(name: str, formatted_version: str, suffix: str) -> str:
    return f"{name}-{formatted_version}-{suffix}.{ARCHIVE_EXTENSION}"


def solution_version_label(solution: Solution) -> str:
    """Formatted primary version of the first project that has one.

    Raises:
        VersionUndefined: If no project has a parseable primary version
    """
    for project in solution.projects:
        version = primary_version(project)
        if version is not None:
            return format_version(version)
    raise VersionUndefined(solution.name)


def project_version_label(project: Project) -> str:
    """Formatted primary version of a project.

    Raises:
        VersionUndefined: If the project has no parseable primary version
    """
    version = primary_version(project)
    if version is None:
        raise VersionUndefined(project.name)
    return format_version(version)


def source_archive_path(solution: Solution) -> Path:
    """Path of the solution's source archive.

    Raises:
        VersionUndefined: If no project in the solution has a version
    """
    return solution.archive_directory / archive_file_name(
        solution.name, solution_version_label(solution), SOURCE_SUFFIX
    )


def runtime_archive_path(project: Project, runtime: str) -> Path:
    """Path of a project's binary archive for one runtime identifier.

    Raises:
        VersionUndefined: If the project has no version
    """
    return project.solution.archive_directory / archive_file_name(
        project.name, project_version_label(project), runtime
    )


def manifest_path_for(archive_path: Path) -> Path:
    """Sibling manifest path: same base name, manifest extension."""
    return archive_path.with_suffix(f".{MANIFEST_EXTENSION}")
