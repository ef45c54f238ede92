"""
Version reconciliation.

Parses declared version strings, picks each project's primary version, checks
consistency within a project and across a solution, and formats versions for
archive names.

Malformed version text is an expected input: parsing returns None instead of
raising, and validation treats None as "undefined" (never equal to anything,
including another None).
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

from prjbuild.domain.exceptions import VersionUndefined
from prjbuild.domain.models import Version, VersionSource, VersionSourceKind

if TYPE_CHECKING:
    from prjbuild.domain.models import Project

_VERSION_PATTERN = re.compile(r"^[0-9]+(?:\.[0-9]+){0,3}$")


def parse_version(raw_text: str) -> Version | None:
    """Parse 1-4 dot-separated non-negative integers.

    Surrounding whitespace is ignored. Any other shape returns None.

    Args:
        raw_text: Version text as declared in a manifest

    Returns:
        Parsed Version, or None if the text is not a dotted numeric version
    """
    text = raw_text.strip()
    if not _VERSION_PATTERN.match(text):
        return None
    parts = [int(p) for p in text.split(".")]
    parts.extend([0] * (4 - len(parts)))
    return Version(*parts)


def versions_equal(first: Version | None, second: Version | None) -> bool:
    """Compare versions with build/revision values <= 0 normalized to 0.

    Two undefined versions are not equal.
    """
    if first is None or second is None:
        return False
    return (
        first.major == second.major
        and first.minor == second.minor
        and max(first.build, 0) == max(second.build, 0)
        and max(first.revision, 0) == max(second.revision, 0)
    )


def primary_source(sources: Sequence[VersionSource]) -> VersionSource | None:
    """First PROJECT_MANIFEST source, else the first source, else None."""
    for source in sources:
        if source.kind == VersionSourceKind.PROJECT_MANIFEST:
            return source
    return sources[0] if sources else None


def primary_version(project: Project) -> Version | None:
    """Parsed primary version of a project, or None."""
    source = primary_source(project.version_sources)
    return source.parsed if source is not None else None


def validate_unit(sources: Sequence[VersionSource]) -> bool:
    """True iff every source parses and equals the primary source's version."""
    if not sources:
        return False
    primary = primary_source(sources)
    if primary is None or primary.parsed is None:
        return False
    return all(versions_equal(s.parsed, primary.parsed) for s in sources)


def validate_solution(projects: Sequence[Project]) -> bool:
    """True iff every project's primary version equals the first project's.

    "First" is the first project in discovery order.
    """
    if not projects:
        return False
    reference = primary_version(projects[0])
    if reference is None:
        return False
    return all(versions_equal(primary_version(p), reference) for p in projects)


def format_version(version: Version | None) -> str:
    """Format a version for archive names.

    ``v{major}.{minor}``, plus ``.{build}`` when build > 0. A revision > 0
    always emits both build and revision, e.g. ``v1.2.0.4``.

    Raises:
        VersionUndefined: If version is None
    """
    if version is None:
        raise VersionUndefined("<unknown>", "Cannot format an undefined version")

    formatted = f"v{version.major}.{version.minor}"
    if version.revision > 0:
        return f"{formatted}.{version.build}.{version.revision}"
    if version.build > 0:
        return f"{formatted}.{version.build}"
    return formatted
