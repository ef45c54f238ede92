"""
Three-tier policy resolution (global -> solution -> project) and ignore matching.

Ignore sets are merged by union. Retirement is never inherited: it is read
from the most specific tier's own configuration.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from prjbuild.domain.models import PolicyConfig

if TYPE_CHECKING:
    from prjbuild.domain.settings import ProjectConfig, Settings, SolutionConfig


def resolve_ignore_set(*tiers: Iterable[str] | None) -> frozenset[str]:
    """Deduplicated union of ignore entries from every tier. None tiers are empty."""
    merged: set[str] = set()
    for tier in tiers:
        if tier:
            merged.update(tier)
    return frozenset(merged)


def resolve_retired(tier: SolutionConfig | ProjectConfig | None) -> bool:
    """Forward the nearest tier's own retirement flag (False if the tier is absent)."""
    return bool(tier is not None and tier.is_retired)


def merge_policy(
    global_tier: PolicyConfig,
    solution_tier: PolicyConfig | None = None,
    project_tier: PolicyConfig | None = None,
) -> PolicyConfig:
    """Combine three policy tiers into a new effective policy.

    ``is_retired`` comes from the most specific tier supplied.
    """
    tiers = [t for t in (global_tier, solution_tier, project_tier) if t is not None]
    return PolicyConfig(
        ignored_names=resolve_ignore_set(*(t.ignored_names for t in tiers)),
        ignored_path_fragments=resolve_ignore_set(
            *(t.ignored_path_fragments for t in tiers)
        ),
        is_retired=tiers[-1].is_retired,
    )


def solution_policy(
    settings: Settings, solution_config: SolutionConfig | None
) -> PolicyConfig:
    """Effective policy for a solution: global tier plus its own config, if any."""
    solution_tier = solution_config.policy() if solution_config else None
    merged = merge_policy(settings.policy(), solution_tier)
    return PolicyConfig(
        merged.ignored_names,
        merged.ignored_path_fragments,
        resolve_retired(solution_config),
    )


def project_policy(
    settings: Settings,
    solution_config: SolutionConfig | None,
    project_config: ProjectConfig | None,
) -> PolicyConfig:
    """Effective policy for a project across all three tiers.

    A retired solution does not retire its projects; callers that need that
    check the solution as well.
    """
    solution_tier = solution_config.policy() if solution_config else None
    project_tier = project_config.policy() if project_config else None
    merged = merge_policy(settings.policy(), solution_tier, project_tier)
    return PolicyConfig(
        merged.ignored_names,
        merged.ignored_path_fragments,
        resolve_retired(project_config),
    )


def normalize_relative_path(relative_path: str) -> str:
    """Forward-slash form of a relative path, without a leading './'."""
    normalized = relative_path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def is_ignored(name: str, relative_path: str, policy: PolicyConfig) -> bool:
    """Match an object against ignore rules.

    An object is ignored when its base name equals an ignored name, or its
    relative path contains an ignored fragment. Both comparisons are
    case-insensitive, and rule order does not matter.

    Args:
        name: Base name of the file or directory
        relative_path: Path relative to the scan root
        policy: Effective policy holding the ignore rules

    Returns:
        True if the object should be skipped
    """
    folded_name = name.casefold()
    if any(folded_name == ignored.casefold() for ignored in policy.ignored_names):
        return True

    folded_path = normalize_relative_path(relative_path).casefold()
    return any(
        normalize_relative_path(fragment).casefold() in folded_path
        for fragment in policy.ignored_path_fragments
        if fragment
    )
