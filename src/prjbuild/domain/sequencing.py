"""
Dependency ordering for a selection of projects.

Depth-first postorder over the selection: referenced projects that are also
selected are emitted before their referrers. References outside the
selection are ignored.

Reference cycles do not loop. A node that is still in progress when reached
again is treated as already handled, so a cyclic subgraph gets a best-effort
order rather than an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prjbuild.domain.models import Project

logger = logging.getLogger(__name__)


class _Mark(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def dependency_order(selection: Sequence[Project]) -> list[Project]:
    """Order a selection so dependencies precede dependents.

    Args:
        selection: Projects to process, in caller order (duplicates collapse)

    Returns:
        A permutation of the selection. Ties keep caller order.
    """
    # Arena: identity -> index into the selection
    index_of: dict[int, int] = {}
    nodes: list[Project] = []
    for project in selection:
        if id(project) not in index_of:
            index_of[id(project)] = len(nodes)
            nodes.append(project)

    marks = [_Mark.UNVISITED] * len(nodes)
    ordered: list[Project] = []

    for start in range(len(nodes)):
        if marks[start] != _Mark.UNVISITED:
            continue
        # Explicit stack of (node, references not yet examined)
        marks[start] = _Mark.IN_PROGRESS
        stack: list[tuple[int, Iterator[Project]]] = [
            (start, iter(nodes[start].referenced_projects))
        ]
        while stack:
            i, refs = stack[-1]
            for ref in refs:
                j = index_of.get(id(ref))
                if j is None:
                    continue
                if marks[j] == _Mark.IN_PROGRESS:
                    logger.debug(
                        "Reference cycle: %s -> %s, treating as satisfied",
                        nodes[i].qualified_name,
                        ref.qualified_name,
                    )
                    continue
                if marks[j] == _Mark.UNVISITED:
                    marks[j] = _Mark.IN_PROGRESS
                    stack.append((j, iter(nodes[j].referenced_projects)))
                    break
            else:
                stack.pop()
                marks[i] = _Mark.DONE
                ordered.append(nodes[i])
    return ordered
