"""Breadth-first dependency graph walk shared by the bundled engines.

Only the bare minimum of mediation is done: the first occurrence of an
identity (nearest to the roots) wins and later occurrences are ignored.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Deque, Dict, FrozenSet, List, Optional, Set, Tuple

from depfetch.artifacts import ResolvedArtifact
from depfetch.coordinates import Coordinate, CoordinateKey, Dependency, Exclusion, ScopeType
from depfetch.common.logging_utils import extra_context, is_debug_enabled
from .base import CollectRequest

logger = logging.getLogger(__name__)

_OMITTED_TRANSITIVE_SCOPES = {ScopeType.TEST, ScopeType.PROVIDED, ScopeType.SYSTEM}


@dataclass
class Node:
    """What an engine knows about one resolved coordinate."""
    coordinate: Coordinate
    file: Optional[Path]
    children: List[Dependency] = field(default_factory=list)
    unpackaged: bool = False


def transitive_scope(parent: ScopeType, child: ScopeType) -> Optional[ScopeType]:
    """Scope a child dependency inherits through ``parent``, or None when it is omitted."""
    if child in _OMITTED_TRANSITIVE_SCOPES:
        return None
    if parent in (ScopeType.PROVIDED, ScopeType.TEST):
        return parent
    if parent == ScopeType.RUNTIME:
        return ScopeType.RUNTIME
    return child


def walk(request: CollectRequest, describe: Callable[[Dependency], Node]) -> List[ResolvedArtifact]:
    """Resolve the request's roots and their transitive closure.

    ``describe`` receives a versioned dependency and returns its node; it
    raises an engine error when the dependency cannot be resolved.
    """
    managed: Dict[CoordinateKey, Dependency] = {d.key: d for d in request.managed_dependencies}
    queue: Deque[Tuple[Dependency, FrozenSet[Exclusion], bool]] = deque(
        (root, frozenset(root.exclusions), True) for root in request.dependencies
    )
    seen: Set[CoordinateKey] = set()
    resolved: List[ResolvedArtifact] = []

    while queue:
        dependency, exclusions, is_root = queue.popleft()
        if dependency.key in seen:
            continue
        seen.add(dependency.key)

        if not is_root and dependency.key in managed and managed[dependency.key].version:
            dependency = dependency.with_version(managed[dependency.key].version)

        node = describe(dependency)
        resolved.append(ResolvedArtifact.create(
            node.coordinate,
            node.file,
            dependencies=[child.coordinate for child in node.children],
            unpackaged=node.unpackaged,
        ))

        for child in node.children:
            if child.optional or any(e.matches(child.coordinate) for e in exclusions):
                if is_debug_enabled(logger):
                    logger.debug(
                        "Skipping %s below %s", child.coordinate, dependency.coordinate,
                        extra=extra_context(event="graph_walk", component="engine", action="skip_child")
                    )
                continue
            scope = transitive_scope(dependency.scope, child.scope)
            if scope is None:
                continue
            queue.append((
                Dependency(child.coordinate, scope, False, child.exclusions),
                exclusions | child.exclusions,
                False,
            ))

    return resolved
