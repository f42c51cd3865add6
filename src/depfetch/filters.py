"""Resolution filters and filter-chain evaluation.

A filter decides whether a candidate dependency takes part in a resolution,
given the dependencies the round was started with. A chain is the logical
AND of its filters; an empty chain accepts everything.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from depfetch.common.logging_utils import extra_context, is_debug_enabled
from depfetch.coordinates import Dependency, PackagingType, ScopeType
from depfetch.coordinates.parser import parse_coordinate

logger = logging.getLogger(__name__)


class ResolutionFilter(ABC):
    """Predicate over (candidate, dependencies for resolution).

    Implementations are pure and must not mutate either argument.
    """

    @abstractmethod
    def accepts(self, dependency: Dependency, dependencies_for_resolution: Sequence[Dependency]) -> bool:
        """Return True when ``dependency`` passes this filter."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class AcceptAllFilter(ResolutionFilter):
    """Accepts every dependency."""

    def accepts(self, dependency, dependencies_for_resolution):
        return True


class NonTransitiveFilter(ResolutionFilter):
    """Accepts only dependencies that were declared for resolution directly."""

    def accepts(self, dependency, dependencies_for_resolution):
        return any(dependency.key == declared.key for declared in dependencies_for_resolution)


class ScopeFilter(ResolutionFilter):
    """Accepts dependencies in one of the given scopes."""

    def __init__(self, *scopes: ScopeType):
        self.scopes = frozenset(scopes)

    def accepts(self, dependency, dependencies_for_resolution):
        return dependency.scope in self.scopes

    def __repr__(self) -> str:
        names = ", ".join(sorted(s.value for s in self.scopes))
        return f"ScopeFilter({names})"


class RejectDependenciesFilter(ResolutionFilter):
    """Rejects dependencies matching any of the given ``groupId:artifactId`` coordinates."""

    def __init__(self, *coordinates: str):
        if not coordinates:
            raise ValueError("There must be at least one coordinate to reject")
        self.rejected = frozenset(
            (c.group_id, c.artifact_id)
            for c in (parse_coordinate(token, require_version=False) for token in coordinates)
        )

    def accepts(self, dependency, dependencies_for_resolution):
        return (dependency.group_id, dependency.artifact_id) not in self.rejected


class CombinedFilter(ResolutionFilter):
    """Accepts a dependency only when every wrapped filter accepts it."""

    def __init__(self, *filters: ResolutionFilter):
        self.filters = tuple(filters)

    def accepts(self, dependency, dependencies_for_resolution):
        return chain_accepts(self.filters, dependency, dependencies_for_resolution)

    def __repr__(self) -> str:
        return f"CombinedFilter{self.filters!r}"


class RestrictPomArtifactFilter(ResolutionFilter):
    """Rejects ``pom`` packaged artifacts.

    POM artifacts only carry dependency declarations; their children stay
    in the resolved set.
    """

    def accepts(self, dependency, dependencies_for_resolution):
        if dependency.packaging == PackagingType.POM:
            if is_debug_enabled(logger):
                logger.debug(
                    "Filtering out POM dependency resolution: %s; its transitive dependencies will be included",
                    dependency.coordinate,
                    extra=extra_context(event="filter", component="filters", action="restrict_pom",
                                        outcome="rejected")
                )
            return False
        return True


ACCEPT_ALL_FILTER = AcceptAllFilter()
NON_TRANSITIVE_FILTER = NonTransitiveFilter()
RESTRICT_POM_FILTER = RestrictPomArtifactFilter()


def chain_accepts(
    filters: Iterable[ResolutionFilter],
    candidate: Dependency,
    dependencies_for_resolution: Sequence[Dependency],
) -> bool:
    """AND the filters over ``candidate``, stopping at the first rejection."""
    return all(f.accepts(candidate, dependencies_for_resolution) for f in filters)


def apply_chain(
    filters: Sequence[ResolutionFilter],
    candidates: Iterable[Dependency],
    dependencies_for_resolution: Sequence[Dependency],
) -> List[Dependency]:
    """Return the candidates accepted by the whole chain, in order."""
    return [c for c in candidates if chain_accepts(filters, c, dependencies_for_resolution)]
