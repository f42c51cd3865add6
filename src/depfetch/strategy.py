"""Resolution strategies: a pre-resolution and a post-resolution filter chain."""

from dataclasses import dataclass
from typing import Tuple

from depfetch.coordinates import ScopeType
from depfetch.filters import (
    NON_TRANSITIVE_FILTER,
    CombinedFilter,
    RejectDependenciesFilter,
    ResolutionFilter,
    ScopeFilter,
)


@dataclass(frozen=True)
class ResolutionStrategy:
    """Filters applied before building the collect request and after the engine returns.

    Pre filters prune the declared dependencies that become request roots.
    Post filters prune the resolved artifacts.
    """
    name: str
    pre_filters: Tuple[ResolutionFilter, ...] = ()
    post_filters: Tuple[ResolutionFilter, ...] = ()


ACCEPT_ALL = ResolutionStrategy("accept-all")
TRANSITIVE = ResolutionStrategy("transitive")
NON_TRANSITIVE = ResolutionStrategy(
    "non-transitive",
    pre_filters=(NON_TRANSITIVE_FILTER,),
    post_filters=(NON_TRANSITIVE_FILTER,),
)


def accept_scopes(*scopes: ScopeType) -> ResolutionStrategy:
    """Strategy keeping only dependencies declared in ``scopes``.

    Post-resolution views always carry the compile scope, so the scope
    check only applies before resolution.
    """
    if not scopes:
        raise ValueError("There must be at least one scope to accept")
    return ResolutionStrategy("accept-scopes", pre_filters=(ScopeFilter(*scopes),))


def reject_dependencies(*coordinates: str) -> ResolutionStrategy:
    """Strategy dropping the given ``groupId:artifactId`` coordinates before and after resolution."""
    reject = RejectDependenciesFilter(*coordinates)
    return ResolutionStrategy("reject-dependencies", pre_filters=(reject,), post_filters=(reject,))


def combined(*strategies: ResolutionStrategy) -> ResolutionStrategy:
    """Conjunction of several strategies."""
    pre = tuple(f for s in strategies for f in s.pre_filters)
    post = tuple(f for s in strategies for f in s.post_filters)
    name = "+".join(s.name for s in strategies) or "combined"
    return ResolutionStrategy(
        name,
        pre_filters=(CombinedFilter(*pre),) if pre else (),
        post_filters=(CombinedFilter(*post),) if post else (),
    )
