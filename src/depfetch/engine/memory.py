"""In-memory resolution engine backed by a registry of known artifacts."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from depfetch.artifacts import ResolvedArtifact
from depfetch.coordinates import Coordinate, CoordinateKey, Dependency, parse_coordinate, parse_dependency
from .base import ArtifactResolutionError, CollectRequest, EngineError, ResolutionEngine
from .graph import Node, walk


class InMemoryEngine(ResolutionEngine):
    """Engine resolving against artifacts registered up front.

    Every request received is kept in ``requests``; ``fail_with`` makes the
    next calls raise the given engine error instead.
    """

    def __init__(self):
        self._artifacts: Dict[Tuple[CoordinateKey, str], Node] = {}
        self.requests: List[CollectRequest] = []
        self._failure: Optional[EngineError] = None

    def register(
        self,
        coordinate: Union[str, Coordinate],
        file: Optional[Union[str, Path]] = None,
        dependencies: Iterable[Union[str, Dependency]] = (),
        unpackaged: bool = False,
    ) -> "InMemoryEngine":
        """Register an artifact and its direct dependencies."""
        if isinstance(coordinate, str):
            coordinate = parse_coordinate(coordinate)
        children = [parse_dependency(d) if isinstance(d, str) else d for d in dependencies]
        self._artifacts[(coordinate.key, coordinate.version)] = Node(
            coordinate=coordinate,
            file=Path(file) if file is not None else None,
            children=children,
            unpackaged=unpackaged,
        )
        return self

    def fail_with(self, error: Optional[EngineError]) -> None:
        self._failure = error

    def resolve(self, request: CollectRequest) -> List[ResolvedArtifact]:
        self.requests.append(request)
        if self._failure is not None:
            raise self._failure
        return walk(request, self._describe)

    def _describe(self, dependency: Dependency) -> Node:
        node = self._artifacts.get((dependency.key, dependency.version))
        if node is None:
            raise ArtifactResolutionError(f"Could not find artifact {dependency.coordinate}")
        return node
