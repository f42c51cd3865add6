"""Interface of the resolution engine the pipeline delegates graph resolution to."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

from depfetch.artifacts import ResolvedArtifact
from depfetch.constants import Constants
from depfetch.coordinates import Dependency


@dataclass(frozen=True)
class RemoteRepository:
    """A remote repository location."""
    id: str
    url: str

    def __str__(self) -> str:
        return f"{self.id} ({self.url})"


MAVEN_CENTRAL = RemoteRepository(Constants.MAVEN_CENTRAL_ID, Constants.MAVEN_CENTRAL_URL)


@dataclass(frozen=True)
class CollectRequest:
    """Everything an engine needs for one resolution round."""
    dependencies: Tuple[Dependency, ...]
    managed_dependencies: Tuple[Dependency, ...] = ()
    repositories: Tuple[RemoteRepository, ...] = ()
    workspace_enabled: bool = True
    central_enabled: bool = True

    def effective_repositories(self) -> List[RemoteRepository]:
        """Repositories in order, with Maven Central appended when enabled and missing."""
        repos = list(self.repositories)
        if self.central_enabled and not any(r.id == MAVEN_CENTRAL.id for r in repos):
            repos.append(MAVEN_CENTRAL)
        if not self.central_enabled:
            repos = [r for r in repos if r.id != MAVEN_CENTRAL.id]
        return repos


class EngineError(Exception):
    """Resolution failed for an unspecified reason."""


class ArtifactResolutionError(EngineError):
    """A version or a file could not be found for some artifact."""


class DependencyCollectionError(EngineError):
    """The dependency tree could not be computed."""


class ResolutionEngine(ABC):
    """Resolves a collect request into an ordered list of artifacts."""

    @abstractmethod
    def resolve(self, request: CollectRequest) -> List[ResolvedArtifact]:
        """Resolve ``request``.

        Raises:
            EngineError: or one of its subclasses when resolution fails.
        """
