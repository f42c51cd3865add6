"""Resolution engines."""

from .base import (
    MAVEN_CENTRAL,
    ArtifactResolutionError,
    CollectRequest,
    DependencyCollectionError,
    EngineError,
    RemoteRepository,
    ResolutionEngine,
)
from .local import LocalRepositoryEngine
from .memory import InMemoryEngine

__all__ = [
    "MAVEN_CENTRAL",
    "ArtifactResolutionError",
    "CollectRequest",
    "DependencyCollectionError",
    "EngineError",
    "InMemoryEngine",
    "LocalRepositoryEngine",
    "RemoteRepository",
    "ResolutionEngine",
]
