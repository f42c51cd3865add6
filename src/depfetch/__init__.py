"""depfetch: resolve package coordinates into local artifact files.

Typical use::

    from depfetch import resolver

    jar = resolver().resolve("org.example:lib:1.0").without_transitivity().as_single_file()
"""

from typing import Optional

from depfetch.artifacts import ArtifactInfo, ResolvedArtifact
from depfetch.config import Settings, load_settings
from depfetch.coordinates import Coordinate, Dependency, Exclusion, PackagingType, ScopeType
from depfetch.engine import InMemoryEngine, LocalRepositoryEngine, RemoteRepository, ResolutionEngine
from depfetch.errors import (
    AmbiguousResultError,
    CoordinateParseError,
    InvalidArgumentError,
    MaterializationError,
    NoResultError,
    ResolutionFailedError,
    ResolverError,
    UnsupportedOperationError,
)
from depfetch.materializer import ArtifactMaterializer
from depfetch.session import WorkingSession
from depfetch.stages import FormatStage, LegacyFormatStage, OutputKind, ResolveStage, StrategyStage
from depfetch.strategy import ACCEPT_ALL, NON_TRANSITIVE, TRANSITIVE, ResolutionStrategy

__version__ = "0.1.0"


def resolver(
    engine: Optional[ResolutionEngine] = None,
    settings: Optional[Settings] = None,
    legacy: bool = False,
    materializer: Optional[ArtifactMaterializer] = None,
) -> ResolveStage:
    """Create a resolver with a fresh working session.

    Without an ``engine`` a LocalRepositoryEngine is built from ``settings``
    (loaded from the environment when omitted).
    """
    if settings is None:
        settings = load_settings()
    if engine is None:
        engine = LocalRepositoryEngine(
            settings.local_repository,
            workspace_roots=settings.workspace_roots,
            offline=settings.offline,
        )
    session = WorkingSession(
        engine,
        remote_repositories=settings.remote_repositories,
        classpath_resolution=settings.classpath_resolution,
        maven_central=settings.use_maven_central,
    )
    format_stage_class = LegacyFormatStage if legacy else FormatStage
    return ResolveStage(session, format_stage_class, materializer)


__all__ = [
    "ACCEPT_ALL",
    "NON_TRANSITIVE",
    "TRANSITIVE",
    "AmbiguousResultError",
    "ArtifactInfo",
    "ArtifactMaterializer",
    "Coordinate",
    "CoordinateParseError",
    "Dependency",
    "Exclusion",
    "FormatStage",
    "InMemoryEngine",
    "InvalidArgumentError",
    "LegacyFormatStage",
    "LocalRepositoryEngine",
    "MaterializationError",
    "NoResultError",
    "OutputKind",
    "PackagingType",
    "RemoteRepository",
    "ResolutionEngine",
    "ResolutionFailedError",
    "ResolutionStrategy",
    "ResolveStage",
    "ResolvedArtifact",
    "ResolverError",
    "ScopeType",
    "Settings",
    "StrategyStage",
    "UnsupportedOperationError",
    "WorkingSession",
    "load_settings",
    "resolver",
]
