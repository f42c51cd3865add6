"""Staged resolver API: declare, then pick a strategy, then pick an output format.

Each stage only offers the calls valid at that point. All stages of one
resolver share a single ``WorkingSession``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, BinaryIO, Callable, List, Sequence, Type, Union

from depfetch.artifacts import ResolvedArtifact
from depfetch.coordinates import Dependency, parse_dependency
from depfetch.engine.base import (
    ArtifactResolutionError,
    DependencyCollectionError,
    EngineError,
    RemoteRepository,
)
from depfetch.errors import (
    AmbiguousResultError,
    InvalidArgumentError,
    MaterializationError,
    NoResultError,
    ResolutionFailedError,
    UnsupportedOperationError,
)
from depfetch.filters import RESTRICT_POM_FILTER, apply_chain, chain_accepts
from depfetch.materializer import ArtifactMaterializer
from depfetch.session import WorkingSession
from depfetch.strategy import NON_TRANSITIVE, TRANSITIVE, ResolutionStrategy
from depfetch.common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)

DependencyLike = Union[str, Dependency]


class OutputKind(Enum):
    """Shapes a format stage can hand resolved artifacts out as."""
    FILE = "file"
    STREAM = "stream"
    RESOLVED_ARTIFACT = "resolved-artifact"
    ARTIFACT_INFO = "artifact-info"


def _as_dependency(value: DependencyLike, require_version: bool = True) -> Dependency:
    if isinstance(value, Dependency):
        return value
    if isinstance(value, str):
        return parse_dependency(value, require_version=require_version)
    raise InvalidArgumentError(f"Expected a coordinate string or Dependency, got {type(value).__name__}")


class FormatStage:
    """Terminal stage converting the filtered artifacts into the requested output."""

    supports_artifact_info = True

    def __init__(self, artifacts: Sequence[ResolvedArtifact], materializer: ArtifactMaterializer = None):
        self._artifacts = tuple(artifacts)
        self._materializer = materializer or ArtifactMaterializer()

    @property
    def artifacts(self):
        return self._artifacts

    def as_many(self, kind: OutputKind) -> List[Any]:
        """Convert every mappable artifact, preserving order."""
        convert = self._converter(kind)
        results = []
        try:
            for artifact in self._artifacts:
                if not self._materializer.is_mappable(artifact):
                    logger.info("Removed artifact %s from the result, it cannot be mapped to a file",
                                artifact.coordinate)
                    continue
                results.append(convert(artifact))
        except BaseException:
            _close_streams(results)
            raise
        return results

    def as_single(self, kind: OutputKind) -> Any:
        """Convert the one surviving artifact.

        Raises:
            NoResultError: nothing survived.
            AmbiguousResultError: more than one artifact survived.
        """
        results = self.as_many(kind)
        if not results:
            raise NoResultError("Unable to resolve dependencies, none of them were found.")
        if len(results) > 1:
            _close_streams(results)
            raise AmbiguousResultError(results)
        return results[0]

    # Shortcuts

    def as_file(self):
        return self.as_many(OutputKind.FILE)

    def as_single_file(self):
        return self.as_single(OutputKind.FILE)

    def as_input_stream(self) -> List[BinaryIO]:
        return self.as_many(OutputKind.STREAM)

    def as_single_input_stream(self) -> BinaryIO:
        return self.as_single(OutputKind.STREAM)

    def as_resolved_artifact(self) -> List[ResolvedArtifact]:
        return self.as_many(OutputKind.RESOLVED_ARTIFACT)

    def as_single_resolved_artifact(self) -> ResolvedArtifact:
        return self.as_single(OutputKind.RESOLVED_ARTIFACT)

    def _converter(self, kind: OutputKind) -> Callable[[ResolvedArtifact], Any]:
        if not isinstance(kind, OutputKind):
            raise InvalidArgumentError(f"Unsupported output kind: {kind!r}")
        if kind == OutputKind.ARTIFACT_INFO:
            if not self.supports_artifact_info:
                raise UnsupportedOperationError(
                    f"{type(self).__name__} does not hand out artifact descriptors without materializing them"
                )
            return lambda artifact: artifact.info
        if kind == OutputKind.FILE:
            return self._materializer.to_file
        if kind == OutputKind.STREAM:
            return self._open
        return lambda artifact: artifact.with_file(self._materializer.to_file(artifact))

    def _open(self, artifact: ResolvedArtifact) -> BinaryIO:
        path = self._materializer.to_file(artifact)
        try:
            return open(path, "rb")
        except OSError as exc:
            raise MaterializationError(f"Unable to open {path} for {artifact.coordinate}") from exc


class LegacyFormatStage(FormatStage):
    """Format stage for the legacy surface, which has no descriptor-only output."""

    supports_artifact_info = False


def _close_streams(results: List[Any]) -> None:
    for result in results:
        close = getattr(result, "close", None)
        if callable(close) and hasattr(result, "read"):
            close()


class StrategyStage:
    """Runs one resolution round with a chosen strategy."""

    def __init__(
        self,
        session: WorkingSession,
        format_stage_class: Type[FormatStage] = FormatStage,
        materializer: ArtifactMaterializer = None,
    ):
        self._session = session
        self._format_stage_class = format_stage_class
        self._materializer = materializer

    @property
    def session(self) -> WorkingSession:
        return self._session

    def with_classpath_resolution(self, use_classpath_resolution: bool) -> "StrategyStage":
        if not use_classpath_resolution:
            self._session.disable_classpath_workspace_reader()
        return self

    def with_maven_central_repo(self, use_maven_central: bool) -> "StrategyStage":
        if not use_maven_central:
            self._session.disable_maven_central()
        return self

    def with_transitivity(self) -> FormatStage:
        return self.using(TRANSITIVE)

    def without_transitivity(self) -> FormatStage:
        return self.using(NON_TRANSITIVE)

    def using(self, strategy: ResolutionStrategy) -> FormatStage:
        """Resolve the pending dependencies with ``strategy`` and drain them.

        Raises:
            InvalidArgumentError: no dependencies are pending or no strategy given.
            ResolutionFailedError: the engine could not resolve the request.
        """
        if strategy is None:
            raise InvalidArgumentError("Resolution strategy must be specified")
        declared = self._session.dependencies_for_resolution
        if not declared:
            raise InvalidArgumentError("No dependencies were set for resolution")

        roots = apply_chain(strategy.pre_filters, declared, declared)
        request = self._session.create_request(roots)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolution round",
                extra=extra_context(
                    event="function_entry", component="strategy_stage", action="using",
                    strategy=strategy.name, declared=len(declared), roots=len(roots)
                )
            )

        with Timer() as t:
            resolved = self._retrieve(request)
        filtered = self._post_filter(strategy, resolved, roots)

        # The request has been sent; the next round starts from an empty list
        self._session.clear_dependencies_for_resolution()

        logger.info("Resolved %d artifact(s) for %d dependencies in %d ms",
                    len(filtered), len(declared), t.duration_ms())
        return self._format_stage_class(filtered, self._materializer)

    def _retrieve(self, request) -> List[ResolvedArtifact]:
        try:
            return list(self._session.engine.resolve(request))
        except ArtifactResolutionError as exc:
            raise ResolutionFailedError(
                f"Unable to get artifact from the repository, reason: {exc}") from exc
        except DependencyCollectionError as exc:
            raise ResolutionFailedError(
                f"Unable to collect dependency tree for given dependencies, reason: {exc}") from exc
        except EngineError as exc:
            raise ResolutionFailedError(
                f"Unable to collect/resolve dependency tree for a resolution, reason: {exc}") from exc

    @staticmethod
    def _post_filter(strategy: ResolutionStrategy, resolved: List[ResolvedArtifact],
                     roots: List[Dependency]) -> tuple:
        chain = tuple(strategy.post_filters) + (RESTRICT_POM_FILTER,)
        return tuple(a for a in resolved if chain_accepts(chain, a.as_dependency(), roots))


class ResolveStage:
    """Entry stage: declare dependencies, management and repositories."""

    def __init__(
        self,
        session: WorkingSession,
        format_stage_class: Type[FormatStage] = FormatStage,
        materializer: ArtifactMaterializer = None,
    ):
        self._session = session
        self._format_stage_class = format_stage_class
        self._materializer = materializer

    @property
    def session(self) -> WorkingSession:
        return self._session

    def resolve(self, *coordinates: DependencyLike) -> StrategyStage:
        """Queue ``coordinates`` and move on to strategy selection.

        All coordinates are parsed before any of them is queued, so a bad
        coordinate leaves the session untouched.
        """
        dependencies = [_as_dependency(c) for c in coordinates]
        for dependency in dependencies:
            self._session.add_dependency(dependency)
        return StrategyStage(self._session, self._format_stage_class, self._materializer)

    def add_dependency(self, dependency: DependencyLike) -> "ResolveStage":
        self._session.add_dependency(_as_dependency(dependency, require_version=False))
        return self

    def add_dependencies(self, *dependencies: DependencyLike) -> "ResolveStage":
        for dependency in [_as_dependency(d, require_version=False) for d in dependencies]:
            self._session.add_dependency(dependency)
        return self

    def add_dependency_management(self, dependency: DependencyLike) -> "ResolveStage":
        self._session.add_dependency_management(_as_dependency(dependency))
        return self

    def with_remote_repo(self, repo_id: str, url: str) -> "ResolveStage":
        self._session.add_remote_repository(RemoteRepository(repo_id, url))
        return self

    def with_classpath_resolution(self, use_classpath_resolution: bool) -> "ResolveStage":
        if not use_classpath_resolution:
            self._session.disable_classpath_workspace_reader()
        return self

    def with_maven_central_repo(self, use_maven_central: bool) -> "ResolveStage":
        if not use_maven_central:
            self._session.disable_maven_central()
        return self
