"""Mutable state shared by the stages of one resolver."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from depfetch.coordinates import Dependency
from depfetch.engine.base import MAVEN_CENTRAL, CollectRequest, RemoteRepository, ResolutionEngine
from depfetch.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class WorkingSession:
    """Dependencies queued for the next resolution round, plus request settings.

    Not thread safe: a session has a single owner. The pending list is
    drained by every resolution round; dependency management only grows.
    """

    def __init__(
        self,
        engine: ResolutionEngine,
        remote_repositories: Optional[List[RemoteRepository]] = None,
        classpath_resolution: bool = True,
        maven_central: bool = True,
    ):
        if engine is None:
            raise InvalidArgumentError("A resolution engine must be specified")
        self.engine = engine
        self._pending: List[Dependency] = []
        self._management: List[Dependency] = []
        self._repositories: List[RemoteRepository] = list(remote_repositories or [])
        self.workspace_enabled = classpath_resolution
        self.central_enabled = maven_central

    # ---------- dependencies ----------

    @property
    def dependencies_for_resolution(self) -> Tuple[Dependency, ...]:
        return tuple(self._pending)

    @property
    def dependency_management(self) -> Tuple[Dependency, ...]:
        return tuple(self._management)

    def add_dependency(self, dependency: Dependency) -> None:
        """Queue ``dependency``, taking a missing version from dependency management."""
        if dependency is None:
            raise InvalidArgumentError("Dependency must be specified")
        if not dependency.version:
            version = self.managed_version(dependency)
            if version is None:
                raise InvalidArgumentError(
                    f"Unable to get version for dependency specified by {dependency.coordinate}, "
                    "it was not provided and it is not managed"
                )
            dependency = dependency.with_version(version)
        self._pending.append(dependency)

    def add_dependency_management(self, dependency: Dependency) -> None:
        if dependency is None:
            raise InvalidArgumentError("Managed dependency must be specified")
        self._management.append(dependency)

    def managed_version(self, dependency: Dependency) -> Optional[str]:
        """Version pinned for ``dependency``'s identity; the latest entry wins."""
        for managed in reversed(self._management):
            if managed.key == dependency.key and managed.version:
                return managed.version
        return None

    def clear_dependencies_for_resolution(self) -> None:
        self._pending.clear()

    # ---------- repositories and toggles ----------

    @property
    def remote_repositories(self) -> Tuple[RemoteRepository, ...]:
        return tuple(self._repositories)

    def add_remote_repository(self, repository: RemoteRepository) -> None:
        """Add a repository; one with the same id is replaced in place."""
        if repository is None or not repository.id or not repository.url:
            raise InvalidArgumentError("Remote repository needs an id and a url")
        for index, existing in enumerate(self._repositories):
            if existing.id == repository.id:
                self._repositories[index] = repository
                return
        self._repositories.append(repository)

    def disable_classpath_workspace_reader(self) -> None:
        self.workspace_enabled = False

    def disable_maven_central(self) -> None:
        self.central_enabled = False
        self._repositories = [r for r in self._repositories if r.id != MAVEN_CENTRAL.id]

    def create_request(self, roots: List[Dependency]) -> CollectRequest:
        """Collect request for ``roots`` carrying the session's management, repositories and toggles."""
        return CollectRequest(
            dependencies=tuple(roots),
            managed_dependencies=tuple(self._management),
            repositories=tuple(self._repositories),
            workspace_enabled=self.workspace_enabled,
            central_enabled=self.central_enabled,
        )
