"""Resolution engine backed by a Maven-layout local repository.

Artifacts are looked up in the workspace (project directories holding a
``pom.xml``) first, then in the local repository. Missing files are fetched
from the request's remote repositories unless the engine runs offline.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from depfetch.constants import Constants
from depfetch.coordinates import Coordinate, Dependency, PackagingType
from depfetch.common import http_client
from depfetch.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from depfetch.artifacts import ResolvedArtifact
from depfetch.versioning import is_range, pick_version
from .base import (
    ArtifactResolutionError,
    CollectRequest,
    DependencyCollectionError,
    RemoteRepository,
    ResolutionEngine,
)
from .graph import Node, walk
from .pom import PomError, PomModel, parse_pom, read_parent_ref

logger = logging.getLogger(__name__)

GAV = Tuple[str, str, str]


def index_workspace(roots: Sequence[str]) -> Dict[GAV, str]:
    """Map (group, artifact, version) to the ``pom.xml`` of every project below ``roots``."""
    index: Dict[GAV, str] = {}
    for root in roots:
        for dirpath, dirnames, files in os.walk(root):
            dirnames[:] = [d for d in dirnames if d != "target" and not d.startswith(".")]
            if Constants.POM_XML_FILE not in files:
                continue
            pom_path = os.path.join(dirpath, Constants.POM_XML_FILE)
            try:
                model = parse_pom(pom_path)
            except PomError as exc:
                logger.warning("Ignoring unreadable workspace POM %s: %s", pom_path, exc)
                continue
            index.setdefault((model.group_id, model.artifact_id, model.version), pom_path)
    return index


class LocalRepositoryEngine(ResolutionEngine):
    """Engine resolving against a local repository, a workspace and remote repositories."""

    def __init__(
        self,
        local_repository: str = Constants.DEFAULT_LOCAL_REPOSITORY,
        workspace_roots: Sequence[str] = (),
        offline: bool = False,
    ):
        self.local_repository = os.path.expanduser(str(local_repository))
        self.workspace_roots = list(workspace_roots)
        self.offline = offline
        self._pom_cache: Dict[str, PomModel] = {}

    def resolve(self, request: CollectRequest) -> List[ResolvedArtifact]:
        workspace = index_workspace(self.workspace_roots) if request.workspace_enabled else {}
        repositories = [] if self.offline else request.effective_repositories()
        if is_debug_enabled(logger):
            logger.debug(
                "Collecting dependencies",
                extra=extra_context(
                    event="function_entry", component="local_engine", action="resolve",
                    roots=len(request.dependencies), repositories=len(repositories),
                    workspace_projects=len(workspace)
                )
            )

        def describe(dependency: Dependency) -> Node:
            return self._describe(dependency, repositories, workspace)

        return walk(request, describe)

    # ---------- layout ----------

    def artifact_path(self, coordinate: Coordinate, extension: Optional[str] = None) -> str:
        """Local repository path of ``coordinate``'s file."""
        ext = extension or coordinate.packaging.extension
        classifier = f"-{coordinate.classifier}" if coordinate.classifier and ext != "pom" else ""
        name = f"{coordinate.artifact_id}-{coordinate.version}{classifier}.{ext}"
        return os.path.join(self._artifact_dir(coordinate.group_id, coordinate.artifact_id),
                            coordinate.version, name)

    def _artifact_dir(self, group_id: str, artifact_id: str) -> str:
        return os.path.join(self.local_repository, *group_id.split("."), artifact_id)

    @staticmethod
    def _remote_path(local_path: str, base_dir: str) -> str:
        return os.path.relpath(local_path, base_dir).replace(os.sep, "/")

    # ---------- resolution ----------

    def _describe(self, dependency: Dependency, repositories: List[RemoteRepository],
                  workspace: Dict[GAV, str]) -> Node:
        coordinate = dependency.coordinate
        if not coordinate.version:
            raise DependencyCollectionError(f"No version available for {coordinate}")
        if is_range(coordinate.version):
            coordinate = coordinate.with_version(self._select_version(coordinate, repositories, workspace))

        gav = (coordinate.group_id, coordinate.artifact_id, coordinate.version)
        if gav in workspace:
            pom_path = workspace[gav]
            model = self._load_pom(pom_path, repositories, workspace)
            return Node(coordinate, Path(pom_path), list(model.dependencies),
                        unpackaged=coordinate.packaging != PackagingType.POM)

        pom_path = self.artifact_path(coordinate, "pom")
        children: List[Dependency] = []
        if self._ensure_file(pom_path, repositories):
            children = list(self._load_pom(pom_path, repositories, workspace).dependencies)
        elif coordinate.packaging == PackagingType.POM:
            raise ArtifactResolutionError(f"Could not find artifact {coordinate} in {self._describe_repos(repositories)}")
        else:
            logger.warning("The POM for %s is missing, no dependency information available", coordinate)

        if coordinate.packaging == PackagingType.POM:
            return Node(coordinate, Path(pom_path), children)

        file_path = self.artifact_path(coordinate)
        if not self._ensure_file(file_path, repositories):
            raise ArtifactResolutionError(f"Could not find artifact {coordinate} in {self._describe_repos(repositories)}")
        return Node(coordinate, Path(file_path), children)

    def _select_version(self, coordinate: Coordinate, repositories: List[RemoteRepository],
                        workspace: Dict[GAV, str]) -> str:
        candidates = self._available_versions(coordinate.group_id, coordinate.artifact_id, repositories)
        candidates.extend(v for (g, a, v) in workspace
                          if g == coordinate.group_id and a == coordinate.artifact_id and v not in candidates)
        picked = pick_version(coordinate.version, candidates)
        if picked is None:
            raise DependencyCollectionError(
                f"No versions available for {coordinate} within specified range "
                f"(candidates: {', '.join(candidates) or 'none'})"
            )
        return picked

    def _available_versions(self, group_id: str, artifact_id: str,
                            repositories: List[RemoteRepository]) -> List[str]:
        base = self._artifact_dir(group_id, artifact_id)
        for repo in repositories:
            url = f"{repo.url.rstrip('/')}/{group_id.replace('.', '/')}/{artifact_id}/{Constants.METADATA_FILE}"
            dest = os.path.join(base, f"maven-metadata-{repo.id}.xml")
            try:
                http_client.download(url, dest)
            except (http_client.DownloadError, OSError) as exc:
                logger.warning("Could not fetch version metadata from %s: %s", safe_url(url), exc)

        versions: List[str] = []
        if not os.path.isdir(base):
            return versions
        for entry in sorted(os.listdir(base)):
            path = os.path.join(base, entry)
            if os.path.isdir(path):
                versions.append(entry)
            elif entry.startswith("maven-metadata") and entry.endswith(".xml"):
                versions.extend(v for v in _metadata_versions(path) if v not in versions)
        return versions

    def _ensure_file(self, local_path: str, repositories: List[RemoteRepository]) -> bool:
        """Return True when ``local_path`` exists, downloading it from the first repository that has it."""
        if os.path.isfile(local_path):
            return True
        relative = self._remote_path(local_path, self.local_repository)
        for repo in repositories:
            url = f"{repo.url.rstrip('/')}/{relative}"
            with Timer() as t:
                try:
                    fetched = http_client.download(url, local_path)
                except (http_client.DownloadError, OSError) as exc:
                    raise ArtifactResolutionError(f"Could not transfer {relative} from {repo}: {exc}") from exc
            if fetched:
                logger.info("Downloaded %s from %s (%d ms)", relative, repo.id, t.duration_ms())
                return True
        return False

    def _load_pom(self, pom_path: str, repositories: List[RemoteRepository],
                  workspace: Dict[GAV, str], chain: Tuple[str, ...] = ()) -> PomModel:
        cached = self._pom_cache.get(pom_path)
        if cached is not None:
            return cached
        if os.path.normpath(pom_path) in chain:
            cycle = " -> ".join(chain + (os.path.normpath(pom_path),))
            raise DependencyCollectionError(f"Cyclic parent POM reference: {cycle}")
        try:
            parent_ref = read_parent_ref(pom_path)
            parent = None
            if parent_ref is not None:
                parent_path = self._find_parent(pom_path, parent_ref, repositories, workspace)
                if parent_path is not None:
                    parent = self._load_pom(
                        parent_path, repositories, workspace, chain + (os.path.normpath(pom_path),)
                    )
            model = parse_pom(pom_path, parent)
        except PomError as exc:
            raise DependencyCollectionError(str(exc)) from exc
        self._pom_cache[pom_path] = model
        return model

    def _find_parent(self, pom_path, parent_ref, repositories, workspace) -> Optional[str]:
        gav = (parent_ref.group_id, parent_ref.artifact_id, parent_ref.version)
        if gav in workspace:
            return workspace[gav]
        relative = os.path.normpath(os.path.join(os.path.dirname(pom_path), parent_ref.relative_path))
        if os.path.isdir(relative):
            relative = os.path.join(relative, Constants.POM_XML_FILE)
        if os.path.isfile(relative) and relative != os.path.normpath(pom_path):
            return relative
        repo_path = self.artifact_path(Coordinate(*gav, packaging=PackagingType.POM))
        if self._ensure_file(repo_path, repositories):
            return repo_path
        logger.warning("Parent POM %s:%s:%s not found, ignoring inheritance", *gav)
        return None

    @staticmethod
    def _describe_repos(repositories: List[RemoteRepository]) -> str:
        names = ", ".join(str(r) for r in repositories)
        return f"local repository{', ' + names if names else ''}"


def _metadata_versions(path: str) -> List[str]:
    """Return versions listed in a maven-metadata.xml file in source order."""
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError):
        return []
    versions_elem = root.find("versioning/versions")
    if versions_elem is None:
        return []
    return [item.text.strip() for item in versions_elem.findall("version")
            if item.text and item.text.strip()]
