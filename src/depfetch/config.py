"""Resolver settings loaded from a YAML/JSON file and the environment.

Precedence, lowest first: built-in defaults, the settings file
(``path`` argument or ``DEPFETCH_CONFIG``), environment overrides.

Example file::

    local_repository: ~/.m2/repository
    offline: false
    use_maven_central: true
    classpath_resolution: true
    workspace_roots: [../my-project]
    remote_repositories:
      - id: jboss
        url: https://repository.jboss.org/nexus/content/groups/public
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from depfetch.constants import Constants
from depfetch.engine.base import RemoteRepository
from depfetch.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Effective resolver settings."""
    local_repository: str = Constants.DEFAULT_LOCAL_REPOSITORY
    remote_repositories: List[RemoteRepository] = field(default_factory=list)
    workspace_roots: List[str] = field(default_factory=list)
    use_maven_central: bool = True
    classpath_resolution: bool = True
    offline: bool = False


def _read_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except OSError as exc:
        raise InvalidArgumentError(f"Unable to read settings file {path}: {exc}") from exc
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise InvalidArgumentError(f"Settings file {path} is malformed: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Settings file {path} must contain a mapping")
    return data


def _repositories(raw: Any) -> List[RemoteRepository]:
    repos = []
    for entry in raw or []:
        if not isinstance(entry, dict) or not entry.get("id") or not entry.get("url"):
            raise InvalidArgumentError(f"Remote repository entry needs 'id' and 'url': {entry!r}")
        repos.append(RemoteRepository(str(entry["id"]), str(entry["url"])))
    return repos


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from ``path`` (or ``DEPFETCH_CONFIG``) and the environment."""
    settings = Settings()
    path = path or os.environ.get(Constants.ENV_CONFIG)
    if path:
        data = _read_file(path)
        base = os.path.dirname(os.path.abspath(path))
        if data.get("local_repository"):
            settings.local_repository = str(data["local_repository"])
        settings.remote_repositories = _repositories(data.get("remote_repositories"))
        settings.workspace_roots = [
            os.path.normpath(os.path.join(base, os.path.expanduser(str(p))))
            for p in data.get("workspace_roots") or []
        ]
        settings.use_maven_central = bool(data.get("use_maven_central", True))
        settings.classpath_resolution = bool(data.get("classpath_resolution", True))
        settings.offline = bool(data.get("offline", False))
        logger.debug("Loaded settings from %s", path)

    env_repo = os.environ.get(Constants.ENV_LOCAL_REPOSITORY)
    if env_repo and env_repo.strip():
        settings.local_repository = env_repo.strip()
    env_offline = os.environ.get(Constants.ENV_OFFLINE)
    if env_offline is not None and env_offline.strip():
        settings.offline = env_offline.strip().lower() in _TRUE_VALUES

    settings.local_repository = os.path.expanduser(settings.local_repository)
    return settings
