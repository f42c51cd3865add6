"""Shared fixtures: an in-memory engine, fake artifact files and a local repository builder."""

import os
from typing import Iterable, Optional

import pytest

from depfetch import InMemoryEngine, Settings, resolver


@pytest.fixture
def engine():
    """Create a fresh in-memory engine for each test."""
    return InMemoryEngine()


@pytest.fixture
def make_file(tmp_path):
    """Create a fake packaged artifact file and return its path."""
    def _make(name: str, content: bytes = b"payload"):
        path = tmp_path / "files" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make


@pytest.fixture
def new_resolver(engine):
    """Resolver bound to the in-memory engine."""
    def _new(**kwargs):
        return resolver(engine=engine, settings=Settings(), **kwargs)
    return _new


def dependency_xml(coordinate: str, scope: Optional[str] = None, optional: bool = False,
                   exclusions: Iterable[str] = (), dep_type: Optional[str] = None) -> str:
    """Render a <dependency> element for ``g:a[:v]``."""
    parts = coordinate.split(":")
    xml = f"<dependency><groupId>{parts[0]}</groupId><artifactId>{parts[1]}</artifactId>"
    if len(parts) > 2:
        xml += f"<version>{parts[2]}</version>"
    if dep_type:
        xml += f"<type>{dep_type}</type>"
    if scope:
        xml += f"<scope>{scope}</scope>"
    if optional:
        xml += "<optional>true</optional>"
    if exclusions:
        xml += "<exclusions>"
        for exclusion in exclusions:
            g, a = exclusion.split(":")
            xml += f"<exclusion><groupId>{g}</groupId><artifactId>{a}</artifactId></exclusion>"
        xml += "</exclusions>"
    return xml + "</dependency>"


def pom_xml(gav: str, dependencies: Iterable[str] = (), packaging: str = "jar",
            parent: Optional[str] = None, properties: Optional[dict] = None,
            managed: Iterable[str] = ()) -> str:
    """Render a POM; ``dependencies`` and ``managed`` hold dependency_xml() strings."""
    group_id, artifact_id, version = gav.split(":")
    parts = ['<?xml version="1.0" encoding="UTF-8"?>',
             '<project xmlns="http://maven.apache.org/POM/4.0.0">',
             "<modelVersion>4.0.0</modelVersion>"]
    if parent:
        pg, pa, pv = parent.split(":")
        parts.append(f"<parent><groupId>{pg}</groupId><artifactId>{pa}</artifactId>"
                     f"<version>{pv}</version></parent>")
    if group_id:
        parts.append(f"<groupId>{group_id}</groupId>")
    parts.append(f"<artifactId>{artifact_id}</artifactId>")
    if version:
        parts.append(f"<version>{version}</version>")
    parts.append(f"<packaging>{packaging}</packaging>")
    if properties:
        parts.append("<properties>" + "".join(f"<{k}>{v}</{k}>" for k, v in properties.items())
                     + "</properties>")
    managed = list(managed)
    if managed:
        parts.append("<dependencyManagement><dependencies>" + "".join(managed)
                     + "</dependencies></dependencyManagement>")
    parts.append("<dependencies>" + "".join(dependencies) + "</dependencies>")
    parts.append("</project>")
    return "\n".join(parts)


class RepoBuilder:
    """Writes POMs and jars into a Maven-layout directory."""

    def __init__(self, root):
        self.root = str(root)

    def add(self, gav: str, dependencies: Iterable[str] = (), packaging: str = "jar",
            jar: bool = True, content: Optional[bytes] = None, **pom_kwargs) -> str:
        """Install an artifact; return the path of its main file."""
        group_id, artifact_id, version = gav.split(":")
        directory = os.path.join(self.root, *group_id.split("."), artifact_id, version)
        os.makedirs(directory, exist_ok=True)
        pom_path = os.path.join(directory, f"{artifact_id}-{version}.pom")
        with open(pom_path, "w", encoding="utf-8") as fh:
            fh.write(pom_xml(gav, dependencies, packaging=packaging, **pom_kwargs))
        if packaging == "pom" or not jar:
            return pom_path
        jar_path = os.path.join(directory, f"{artifact_id}-{version}.jar")
        with open(jar_path, "wb") as fh:
            fh.write(content if content is not None else gav.encode())
        return jar_path


@pytest.fixture
def local_repo(tmp_path):
    """Empty local repository builder."""
    return RepoBuilder(tmp_path / "m2")
