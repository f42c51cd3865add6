"""Minimal POM reader for the local repository engine.

Reads coordinates, parent, properties, dependency management and
dependencies. Property references are interpolated; inheritance is limited
to what the caller hands in as the parent model.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from depfetch.coordinates import (
    Coordinate,
    CoordinateKey,
    Dependency,
    Exclusion,
    PackagingType,
    ScopeType,
)

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")


class PomError(ValueError):
    """Raised when a POM cannot be parsed."""


@dataclass
class ParentRef:
    group_id: str
    artifact_id: str
    version: str
    relative_path: str = "../pom.xml"


@dataclass
class PomModel:
    """Effective content of a POM needed for dependency collection."""
    group_id: str
    artifact_id: str
    version: str
    packaging: PackagingType = PackagingType.JAR
    parent: Optional[ParentRef] = None
    properties: Dict[str, str] = field(default_factory=dict)
    managed_versions: Dict[CoordinateKey, str] = field(default_factory=dict)
    dependencies: List[Dependency] = field(default_factory=list)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version, self.packaging)


def _text(elem: Optional[ET.Element], tag: str, ns: str) -> Optional[str]:
    if elem is None:
        return None
    node = elem.find(f"{ns}{tag}")
    if node is None or node.text is None:
        return None
    return node.text.strip() or None


def read_parent_ref(path: str) -> Optional[ParentRef]:
    """Return the parent reference of the POM at ``path`` without reading the rest."""
    root, ns = _parse_root(path)
    return _parent_ref(root, ns)


def _parse_root(path: str):
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        raise PomError(f"Unable to read POM {path}: {exc}") from exc
    ns = root.tag[: root.tag.index("}") + 1] if root.tag.startswith("{") else ""
    return root, ns


def _parent_ref(root: ET.Element, ns: str) -> Optional[ParentRef]:
    parent = root.find(f"{ns}parent")
    if parent is None:
        return None
    group_id = _text(parent, "groupId", ns)
    artifact_id = _text(parent, "artifactId", ns)
    version = _text(parent, "version", ns)
    if not (group_id and artifact_id and version):
        return None
    return ParentRef(group_id, artifact_id, version, _text(parent, "relativePath", ns) or "../pom.xml")


def parse_pom(path: str, parent: Optional[PomModel] = None) -> PomModel:
    """Parse the POM at ``path``, inheriting from ``parent`` when given."""
    root, ns = _parse_root(path)
    parent_ref = _parent_ref(root, ns)

    group_id = _text(root, "groupId", ns) or (parent_ref.group_id if parent_ref else None)
    artifact_id = _text(root, "artifactId", ns)
    version = _text(root, "version", ns) or (parent_ref.version if parent_ref else None)
    if not (group_id and artifact_id and version):
        raise PomError(f"POM {path} does not declare groupId, artifactId and version")

    properties: Dict[str, str] = dict(parent.properties) if parent else {}
    props_elem = root.find(f"{ns}properties")
    if props_elem is not None:
        for prop in props_elem:
            name = prop.tag[len(ns):] if prop.tag.startswith(ns) else prop.tag
            properties[name] = (prop.text or "").strip()
    properties.update({
        "project.groupId": group_id,
        "project.artifactId": artifact_id,
        "project.version": version,
        "pom.groupId": group_id,
        "pom.version": version,
    })
    if parent_ref:
        properties["project.parent.groupId"] = parent_ref.group_id
        properties["project.parent.version"] = parent_ref.version

    # Interpolating the coordinates themselves is allowed, e.g. ${revision}
    group_id = interpolate(group_id, properties)
    version = interpolate(version, properties)
    properties["project.groupId"] = properties["pom.groupId"] = group_id
    properties["project.version"] = properties["pom.version"] = version

    model = PomModel(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        packaging=PackagingType.of(_text(root, "packaging", ns)),
        parent=parent_ref,
        properties=properties,
        managed_versions=dict(parent.managed_versions) if parent else {},
    )

    management = root.find(f"{ns}dependencyManagement/{ns}dependencies")
    if management is not None:
        for node in management.findall(f"{ns}dependency"):
            dep = _read_dependency(node, ns, properties)
            if dep is not None and dep.version:
                model.managed_versions[dep.key] = dep.version

    deps = root.find(f"{ns}dependencies")
    if deps is not None:
        for node in deps.findall(f"{ns}dependency"):
            dep = _read_dependency(node, ns, properties)
            if dep is None:
                continue
            if not dep.version and dep.key in model.managed_versions:
                dep = dep.with_version(model.managed_versions[dep.key])
            model.dependencies.append(dep)
    return model


def interpolate(value: str, properties: Dict[str, str]) -> str:
    """Replace ``${name}`` references; unknown references are left as-is."""
    for _ in range(10):
        replaced = _PROPERTY_REF.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
        if replaced == value:
            break
        value = replaced
    return value


def _read_dependency(node: ET.Element, ns: str, properties: Dict[str, str]) -> Optional[Dependency]:
    def value(tag: str) -> Optional[str]:
        raw = _text(node, tag, ns)
        return interpolate(raw, properties) if raw is not None else None

    group_id = value("groupId")
    artifact_id = value("artifactId")
    if not group_id or not artifact_id:
        return None
    exclusions = frozenset(
        Exclusion(_text(e, "groupId", ns) or "*", _text(e, "artifactId", ns) or "*")
        for e in node.findall(f"{ns}exclusions/{ns}exclusion")
    )
    try:
        scope = ScopeType.from_string(value("scope"))
    except ValueError:
        # import and other scopes never take part in collection
        return None
    return Dependency(
        coordinate=Coordinate(
            group_id=group_id,
            artifact_id=artifact_id,
            version=value("version"),
            packaging=PackagingType.of(value("type")),
            classifier=value("classifier") or "",
        ),
        scope=scope,
        optional=(value("optional") or "").lower() == "true",
        exclusions=exclusions,
    )
