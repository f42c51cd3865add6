"""Data models for coordinates and declared dependencies."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Optional, Tuple

from depfetch.constants import Constants


class ScopeType(Enum):
    """Dependency scopes."""
    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"
    PROVIDED = "provided"
    SYSTEM = "system"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "ScopeType":
        """Map a scope name to its member; empty means compile."""
        if not value:
            return cls.COMPILE
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown scope '{value}'") from exc


@dataclass(frozen=True)
class PackagingType:
    """Packaging of an artifact and the file extension it implies.

    Some packagings also imply a classifier, e.g. ``test-jar`` is a jar file
    classified ``tests``. Unknown packagings map to themselves.
    """
    id: str
    extension: str
    classifier: str = ""

    _known: ClassVar[Dict[str, "PackagingType"]] = {}

    JAR: ClassVar["PackagingType"]
    POM: ClassVar["PackagingType"]
    WAR: ClassVar["PackagingType"]
    EAR: ClassVar["PackagingType"]
    TEST_JAR: ClassVar["PackagingType"]

    @classmethod
    def of(cls, value: Optional[str]) -> "PackagingType":
        """Return the packaging for ``value``; empty means jar."""
        name = (value or "jar").strip().lower()
        known = cls._known.get(name)
        if known is not None:
            return known
        return cls(name, name)

    def __str__(self) -> str:
        return self.id


def _register(*packagings: PackagingType) -> None:
    for packaging in packagings:
        PackagingType._known[packaging.id] = packaging  # pylint: disable=protected-access


_register(
    PackagingType("jar", "jar"),
    PackagingType("pom", "pom"),
    PackagingType("war", "war"),
    PackagingType("ear", "ear"),
    PackagingType("rar", "rar"),
    PackagingType("ejb", "jar"),
    PackagingType("bundle", "jar"),
    PackagingType("maven-plugin", "jar"),
    PackagingType("test-jar", "jar", "tests"),
    PackagingType("ejb-client", "jar", "client"),
    PackagingType("java-source", "jar", "sources"),
    PackagingType("javadoc", "jar", "javadoc"),
)
PackagingType.JAR = PackagingType.of("jar")
PackagingType.POM = PackagingType.of("pom")
PackagingType.WAR = PackagingType.of("war")
PackagingType.EAR = PackagingType.of("ear")
PackagingType.TEST_JAR = PackagingType.of("test-jar")


# Identity used for filtering: (group, artifact, classifier, packaging)
CoordinateKey = Tuple[str, str, str, str]


@dataclass(frozen=True)
class Coordinate:
    """A package coordinate. The version stays optional until resolution."""
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: PackagingType = PackagingType.JAR
    classifier: str = ""

    def __post_init__(self):
        if not self.classifier and self.packaging.classifier:
            object.__setattr__(self, "classifier", self.packaging.classifier)

    @property
    def key(self) -> CoordinateKey:
        """Identity of the coordinate, ignoring its version."""
        return (self.group_id, self.artifact_id, self.classifier, self.packaging.id)

    @property
    def is_snapshot(self) -> bool:
        return bool(self.version) and self.version.endswith(Constants.SNAPSHOT_SUFFIX)

    def with_version(self, version: Optional[str]) -> "Coordinate":
        return replace(self, version=version)

    def to_canonical_form(self) -> str:
        """Render as ``G:A[:P[:C]][:V]``."""
        parts = [self.group_id, self.artifact_id]
        if self.classifier:
            parts.extend([self.packaging.id, self.classifier])
        elif self.packaging != PackagingType.JAR:
            parts.append(self.packaging.id)
        if self.version:
            parts.append(self.version)
        return ":".join(parts)

    def __str__(self) -> str:
        return self.to_canonical_form()


@dataclass(frozen=True)
class Exclusion:
    """An excluded group:artifact pair; ``*`` matches anything."""
    group_id: str
    artifact_id: str

    def matches(self, coordinate: Coordinate) -> bool:
        return (self.group_id in ("*", coordinate.group_id)
                and self.artifact_id in ("*", coordinate.artifact_id))

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


@dataclass(frozen=True)
class Dependency:
    """A declared dependency: coordinate plus scope, optional flag and exclusions."""
    coordinate: Coordinate
    scope: ScopeType = ScopeType.COMPILE
    optional: bool = False
    exclusions: FrozenSet[Exclusion] = field(default_factory=frozenset)

    @property
    def key(self) -> CoordinateKey:
        return self.coordinate.key

    @property
    def group_id(self) -> str:
        return self.coordinate.group_id

    @property
    def artifact_id(self) -> str:
        return self.coordinate.artifact_id

    @property
    def version(self) -> Optional[str]:
        return self.coordinate.version

    @property
    def packaging(self) -> PackagingType:
        return self.coordinate.packaging

    @property
    def classifier(self) -> str:
        return self.coordinate.classifier

    def excludes(self, coordinate: Coordinate) -> bool:
        """Return True when one of the exclusions matches ``coordinate``."""
        return any(exclusion.matches(coordinate) for exclusion in self.exclusions)

    def with_version(self, version: Optional[str]) -> "Dependency":
        return replace(self, coordinate=self.coordinate.with_version(version))

    def __str__(self) -> str:
        suffix = ":optional" if self.optional else ""
        return f"{self.coordinate}:{self.scope.value}{suffix}"
