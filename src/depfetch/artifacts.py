"""Resolved artifact descriptors returned by resolution engines."""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple

from depfetch.coordinates import Coordinate, Dependency, PackagingType, ScopeType


@dataclass(frozen=True)
class ArtifactInfo:
    """Metadata of a resolved artifact, without any file attached."""
    coordinate: Coordinate
    resolved_version: str
    snapshot_version: bool = False
    extension: str = "jar"
    dependencies: Tuple[Coordinate, ...] = ()

    @property
    def packaging(self) -> PackagingType:
        return self.coordinate.packaging

    def as_dependency(self) -> Dependency:
        """View used by post-resolution filters.

        What was resolved is filtered, not what was declared, so the scope is
        always compile and the dependency is never optional.
        """
        return Dependency(self.coordinate, ScopeType.COMPILE, False)

    def __str__(self) -> str:
        return str(self.coordinate)


@dataclass(frozen=True)
class ResolvedArtifact(ArtifactInfo):
    """A resolved artifact and the file the engine located for it.

    ``file`` may point at a build descriptor instead of a packaged archive;
    ``unpackaged`` is set by engines that know the artifact came from a
    build output directory.
    """
    file: Optional[Path] = None
    unpackaged: bool = False

    @classmethod
    def create(
        cls,
        coordinate: Coordinate,
        file: Optional[Path],
        dependencies=(),
        unpackaged: bool = False,
        resolved_version: Optional[str] = None,
    ) -> "ResolvedArtifact":
        """Build an artifact, deriving version, snapshot flag and extension from the coordinate."""
        version = resolved_version or coordinate.version or ""
        return cls(
            coordinate=coordinate,
            resolved_version=version,
            snapshot_version=coordinate.is_snapshot,
            extension=coordinate.packaging.extension,
            dependencies=tuple(dependencies),
            file=Path(file) if file is not None else None,
            unpackaged=unpackaged,
        )

    @property
    def info(self) -> ArtifactInfo:
        return ArtifactInfo(
            coordinate=self.coordinate,
            resolved_version=self.resolved_version,
            snapshot_version=self.snapshot_version,
            extension=self.extension,
            dependencies=self.dependencies,
        )

    def with_file(self, file: Path) -> "ResolvedArtifact":
        """Copy of this artifact pointing at a materialized archive."""
        return replace(self, file=Path(file), unpackaged=False)

    def __str__(self) -> str:
        return f"{self.coordinate} ({self.file})"
