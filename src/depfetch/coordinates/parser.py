"""Token parsing utilities for coordinates and dependencies."""

from typing import Iterable, Optional

from depfetch.errors import CoordinateParseError
from .models import Coordinate, Dependency, Exclusion, PackagingType, ScopeType


def _split(token: str) -> list:
    parts = [p.strip() for p in token.strip().split(":")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise CoordinateParseError(
            f"Invalid coordinate '{token}'. Expected 'groupId:artifactId[:packaging[:classifier]]:version'."
        )
    return parts


def parse_coordinate(token: str, require_version: bool = True) -> Coordinate:
    """Parse ``G:A[:P[:C]]:V`` into a Coordinate.

    The last segment is always the version. With ``require_version`` unset it
    may be left out (``G:A``) or left empty (``G:A:P:``, ``G:A:P:C:``), which
    yields a version-less coordinate.
    """
    if token is None:
        raise CoordinateParseError("Coordinate must be specified")
    parts = _split(token)
    group_id, artifact_id = parts[0], parts[1]
    packaging: Optional[str] = None
    classifier = ""
    version: Optional[str] = None

    rest = parts[2:]
    if len(rest) > 3:
        raise CoordinateParseError(f"Invalid coordinate '{token}', too many segments")
    if require_version and (not rest or not rest[-1]):
        raise CoordinateParseError(f"Invalid coordinate '{token}', version is missing")
    if rest:
        version = rest[-1] or None
        rest = rest[:-1]
    if rest:
        packaging = rest[0] or None
    if len(rest) == 2:
        classifier = rest[1]

    return Coordinate(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        packaging=PackagingType.of(packaging),
        classifier=classifier,
    )


def parse_exclusion(token: str) -> Exclusion:
    """Parse ``G:A`` (wildcards allowed) into an Exclusion."""
    parts = _split(token)
    if len(parts) != 2:
        raise CoordinateParseError(f"Invalid exclusion '{token}'. Expected 'groupId:artifactId'.")
    return Exclusion(parts[0], parts[1])


def parse_dependency(
    token: str,
    scope: Optional[str] = None,
    optional: bool = False,
    exclusions: Iterable[str] = (),
    require_version: bool = True,
) -> Dependency:
    """Parse a coordinate token into a Dependency."""
    try:
        scope_type = ScopeType.from_string(scope)
    except ValueError as exc:
        raise CoordinateParseError(str(exc)) from exc
    return Dependency(
        coordinate=parse_coordinate(token, require_version=require_version),
        scope=scope_type,
        optional=optional,
        exclusions=frozenset(parse_exclusion(e) for e in exclusions),
    )
