"""Coordinates, dependencies and their string forms."""

from .models import (
    Coordinate,
    CoordinateKey,
    Dependency,
    Exclusion,
    PackagingType,
    ScopeType,
)
from .parser import parse_coordinate, parse_dependency, parse_exclusion

__all__ = [
    "Coordinate",
    "CoordinateKey",
    "Dependency",
    "Exclusion",
    "PackagingType",
    "ScopeType",
    "parse_coordinate",
    "parse_dependency",
    "parse_exclusion",
]
