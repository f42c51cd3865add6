"""Exceptions raised by the resolution pipeline.

Every error a caller of the staged API can see derives from ``ResolverError``.
Engine-internal failures never escape as such; the strategy stage turns them
into ``ResolutionFailedError``.
"""

from typing import Any, Sequence


class ResolverError(Exception):
    """Base class for all depfetch errors."""


class InvalidArgumentError(ResolverError, ValueError):
    """Caller misuse: missing dependencies, bad parameters or output kinds."""


class CoordinateParseError(InvalidArgumentError):
    """A coordinate string could not be turned into a coordinate."""


class ResolutionFailedError(ResolverError):
    """The resolution engine could not produce a resolved artifact set."""


class NoResultError(ResolverError):
    """A single result was requested but nothing survived filtering."""


class AmbiguousResultError(ResolverError):
    """A single result was requested but several survived filtering."""

    def __init__(self, results: Sequence[Any]):
        self.results = list(results)
        listing = "\n".join(str(r) for r in self.results)
        super().__init__(
            f"Resolution resolved more than a single artifact ({len(self.results)} artifact(s)), "
            f"unable to determine which one should be used.\n"
            f"Complete list of resolved artifacts:\n{listing}"
        )


class MaterializationError(ResolverError):
    """An artifact could not be turned into a readable local file."""


class UnsupportedOperationError(ResolverError, NotImplementedError):
    """The requested output kind is not supported by this format stage."""
