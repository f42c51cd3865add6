"""Turn resolved artifacts into usable local files.

Most artifacts already point at a packaged archive. Artifacts resolved from
an in-progress build point at its ``pom.xml`` instead; for those the build
output directory is zipped into a temporary archive that lives until the
interpreter exits.
"""
from __future__ import annotations

import atexit
import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Iterator, Optional, Set

from depfetch.artifacts import ResolvedArtifact
from depfetch.constants import Constants
from depfetch.coordinates import PackagingType
from depfetch.errors import InvalidArgumentError, MaterializationError
from depfetch.common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)

# Packagings carrying metadata only, with no file worth handing out
UNMAPPABLE_PACKAGINGS = frozenset({PackagingType.POM.id})

_temporary_archives: Set[str] = set()
_cleanup_registered = False


def _remove_temporary_archives() -> None:
    for path in list(_temporary_archives):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.debug("Could not remove temporary archive %s: %s", path, exc)
        _temporary_archives.discard(path)


def _discard(archive: Optional[str]) -> None:
    if archive is None:
        return
    try:
        os.remove(archive)
    except OSError:
        logger.debug("Could not remove partial archive %s", archive)


def _schedule_removal(path: str) -> None:
    global _cleanup_registered  # pylint: disable=global-statement
    _temporary_archives.add(path)
    if not _cleanup_registered:
        atexit.register(_remove_temporary_archives)
        _cleanup_registered = True


def _raise(exc: OSError) -> None:
    raise exc


def iter_files(directory: str) -> Iterator[str]:
    """Yield paths of regular files below ``directory``, relative to it.

    Each directory is listed in sorted order, so the sequence is stable
    across calls. Symbolic links are followed; a missing directory yields
    nothing. A subdirectory that cannot be listed raises its OSError.
    """
    if not os.path.isdir(directory):
        return
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise, followlinks=True):
        dirnames.sort()
        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            if os.path.isfile(full):
                yield os.path.relpath(full, directory).replace(os.sep, "/")


def package_directory(archive: str, directory: str) -> int:
    """Write every file below ``directory`` into the zip ``archive``; return the entry count.

    Files older than 1980 are stored with the earliest timestamp zip can hold.
    """
    count = 0
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False) as zf:
        for entry in iter_files(directory):
            zf.write(os.path.join(directory, entry), arcname=entry)
            count += 1
    return count


class ArtifactMaterializer:
    """Maps resolved artifacts to files, packaging build output directories on demand."""

    def __init__(self, output_dir: str = Constants.BUILD_OUTPUT_DIR, temp_dir: Optional[str] = None):
        self.output_dir = output_dir
        self.temp_dir = temp_dir

    def is_mappable(self, artifact: ResolvedArtifact) -> bool:
        """Return False for packagings that have no file representation at all."""
        return artifact.packaging.id not in UNMAPPABLE_PACKAGINGS

    @staticmethod
    def needs_packaging(artifact: ResolvedArtifact) -> bool:
        """True when the artifact's file is a build descriptor rather than an archive."""
        if artifact.unpackaged:
            return True
        # FIXME: any real file named pom.xml would be packaged as well; engines should set unpackaged
        return artifact.file is not None and artifact.file.name == Constants.POM_XML_FILE

    def to_file(self, artifact: ResolvedArtifact) -> Path:
        """Return a readable file for ``artifact``.

        Raises:
            MaterializationError: when the file is missing or packaging fails.
        """
        if artifact is None:
            raise InvalidArgumentError("Artifact must not be None")
        if artifact.file is None:
            raise MaterializationError(f"Artifact {artifact.coordinate} has no file")
        if self.needs_packaging(artifact):
            return self._package(artifact)
        if not os.path.isfile(artifact.file) or not os.access(artifact.file, os.R_OK):
            raise MaterializationError(f"Artifact file {artifact.file} of {artifact.coordinate} is not readable")
        return artifact.file

    def _package(self, artifact: ResolvedArtifact) -> Path:
        artifact_id = artifact.coordinate.artifact_id
        root = os.path.join(os.path.dirname(artifact.file), self.output_dir)
        archive = None
        with Timer() as t:
            try:
                fd, archive = tempfile.mkstemp(
                    prefix=f"{artifact_id}-", suffix=f".{artifact.extension}", dir=self.temp_dir
                )
                os.close(fd)
                count = package_directory(archive, root)
            except (OSError, ValueError, zipfile.LargeZipFile) as exc:
                _discard(archive)
                raise MaterializationError(
                    f"Unable to get artifact {artifact_id} from the classpath: {exc}"
                ) from exc
            except BaseException:
                _discard(archive)
                raise
        _schedule_removal(archive)
        if is_debug_enabled(logger):
            logger.debug(
                "Packaged build output",
                extra=extra_context(
                    event="materialize", component="materializer", action="package",
                    outcome="success", entries=count, duration_ms=t.duration_ms(),
                    target=archive
                )
            )
        return Path(archive)
