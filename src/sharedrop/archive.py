"""Zip archives of a directory subtree written to a temporary file."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import zipfile
from pathlib import Path
from typing import Iterator

from sharedrop.errors import InvalidInputError, IOFailureError, NotFoundError

LOGGER = logging.getLogger(__name__)

ARCHIVE_PREFIX = "sharedrop-"
ARCHIVE_SUFFIX = ".zip"


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _escapes(path: str, real_root: str) -> bool:
    real = os.path.realpath(path)
    return real != real_root and not real.startswith(real_root.rstrip(os.sep) + os.sep)


def archive_name(subtree: Path, path: str, *, is_dir: bool) -> str:
    """Zip member name for ``path``, relative to the archived subtree."""
    name = os.path.relpath(path, subtree).replace(os.sep, "/")
    return name + "/" if is_dir else name


def iter_entries(subtree: Path, *, include_hidden: bool) -> Iterator[tuple[str, bool]]:
    """Yield ``(absolute path, is_dir)`` depth first, parents before children."""

    def _on_error(exc: OSError) -> None:
        if isinstance(exc, PermissionError):
            LOGGER.warning("Skipping unreadable directory %s", exc.filename)
            return
        raise exc

    real_root = os.path.realpath(subtree)
    for dirpath, dirnames, filenames in os.walk(subtree, onerror=_on_error):
        kept = []
        for name in sorted(dirnames):
            if not include_hidden and _is_hidden(name):
                continue
            if os.path.islink(os.path.join(dirpath, name)):
                LOGGER.debug("Not following directory link %s", name)
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in kept:
            yield os.path.join(dirpath, name), True
        for name in sorted(filenames):
            if not include_hidden and _is_hidden(name):
                continue
            full = os.path.join(dirpath, name)
            if os.path.islink(full) and _escapes(full, real_root):
                LOGGER.warning("Skipping link leaving the archive root: %s", full)
                continue
            try:
                mode = os.stat(full).st_mode
            except OSError as exc:
                LOGGER.debug("Skipping unreadable entry %s: %s", full, exc)
                continue
            if not stat.S_ISREG(mode):
                LOGGER.debug("Skipping non-regular file %s", full)
                continue
            yield full, False


def build_archive(
    subtree: Path,
    *,
    include_hidden: bool = True,
    temp_dir: Path | None = None,
) -> Path:
    """Zip ``subtree`` into a new temporary file and return its path.

    The caller owns the returned file and must delete it.
    """
    subtree = Path(subtree)
    if not subtree.exists():
        raise NotFoundError("The path does not exist")
    if not subtree.is_dir():
        raise InvalidInputError("Only directories can be archived")

    try:
        fd, name = tempfile.mkstemp(prefix=ARCHIVE_PREFIX, suffix=ARCHIVE_SUFFIX, dir=temp_dir)
    except OSError as exc:
        raise IOFailureError(f"Unable to create zip file: {exc}") from exc
    archive_path = Path(name)
    try:
        with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(raw, "w", zipfile.ZIP_DEFLATED) as zf:
            for full, is_dir in iter_entries(subtree, include_hidden=include_hidden):
                arcname = archive_name(subtree, full, is_dir=is_dir)
                if is_dir:
                    zf.writestr(zipfile.ZipInfo.from_file(full, arcname), b"")
                    continue
                try:
                    zf.write(full, arcname, compress_type=zipfile.ZIP_DEFLATED)
                except PermissionError:
                    LOGGER.warning("Skipping unreadable file %s", full)
    except OSError as exc:
        archive_path.unlink(missing_ok=True)
        raise IOFailureError(f"Unable to create zip file: {exc}") from exc
    except BaseException:
        archive_path.unlink(missing_ok=True)
        raise

    LOGGER.debug("Archived %s into %s", subtree, archive_path)
    return archive_path
