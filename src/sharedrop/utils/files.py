"""Utility helpers for working with files."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, List, Mapping

from sharedrop.models import FileEntry
from sharedrop.security.paths import encode_path

LOGGER = logging.getLogger(__name__)

COPY_CHUNK = 1 << 20


def format_file_size(size: int) -> tuple[float, str]:
    """Express ``size`` in decimal units."""
    if size < 1000:
        return float(size), "bytes"
    if size < 1_000_000:
        return size / 1000, "KBytes"
    return size / 1_000_000, "MBytes"


def display_size(size: int) -> str:
    value, unit = format_file_size(size)
    return f"{value:.2f} {unit}"


def list_directory(
    directory: Path,
    relative: str,
    *,
    show_hidden: bool,
    aliases: Mapping[str, str] | None = None,
) -> List[FileEntry]:
    """List ``directory`` (already resolved) with directories first.

    ``relative`` is the canonical path of ``directory`` below the root and is
    used to build the encoded link of each entry.
    """
    aliases = aliases or {}
    entries: List[FileEntry] = []
    with os.scandir(directory) as it:
        for item in it:
            if item.name.startswith(".") and not show_hidden:
                continue
            try:
                stat = item.stat()
                is_dir = item.is_dir()
            except OSError as exc:
                LOGGER.warning("Unable to stat %s: %s", item.path, exc)
                continue
            child = f"{relative}/{item.name}" if relative else item.name
            size = 0 if is_dir else stat.st_size
            entries.append(
                FileEntry(
                    name=item.name,
                    path=encode_path(child),
                    is_dir=is_dir,
                    size=size,
                    display_size="-" if is_dir else display_size(size),
                    modified=stat.st_mtime,
                    alias=None if is_dir else aliases.get(child),
                )
            )
    entries.sort(key=lambda entry: (not entry.is_dir, entry.name.lower()))
    return entries


def save_stream(source: BinaryIO, target: Path) -> int:
    """Copy an upload stream into ``target`` in bounded chunks."""
    with target.open("wb") as handle:
        shutil.copyfileobj(source, handle, COPY_CHUNK)
        return handle.tell()
