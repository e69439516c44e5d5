"""Resolution of client supplied paths against the shared root.

Every filesystem ``stat``, ``open``, ``remove``, walk or listing derived from
client input must go through :func:`resolve_path` (or :class:`PathResolver`)
first. Containment is a string-prefix check on the normalized absolute form;
symlink expansion is an optional second check in :meth:`PathResolver.require`.
"""

from __future__ import annotations

import base64
import binascii
import os
from pathlib import Path

from sharedrop.errors import InvalidInputError, PathUnsafeError


def _is_within(candidate: str, root: str) -> bool:
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


def resolve_path(root: str | Path, raw_relative: str) -> tuple[Path, bool]:
    """Join ``raw_relative`` onto ``root`` and report whether it stays inside.

    Pure string computation: the target does not need to exist.
    """
    abs_root = os.path.abspath(os.fspath(root))
    if "\0" in raw_relative:
        return Path(abs_root), False

    normalized = raw_relative.replace("\\", "/")
    joined = os.path.abspath(os.path.normpath(os.path.join(abs_root, normalized)))
    return Path(joined), _is_within(joined, abs_root)


def decode_path(encoded: str) -> str:
    """Decode a base64 wire path into its relative form."""
    if not encoded:
        return ""
    try:
        raw = base64.b64decode(encoded, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError("Invalid path encoding") from exc


def encode_path(relative: str) -> str:
    return base64.b64encode(relative.encode("utf-8")).decode("ascii")


class PathResolver:
    """Root-bound resolver used by every component touching the filesystem."""

    def __init__(self, root: str | Path, *, confine_symlinks: bool = True) -> None:
        self.root = Path(os.path.abspath(os.fspath(root)))
        self.confine_symlinks = confine_symlinks

    def resolve(self, raw_relative: str) -> tuple[Path, bool]:
        return resolve_path(self.root, raw_relative)

    def require(self, raw_relative: str) -> Path:
        """Return the resolved path or raise :class:`PathUnsafeError`."""
        resolved, ok = self.resolve(raw_relative)
        if not ok:
            raise PathUnsafeError("Bad path")
        if self.confine_symlinks and not self.is_confined(resolved):
            raise PathUnsafeError("Bad path")
        return resolved

    def is_confined(self, resolved: Path) -> bool:
        """Re-check containment after the filesystem expands symlinks."""
        real_root = os.path.realpath(self.root)
        return _is_within(os.path.realpath(resolved), real_root)

    def relative(self, resolved: Path) -> str:
        """Canonical slash separated form of ``resolved`` below the root."""
        rel = os.path.relpath(resolved, self.root)
        if rel == os.curdir:
            return ""
        return rel.replace(os.sep, "/")
