"""Core sharedrop data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class LineMatch:
    """One search hit; ``line_number == -1`` carries a status message."""

    line_number: int
    content: str

    @property
    def is_sentinel(self) -> bool:
        return self.line_number == -1

    def to_dict(self) -> dict[str, object]:
        return {"lineNumber": self.line_number, "content": self.content}


@dataclass(slots=True)
class FileEntry:
    """Directory listing row."""

    name: str
    path: str
    is_dir: bool
    size: int
    display_size: str
    modified: float
    alias: str | None = None


class AliasStatus(str, Enum):
    OK = "ok"
    ALIAS_TAKEN = "alias_taken"
    INVALID_ALIAS = "invalid_alias"
    PATH_UNSAFE = "path_unsafe"
    PATH_NOT_FOUND = "path_not_found"
