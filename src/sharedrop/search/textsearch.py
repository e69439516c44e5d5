"""Bounded, streaming text search inside a single file."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterator, List, TextIO

from sharedrop.errors import InvalidInputError, IOFailureError, NotFoundError
from sharedrop.models import LineMatch

LOGGER = logging.getLogger(__name__)

MAX_LINE_CHARS = 300
MAX_MATCHES = 1000
MAX_SCAN_CHARS = 64 * 1024
TRUNCATION_MARKER = "..."
NO_MATCHES_MESSAGE = "No matches found."
LIMIT_MESSAGE = f"Search results limited to {MAX_MATCHES} matches."


def build_matcher(term: str, *, case_sensitive: bool, whole_word: bool) -> Callable[[str], bool]:
    """Return a predicate telling whether a line matches ``term``.

    The term is always treated literally, even in whole-word mode.
    """
    if whole_word:
        flags = 0 if case_sensitive else re.IGNORECASE
        pattern = re.compile(rf"\b{re.escape(term)}\b", flags)
        return lambda line: pattern.search(line) is not None

    if case_sensitive:
        return lambda line: term in line

    lowered = term.lower()
    return lambda line: lowered in line.lower()


def _truncate(line: str) -> str:
    if len(line) > MAX_LINE_CHARS:
        return line[:MAX_LINE_CHARS] + TRUNCATION_MARKER
    return line


def _iter_lines(handle: TextIO) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, text)`` with each line capped at ``MAX_SCAN_CHARS``.

    The remainder of an overlong line is read and dropped in bounded pieces,
    so memory stays flat no matter how the file is laid out.
    """
    line_number = 0
    while True:
        piece = handle.readline(MAX_SCAN_CHARS)
        if not piece:
            return
        line_number += 1
        rest = piece
        while rest and not rest.endswith("\n"):
            rest = handle.readline(MAX_SCAN_CHARS)
        yield line_number, piece.rstrip("\n")


def search_in_file(
    path: Path,
    term: str,
    *,
    case_sensitive: bool = False,
    whole_word: bool = False,
) -> List[LineMatch]:
    """Scan ``path`` line by line and collect up to ``MAX_MATCHES`` hits.

    The result is never empty: without hits it holds a single sentinel entry
    (line number ``-1``), and a capped result ends with one as well. Only the
    first ``MAX_SCAN_CHARS`` characters of each line are matched.
    """
    if not term:
        raise InvalidInputError("Missing required parameters")

    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"The file does not exist: {path.name}")
    if path.is_dir():
        raise InvalidInputError(f"Cannot search a directory: {path.name}")
    if not path.is_file():
        raise InvalidInputError(f"Not a regular file: {path.name}")

    matches = build_matcher(term, case_sensitive=case_sensitive, whole_word=whole_word)
    results: List[LineMatch] = []

    try:
        with path.open("r", encoding="utf-8", errors="replace", newline=None) as handle:
            for line_number, line in _iter_lines(handle):
                if not matches(line):
                    continue
                results.append(LineMatch(line_number, _truncate(line)))
                if len(results) >= MAX_MATCHES:
                    results.append(LineMatch(-1, LIMIT_MESSAGE))
                    break
    except FileNotFoundError as exc:
        raise NotFoundError(f"The file does not exist: {path.name}") from exc
    except OSError as exc:
        LOGGER.error("Error reading %s: %s", path, exc)
        raise IOFailureError(f"Search error: {exc.strerror or exc}") from exc

    if not results:
        results.append(LineMatch(-1, NO_MATCHES_MESSAGE))
    return results


def count_matches(results: List[LineMatch]) -> int:
    """Number of real hits, ignoring sentinel entries."""
    return sum(1 for result in results if not result.is_sentinel)
