"""Shared clipboard text visible to every client."""

from __future__ import annotations

import threading


class SharedClipboard:
    def __init__(self, text: str = "") -> None:
        self._lock = threading.Lock()
        self._text = text

    def get(self) -> str:
        with self._lock:
            return self._text

    def set(self, text: str) -> None:
        with self._lock:
            self._text = text
