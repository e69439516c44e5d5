"""Process-wide shared state, built once per application."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from sharedrop.config import AppConfig
from sharedrop.registry.aliases import AliasRegistry
from sharedrop.registry.clipboard import SharedClipboard
from sharedrop.security.paths import PathResolver
from sharedrop.security.ratelimit import RateLimiter


@dataclass
class AppState:
    config: AppConfig
    resolver: PathResolver
    aliases: AliasRegistry
    limiter: RateLimiter
    clipboard: SharedClipboard = field(default_factory=SharedClipboard)
    _show_hidden: bool = False
    _hidden_lock: threading.Lock = field(default_factory=threading.Lock)

    @classmethod
    def from_config(cls, config: AppConfig, root: str | None = None) -> "AppState":
        resolver = PathResolver(root or config.resolve_root(), confine_symlinks=config.confine_symlinks)
        limiter = RateLimiter(
            config.rate_limit,
            config.rate_window,
            max_keys=config.rate_max_keys,
        )
        return cls(
            config=config,
            resolver=resolver,
            aliases=AliasRegistry(resolver),
            limiter=limiter,
        )

    @property
    def show_hidden(self) -> bool:
        if self.config.disable_hidden_files:
            return False
        with self._hidden_lock:
            return self._show_hidden

    def toggle_hidden(self) -> bool:
        with self._hidden_lock:
            self._show_hidden = not self._show_hidden
            return self._show_hidden
