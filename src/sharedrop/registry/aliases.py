"""Registry of human-chosen share aliases for files under the root.

The table maps a canonical relative path to its alias. It is expected to stay
small (hundreds of entries), so reverse lookups are linear scans.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Mapping

from sharedrop.models import AliasStatus
from sharedrop.security.paths import PathResolver
from sharedrop.utils.locks import ReadWriteLock

LOGGER = logging.getLogger(__name__)

ALIAS_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def is_valid_alias(alias: str) -> bool:
    return bool(alias) and ALIAS_PATTERN.fullmatch(alias) is not None


class AliasRegistry:
    """Concurrent ``canonical path -> alias`` store guarded by one RW lock."""

    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver
        self._lock = ReadWriteLock()
        self._aliases: dict[str, str] = {}

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._aliases)

    def _holder_of(self, alias: str) -> str | None:
        for canonical, existing in self._aliases.items():
            if existing == alias:
                return canonical
        return None

    def create_alias(self, canonical: str, alias: str) -> AliasStatus:
        """Bind ``alias`` to the file at ``canonical``.

        A path that already has an alias loses it: the newest alias wins.
        """
        if not is_valid_alias(alias):
            return AliasStatus.INVALID_ALIAS

        with self._lock.read_locked():
            if self._holder_of(alias) is not None:
                return AliasStatus.ALIAS_TAKEN

        resolved, ok = self.resolver.resolve(canonical)
        if not ok or (self.resolver.confine_symlinks and not self.resolver.is_confined(resolved)):
            return AliasStatus.PATH_UNSAFE

        # Existence check runs without the lock so slow storage never stalls readers.
        if not resolved.is_file():
            return AliasStatus.PATH_NOT_FOUND

        key = self.resolver.relative(resolved)
        with self._lock.write_locked():
            if self._holder_of(alias) is not None:
                return AliasStatus.ALIAS_TAKEN
            previous = self._aliases.get(key)
            self._aliases[key] = alias

        if previous is not None:
            LOGGER.info("Alias %s replaced by %s for %s", previous, alias, key)
        else:
            LOGGER.info("Alias created: %s -> %s", alias, key)
        return AliasStatus.OK

    def resolve_alias(self, alias: str) -> str | None:
        """Return the canonical path bound to ``alias``, if any."""
        with self._lock.read_locked():
            return self._holder_of(alias)

    def alias_for(self, canonical: str) -> str | None:
        with self._lock.read_locked():
            return self._aliases.get(canonical)

    def snapshot(self) -> Mapping[str, str]:
        with self._lock.read_locked():
            return MappingProxyType(dict(self._aliases))
