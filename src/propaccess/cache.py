"""Resolution cache keyed by concrete type.

Entries are computed once per key and never change afterwards: the cache
assumes a type does not gain or lose methods after it was first resolved.
Call :meth:`ResolutionCache.clear` after patching classes at runtime, or build
the resolver with ``enabled=False`` for types that change shape.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class AccessKind(StrEnum):
    ACCESSOR_METHOD = "accessor_method"
    PUBLIC_MEMBER = "public_member"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class AccessDescriptor:
    """Cached decision of how a property is read on a given type."""

    kind: AccessKind
    name: str | None = None


NO_ACCESS = AccessDescriptor(AccessKind.NONE)


@dataclass(slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0


class ResolutionCache:
    """Per-resolver store for access descriptors and gettable property names."""

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self._descriptors: dict[tuple[type, str | int], AccessDescriptor] = {}
        self._gettable_names: dict[type, tuple[str, ...]] = {}
        self._stats = CacheStats()
        self._lock = threading.Lock()

    def descriptor(
        self,
        cls: type,
        property_name: str | int,
        compute: Callable[[], AccessDescriptor],
    ) -> AccessDescriptor:
        return self._lookup(self._descriptors, (cls, property_name), compute)

    def gettable_names(
        self,
        cls: type,
        compute: Callable[[], tuple[str, ...]],
    ) -> tuple[str, ...]:
        return self._lookup(self._gettable_names, cls, compute)

    def _lookup(self, table: dict[K, V], key: K, compute: Callable[[], V]) -> V:
        if not self.enabled:
            return compute()
        value = table.get(key)
        if value is not None:
            self._stats.hits += 1
            return value
        with self._lock:
            # another thread may have filled the entry while we waited
            value = table.get(key)
            if value is None:
                value = compute()
                table[key] = value
                self._stats.misses += 1
                log.debug("Cached %r -> %r", key, value)
            else:
                self._stats.hits += 1
        return value

    def clear(self) -> None:
        with self._lock:
            self._descriptors.clear()
            self._gettable_names.clear()
            self._stats = CacheStats()

    def stats(self) -> CacheStats:
        return replace(self._stats)

    def __len__(self) -> int:
        return len(self._descriptors) + len(self._gettable_names)


__all__ = ["NO_ACCESS", "AccessDescriptor", "AccessKind", "CacheStats", "ResolutionCache"]
