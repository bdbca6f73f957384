"""In-process caches for resolved routes, file contents, layouts and middleware.

Entries never expire. A payload is a snapshot as of the last read from
disk and stays valid until the content watcher (or a manual clear)
invalidates it. Nothing is persisted across restarts.

Free-threading safety:
    - each ``Cache`` guards its dict with its own lock
    - every public operation is a single locked step
    - check-then-read-then-set sequences may interleave across requests;
      the worst case is a redundant read, last writer wins
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from pagewright.pages.types import RouteMatch

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached payload and the time it was stored."""

    value: T
    stored_at: float


class Cache(Generic[T]):
    """A string-keyed store with explicit invalidation only.

    Usage::

        files: Cache[str] = Cache("files")
        files.set("/srv/pages/index.html", "<h1>Home</h1>")
        files.get("/srv/pages/index.html")   # "<h1>Home</h1>"
        files.invalidate("/srv/pages/index.html")  # True
    """

    __slots__ = ("_entries", "_lock", "name")

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        """Return the payload for *key*, or ``None`` if absent."""
        with self._lock:
            entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def entry(self, key: str) -> CacheEntry[T] | None:
        """Return the full entry (payload plus timestamp) for *key*."""
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: T) -> T:
        """Store *value* under *key*, stamping the insertion time."""
        with self._lock:
            self._entries[key] = CacheEntry(value, time.time())
        return value

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def invalidate(self, key: str) -> bool:
        """Remove *key*. Returns whether an entry was removed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[T], bool]) -> list[str]:
        """Remove every entry whose payload satisfies *predicate*.

        Scans all entries under one lock acquisition and returns the
        removed keys.
        """
        with self._lock:
            doomed = [key for key, entry in self._entries.items() if predicate(entry.value)]
            for key in doomed:
                del self._entries[key]
        return doomed

    def clear(self) -> int:
        """Remove everything. Returns the number of evicted entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def items(self) -> list[tuple[str, T]]:
        """Snapshot of ``(key, payload)`` pairs."""
        with self._lock:
            return [(key, entry.value) for key, entry in self._entries.items()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"Cache({self.name!r}, entries={len(self)})"


class CacheStore:
    """The four independent caches used by one application.

    Constructed empty, populated on demand, cleared on explicit signal.
    Pass it to the resolver, composer, middleware runner and watcher
    rather than relying on module globals, so each app (or test) gets
    its own.
    """

    __slots__ = ("files", "layouts", "middleware", "routes")

    def __init__(self) -> None:
        self.routes: Cache[RouteMatch] = Cache("routes")
        self.files: Cache[str] = Cache("files")
        self.layouts: Cache[str] = Cache("layouts")
        self.middleware: Cache[Callable[..., Any]] = Cache("middleware")

    def clear(self) -> dict[str, int]:
        """Clear all four caches. Returns evicted counts per cache."""
        return {cache.name: cache.clear() for cache in self._caches()}

    def stats(self) -> dict[str, int]:
        """Current entry count per cache."""
        return {cache.name: len(cache) for cache in self._caches()}

    def _caches(self) -> tuple[Cache[Any], ...]:
        return (self.routes, self.files, self.layouts, self.middleware)


def cache_key(path: str | Path) -> str:
    """Normalise a filesystem path into a file-cache key."""
    return str(path)
