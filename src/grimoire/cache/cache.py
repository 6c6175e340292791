"""In-memory response cache with per-lookup freshness windows.

Entries are stored with the time they were fetched, not with an expiry
time. The caller decides how old an entry may be on every lookup, so one
cache can serve queries with different freshness windows. An entry that
is too old is removed lazily, by the lookup that finds it stale.

The clock is injected (``time.monotonic`` by default) so that tests can
simulate expiry without sleeping.

Cache keys are fully resolved request URLs. :func:`make_key` renders query
parameters in sorted order so identical queries always resolve to the same
entry regardless of parameter ordering.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Final, Mapping, Optional
from urllib.parse import urlencode

Clock = Callable[[], float]


class _Missing:
    """Type of :data:`MISSING`."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()
"""Returned by :meth:`ResponseCache.get` when no fresh entry exists.

Distinct from every payload, including ``None``, ``[]`` and ``{}``.
"""


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the clock reading at which it was stored."""

    payload: Any
    fetched_at: float


def make_key(url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build the cache key for *url* with optional query *params*.

    Args:
        url: Absolute request URL, possibly already carrying a query string.
        params: Extra query parameters. Sorted by name before encoding.

    Returns:
        The request target as a string; ``url`` unchanged when there are no
        params.
    """
    if not params:
        return url
    query = urlencode(sorted((str(k), str(v)) for k, v in params.items()))
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


class ResponseCache:
    """Mapping from request key to the most recently fetched payload.

    The cache performs no I/O and never fetches by itself; it is populated
    only by :class:`~grimoire.cache.fetch.CachedFetcher` after a miss. It
    has no size bound: entries stay until they are found stale, deleted, or
    the cache is cleared.

    Args:
        clock: Returns the current time in seconds. Defaults to
            :func:`time.monotonic`.
        default_ttl: Window, in seconds, applied when :meth:`get` or
            :meth:`has` is called without one.

    Example::

        cache = ResponseCache()
        cache.set("https://www.dnd5eapi.co/api/classes", {"count": 12})
        cache.get("https://www.dnd5eapi.co/api/classes", 1800)
    """

    def __init__(self, clock: Optional[Clock] = None, default_ttl: float = 300) -> None:
        self._clock: Clock = clock or time.monotonic
        self._default_ttl = default_ttl
        self._entries: dict[str, CacheEntry] = {}

    @property
    def default_ttl(self) -> float:
        """Window used when a lookup does not pass one."""
        return self._default_ttl

    def get(self, key: str, window: Optional[float] = None) -> Any:
        """Return the payload for *key* if it is at most *window* seconds old.

        A stale entry is removed before :data:`MISSING` is returned.

        Args:
            key: Cache key (see :func:`make_key`).
            window: Maximum acceptable age in seconds. ``None`` uses
                :attr:`default_ttl`.

        Returns:
            The stored payload object (not a copy), or :data:`MISSING`.
        """
        entry = self._entries.get(key)
        if entry is None:
            return MISSING

        if window is None:
            window = self._default_ttl
        if self._clock() - entry.fetched_at > window:
            del self._entries[key]
            return MISSING

        return entry.payload

    def set(self, key: str, payload: Any) -> None:
        """Store *payload* under *key*, replacing any previous entry."""
        self._entries[key] = CacheEntry(payload=payload, fetched_at=self._clock())

    def has(self, key: str, window: Optional[float] = None) -> bool:
        """Return ``True`` if :meth:`get` would return a payload. Evicts like :meth:`get`."""
        return self.get(key, window) is not MISSING

    def entry(self, key: str) -> Optional[CacheEntry]:
        """Return the raw entry for *key* regardless of age, without evicting."""
        return self._entries.get(key)

    def delete(self, key: str) -> None:
        """Remove the entry for *key*. Missing keys are ignored."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return a diagnostic snapshot.

        Returns:
            A ``dict`` with ``size`` (number of entries, stale ones
            included until a lookup evicts them) and ``keys`` (list of
            keys in insertion order).
        """
        return {"size": len(self._entries), "keys": list(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
