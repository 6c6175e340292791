"""Cache-aside fetching on top of :class:`~grimoire.cache.cache.ResponseCache`.

:class:`CachedFetcher` is the only writer of the cache. On a lookup it
asks the cache for a fresh entry and, on a miss, performs exactly one
transport call, stores the decoded payload under the same key and returns
it. Failed requests propagate to the caller and leave the cache untouched,
so the next lookup for the key tries the network again.

By default two concurrent misses for the same key each fetch and each
write; the later write simply replaces the earlier, equally fresh, entry.
With ``coalesce=True`` concurrent misses share a single in-flight request
instead: the first caller starts it and later callers await the same
task, so N simultaneous misses cost one transport call and one cache
write. The in-flight slot is released as soon as the request finishes,
successfully or not.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

from grimoire.cache.cache import MISSING, ResponseCache
from grimoire.output import get_output


class JSONTransport(Protocol):
    """Anything that can GET a URL and return its decoded JSON body."""

    async def get_json(self, url: str) -> Any: ...


class CachedFetcher:
    """Serve payloads from a :class:`ResponseCache`, fetching on a miss.

    Args:
        cache: The cache to read and populate. Owned by the caller, so
            several fetchers (or sessions) may share one cache lifetime.
        transport: Performs the network request, typically a
            :class:`~grimoire.client.async_client.AsyncClient`.
        coalesce: Share one in-flight request between concurrent misses on
            the same key.
    """

    def __init__(
        self,
        cache: ResponseCache,
        transport: JSONTransport,
        coalesce: bool = False,
    ) -> None:
        self._cache = cache
        self._transport = transport
        self._coalesce = coalesce
        self._inflight: dict[str, asyncio.Future[Any]] = {}
        self._hits = 0
        self._misses = 0

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def coalesce(self) -> bool:
        return self._coalesce

    async def fetch(self, key: str, window: Optional[float] = None) -> Any:
        """Return the payload for *key*, from the cache when fresh enough.

        Args:
            key: Cache key, which is also the URL requested on a miss.
            window: Freshness window in seconds; ``None`` uses the cache
                default.

        Returns:
            The decoded JSON payload.

        Raises:
            FetchError: If the request fails. Nothing is cached in that case.
        """
        output = get_output()
        payload = self._cache.get(key, window)
        if payload is not MISSING:
            self._hits += 1
            output.debug(f"Cache hit: {key}")
            return payload

        self._misses += 1
        output.debug(f"Cache miss: {key}")
        if not self._coalesce:
            return await self._fetch_and_store(key)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_shared(key))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._settle(key, done))
        else:
            output.debug(f"Joining in-flight request: {key}")
        # A cancelled caller must not cancel the request other callers await.
        return await asyncio.shield(task)

    def in_flight(self) -> list[str]:
        """Keys with a request currently running (coalescing mode only)."""
        return list(self._inflight)

    def stats(self) -> dict[str, Any]:
        """Return hit/miss counters alongside the cache snapshot."""
        return {
            "hits": self._hits,
            "misses": self._misses,
            "in_flight": len(self._inflight),
            **self._cache.stats(),
        }

    async def _fetch_and_store(self, key: str) -> Any:
        payload = await self._transport.get_json(key)
        self._cache.set(key, payload)
        return payload

    async def _fetch_shared(self, key: str) -> Any:
        # The slot is released before any waiter resumes, so a caller
        # arriving after completion always starts a new request.
        try:
            return await self._fetch_and_store(key)
        finally:
            self._release(key, asyncio.current_task())

    def _settle(self, key: str, task: asyncio.Future[Any]) -> None:
        self._release(key, task)
        if not task.cancelled():
            # Marks the exception retrieved when every waiter was cancelled.
            task.exception()

    def _release(self, key: str, task: Optional[asyncio.Future[Any]]) -> None:
        if task is not None and self._inflight.get(key) is task:
            del self._inflight[key]
