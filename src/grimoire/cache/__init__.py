"""In-memory response caching for grimoire.

This package provides :class:`ResponseCache`, a time-bounded mapping from
request URL to decoded JSON payload, and :class:`CachedFetcher`, the
cache-aside layer that populates it from the network on a miss.

Freshness is decided per lookup: the cache stores when an entry was
fetched, and each caller passes the maximum age it accepts. Entries that
are found stale are evicted by the lookup itself.
"""

from grimoire.cache.cache import MISSING, CacheEntry, ResponseCache, make_key
from grimoire.cache.fetch import CachedFetcher

__all__ = ["MISSING", "CacheEntry", "CachedFetcher", "ResponseCache", "make_key"]
