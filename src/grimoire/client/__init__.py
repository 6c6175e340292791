"""Catalog access for grimoire.

Classes:
    :class:`AsyncClient` -- JSON GET transport backed by :class:`httpx.AsyncClient`.
    :class:`CatalogClient` -- query construction and typed, cached fetching.

:func:`connect` wires a transport, a
:class:`~grimoire.cache.ResponseCache` and a
:class:`~grimoire.cache.CachedFetcher` into a ready client.

Example::

    from grimoire.client import connect
    from grimoire.models import ListFilters

    async with connect() as catalog:
        spells = await catalog.fetch_list(ListFilters(category="wizard"))
"""

from grimoire.client.async_client import AsyncClient
from grimoire.client.catalog import CatalogClient, CatalogQuery, QueryShape, connect

__all__ = ["AsyncClient", "CatalogClient", "CatalogQuery", "QueryShape", "connect"]
