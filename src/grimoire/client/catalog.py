"""Catalog client -- maps catalog queries onto cached requests.

:class:`CatalogClient` knows the URL layout of the catalog service and the
freshness window of each kind of query. It performs no caching itself:
every ``build_*`` method returns a :class:`CatalogQuery` (shape, key,
window) and every ``fetch_*`` method hands that query to a
:class:`~grimoire.cache.fetch.CachedFetcher`.

List queries take a :class:`~grimoire.models.ListFilters` and resolve to
exactly one of three shapes:

* both dimensions ``"all"`` -> full list, ``{base}/items``
* ``category`` set -> ``{base}/categories/{category}/items``; the
  subcategory is ignored in this case
* only ``subcategory`` set -> ``{base}/items?filter={subcategory}``

Detail lookups resolve a relative reference (``/api/spells/fireball``)
against the catalog origin.

Use :func:`connect` to get a client with its transport, cache and fetcher
wired together::

    async with connect(GlobalConfig()) as catalog:
        spells = await catalog.fetch_list(ListFilters(category="wizard"))
"""

from __future__ import annotations

import enum
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from grimoire.cache.cache import Clock, ResponseCache, make_key
from grimoire.cache.fetch import CachedFetcher
from grimoire.client.async_client import AsyncClient
from grimoire.exceptions import InvalidResponseError, InvalidUsageError
from grimoire.models import (
    ALL,
    CatalogConfig,
    CategoryDescriptor,
    FreshnessConfig,
    GlobalConfig,
    ItemDetail,
    ItemSummary,
    ListFilters,
)

M = TypeVar("M", bound=BaseModel)


class QueryShape(str, enum.Enum):
    """The distinct request shapes the client can produce."""

    FULL_LIST = "full_list"
    CATEGORY_LIST = "category_list"
    SUBCATEGORY_LIST = "subcategory_list"
    DETAIL = "detail"
    CATEGORIES = "categories"


@dataclass(frozen=True)
class CatalogQuery:
    """A resolved query: which shape, which cache key (= URL), how fresh."""

    shape: QueryShape
    key: str
    window: float


class CatalogClient:
    """Build catalog queries and fetch them through a :class:`CachedFetcher`.

    Args:
        catalog: URL layout of the catalog service.
        freshness: Freshness window per query category.
        fetcher: Cache-aside fetcher used for every request.
    """

    def __init__(
        self,
        catalog: CatalogConfig,
        freshness: FreshnessConfig,
        fetcher: CachedFetcher,
    ) -> None:
        self._catalog = catalog
        self._freshness = freshness
        self._fetcher = fetcher

    @property
    def fetcher(self) -> CachedFetcher:
        return self._fetcher

    @property
    def cache(self) -> ResponseCache:
        return self._fetcher.cache

    # ------------------------------------------------------------------ #
    # Query construction
    # ------------------------------------------------------------------ #

    def build_list_query(self, filters: ListFilters) -> CatalogQuery:
        """Resolve *filters* to one list query. ``category`` wins over ``subcategory``.

        Raises:
            InvalidUsageError: If a filter value is empty; use ``"all"`` to
                disable a dimension.
        """
        if not filters.category.strip() or not filters.subcategory.strip():
            raise InvalidUsageError("Filter values must not be empty; use 'all' instead")

        base = self._catalog.base_url
        items = self._catalog.items_path

        if filters.category != ALL:
            category = quote(filters.category, safe="")
            return CatalogQuery(
                shape=QueryShape.CATEGORY_LIST,
                key=f"{base}/{self._catalog.categories_path}/{category}/{items}",
                window=self._freshness.filtered_list_seconds,
            )
        if filters.subcategory != ALL:
            return CatalogQuery(
                shape=QueryShape.SUBCATEGORY_LIST,
                key=make_key(
                    f"{base}/{items}", {self._catalog.filter_param: filters.subcategory}
                ),
                window=self._freshness.filtered_list_seconds,
            )
        return CatalogQuery(
            shape=QueryShape.FULL_LIST,
            key=f"{base}/{items}",
            window=self._freshness.full_list_seconds,
        )

    def build_detail_query(self, reference: str) -> CatalogQuery:
        """Resolve a detail reference against the catalog origin.

        Args:
            reference: A relative reference as found in list results
                (``/api/spells/fireball``), or a bare index
                (``fireball``), which is looked up in the items collection.

        Raises:
            InvalidUsageError: If *reference* is empty.
        """
        reference = reference.strip()
        if not reference:
            raise InvalidUsageError("A detail reference must not be empty")

        if reference.startswith("/"):
            key = f"{self._catalog.origin.rstrip('/')}{reference}"
        else:
            key = f"{self._catalog.base_url}/{self._catalog.items_path}/{quote(reference, safe='')}"
        return CatalogQuery(
            shape=QueryShape.DETAIL,
            key=key,
            window=self._freshness.detail_seconds,
        )

    def build_categories_query(self) -> CatalogQuery:
        return CatalogQuery(
            shape=QueryShape.CATEGORIES,
            key=f"{self._catalog.base_url}/{self._catalog.categories_path}",
            window=self._freshness.categories_seconds,
        )

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #

    async def fetch_list(self, filters: Optional[ListFilters] = None) -> list[ItemSummary]:
        """Fetch the item summaries matching *filters* (everything by default)."""
        query = self.build_list_query(filters or ListFilters())
        payload = await self._fetcher.fetch(query.key, query.window)
        return _parse_results(query.key, payload, ItemSummary)

    async def fetch_detail(self, reference: str) -> ItemDetail:
        """Fetch the full record for *reference*."""
        query = self.build_detail_query(reference)
        payload = await self._fetcher.fetch(query.key, query.window)
        return _parse_model(query.key, payload, ItemDetail)

    async def fetch_categories(self) -> list[CategoryDescriptor]:
        """Fetch the category index."""
        query = self.build_categories_query()
        payload = await self._fetcher.fetch(query.key, query.window)
        return _parse_results(query.key, payload, CategoryDescriptor)


def _parse_model(url: str, data: Any, model: type[M]) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponseError(
            f"Unexpected {model.__name__} payload from {url}: {exc}", url=url
        ) from exc


def _parse_results(url: str, payload: Any, model: type[M]) -> list[M]:
    """Validate the ``results`` array of a list payload as *model* items."""
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise InvalidResponseError(f"Response from {url} has no 'results' list", url=url)
    return [_parse_model(url, item, model) for item in payload["results"]]


@asynccontextmanager
async def connect(
    config: Optional[GlobalConfig] = None,
    cache: Optional[ResponseCache] = None,
    clock: Optional[Clock] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[CatalogClient]:
    """Compose transport, cache, fetcher and client for one session.

    Args:
        config: Effective configuration; defaults to :class:`GlobalConfig`.
        cache: Cache to use. When omitted a new one is created for this
            session and discarded with it; pass an existing cache to share
            entries across sessions.
        clock: Clock for a newly created cache. Ignored when *cache* is given.
        transport: Optional httpx transport (e.g. :class:`httpx.MockTransport`).

    Yields:
        A ready :class:`CatalogClient`. The HTTP connection pool is closed
        on exit.
    """
    config = config or GlobalConfig()
    if cache is None:
        cache = ResponseCache(clock=clock, default_ttl=config.cache.default_ttl_seconds)

    async with AsyncClient(config.request, transport=transport) as http:
        fetcher = CachedFetcher(cache, http, coalesce=config.cache.coalesce_inflight)
        yield CatalogClient(config.catalog, config.freshness, fetcher)
