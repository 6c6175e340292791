"""Canonical Pydantic models shared across all grimoire modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CatalogConfig`, :class:`FreshnessConfig`, :class:`CacheConfig`,
    :class:`RequestConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Catalog models** -- typed views of the JSON payloads returned by the
catalog service:
    :class:`ListFilters`, :class:`ItemSummary`, :class:`ItemDetail`, and
    :class:`CategoryDescriptor`.

Catalog models use ``extra="allow"`` so that fields the service adds are
preserved in ``model_extra`` rather than silently dropped.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


ALL = "all"
"""Filter value meaning "do not filter on this dimension"."""


# --- Configuration ---


class CatalogConfig(BaseModel):
    """Location and URL layout of the remote catalog service.

    Request targets are built from ``origin + api_prefix`` (the *base*) and
    the path segment names below. The defaults describe a generic catalog
    (``{base}/items``, ``{base}/categories/{category}/items``,
    ``{base}/items?filter=...``); :meth:`dnd5e` returns the layout of the
    public D&D 5e SRD API, which is also the default of
    :class:`GlobalConfig`.
    """

    origin: str = Field(
        default="https://catalog.example.com",
        description="Scheme and host; detail references are resolved against it",
    )
    api_prefix: str = Field(default="/api", description="Path prefix of list endpoints")
    items_path: str = Field(default="items", description="Collection segment for items")
    categories_path: str = Field(
        default="categories", description="Collection segment for categories"
    )
    filter_param: str = Field(
        default="filter", description="Query parameter used for subcategory filtering"
    )

    @property
    def base_url(self) -> str:
        """``origin`` joined with ``api_prefix``, without a trailing slash."""
        return f"{self.origin.rstrip('/')}/{self.api_prefix.strip('/')}".rstrip("/")

    @classmethod
    def dnd5e(cls) -> CatalogConfig:
        """Layout of https://www.dnd5eapi.co (spells grouped by class, filtered by level)."""
        return cls(
            origin="https://www.dnd5eapi.co",
            api_prefix="/api",
            items_path="spells",
            categories_path="classes",
            filter_param="level",
        )


class FreshnessConfig(BaseModel):
    """Freshness windows, in seconds, per logical query category.

    The full list changes least often and lives longest. A detail record
    expires sooner than the full list but later
    than category or subcategory lists and the cache default.
    """

    full_list_seconds: float = Field(default=30 * 60, ge=0)
    filtered_list_seconds: float = Field(default=10 * 60, ge=0)
    detail_seconds: float = Field(default=15 * 60, ge=0)
    categories_seconds: float = Field(default=30 * 60, ge=0)


class CacheConfig(BaseModel):
    """In-memory response cache settings."""

    default_ttl_seconds: float = Field(
        default=5 * 60, ge=0, description="Window used when a caller supplies none"
    )
    coalesce_inflight: bool = Field(
        default=False,
        description="Share one request between concurrent misses on the same key",
    )


class RequestConfig(BaseModel):
    """HTTP settings for the catalog transport."""

    timeout_seconds: Optional[float] = Field(
        default=None, description="Request timeout in seconds; null waits indefinitely"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preference."""

    format: str = Field(default="auto", description="Output format: auto, json, plain, rich")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/grimoire/config.json``.

    Loaded and saved by :func:`~grimoire.config.load_global_config` and
    :func:`~grimoire.config.save_global_config`. See
    :func:`~grimoire.config.resolve_config` for the precedence chain.
    """

    catalog: CatalogConfig = Field(default_factory=CatalogConfig.dnd5e)
    freshness: FreshnessConfig = Field(default_factory=FreshnessConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Catalog payloads ---


class ListFilters(BaseModel):
    """Filter tuple for list queries. ``"all"`` disables a dimension.

    ``subcategory`` accepts ints so that ``ListFilters(subcategory=3)``
    behaves like ``"3"``.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    category: str = ALL
    subcategory: str = ALL


class ItemSummary(BaseModel):
    """One entry of a list response (``{"index", "name", "url"}``)."""

    model_config = ConfigDict(extra="allow")

    index: str
    name: str
    url: Optional[str] = None
    level: Optional[int] = None


class NamedReference(BaseModel):
    """A ``{"index", "name", "url"}`` link embedded in a detail record."""

    model_config = ConfigDict(extra="allow")

    name: str
    index: Optional[str] = None
    url: Optional[str] = None


class ItemDetail(BaseModel):
    """Full record returned by a detail lookup.

    Only ``index`` and ``name`` are required; the remaining fields follow
    the SRD spell record and default to empty values when a catalog does
    not provide them.
    """

    model_config = ConfigDict(extra="allow")

    index: str
    name: str
    url: Optional[str] = None
    level: Optional[int] = None
    school: Optional[NamedReference] = None
    casting_time: Optional[str] = None
    range: Optional[str] = None
    duration: Optional[str] = None
    components: list[str] = Field(default_factory=list)
    desc: list[str] = Field(default_factory=list)
    higher_level: list[str] = Field(default_factory=list)
    classes: list[NamedReference] = Field(default_factory=list)

    def raw(self) -> dict[str, Any]:
        """Return the record as plain JSON-compatible data, extras included."""
        return self.model_dump(mode="json", exclude_none=True)


class CategoryDescriptor(BaseModel):
    """One entry of the category index (a character class in the SRD)."""

    model_config = ConfigDict(extra="allow")

    index: str
    name: str
    url: Optional[str] = None
