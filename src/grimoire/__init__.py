"""grimoire -- cached access to a read-only spell and class catalog.

The package fetches reference data (spells and character classes) from a
remote catalog service such as the D&D 5e SRD API and keeps each response
in memory for a freshness window chosen per kind of query, so repeated
lookups do not hit the network.

Typical use::

    from grimoire.client import connect
    from grimoire.models import ListFilters

    async with connect() as catalog:
        spells = await catalog.fetch_list(ListFilters(subcategory="3"))
        fireball = await catalog.fetch_detail("/api/spells/fireball")

Modules:
    app: Typer application and CLI entry point.
    cache: Response cache and cache-aside fetcher.
    client: HTTP transport and catalog client.
    models: Pydantic models for configuration and catalog payloads.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
