"""Catalog commands -- list spells, show one spell, list classes.

Each command resolves the effective configuration stored on the Typer
context by :func:`~grimoire.app.main_callback`, opens a
:class:`~grimoire.client.catalog.CatalogClient` session with
:func:`~grimoire.client.catalog.connect` and renders the typed result
through :mod:`grimoire.output`.

Catalog errors are reported on stderr and mapped to the exit code of the
:class:`~grimoire.exceptions.GrimoireError` subclass.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from grimoire.client.catalog import CatalogClient, connect
from grimoire.exceptions import GrimoireError
from grimoire.models import ALL, GlobalConfig, ItemDetail, ListFilters
from grimoire.output import OutputFormat, error, format_data, get_output, print_table

T = TypeVar("T")


def _config_from(ctx: typer.Context) -> GlobalConfig:
    obj = ctx.obj or {}
    config = obj.get("config")
    return config if config is not None else GlobalConfig()


def _run(ctx: typer.Context, operation: Callable[[CatalogClient], Awaitable[T]]) -> T:
    """Run *operation* against a fresh catalog session, mapping errors to exit codes."""
    config = _config_from(ctx)

    async def _session() -> T:
        async with connect(config) as catalog:
            return await operation(catalog)

    try:
        return asyncio.run(_session())
    except GrimoireError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def list_command(
    ctx: typer.Context,
    category: str = typer.Option(
        ALL, "--category", "-c", help="Category index (e.g. 'wizard'), or 'all'."
    ),
    subcategory: str = typer.Option(
        ALL, "--subcategory", "-s", help="Subcategory filter (e.g. spell level), or 'all'."
    ),
) -> None:
    """List catalog items, optionally filtered.

    ``--category`` takes precedence: when it is set, ``--subcategory`` is
    ignored.

    Example::

        grimoire list
        grimoire list --category wizard
        grimoire list --subcategory 3 --json
    """
    filters = ListFilters(category=category, subcategory=subcategory)
    if category != ALL and subcategory != ALL:
        get_output().warning("--subcategory is ignored when --category is set")

    items = _run(ctx, lambda catalog: catalog.fetch_list(filters))
    rows = [[item.index, item.name, item.url] for item in items]
    print_table(["index", "name", "url"], rows, title=f"{len(items)} items")


def show_command(
    ctx: typer.Context,
    reference: str = typer.Argument(
        help="Relative reference (e.g. '/api/spells/fireball') or bare index."
    ),
) -> None:
    """Show the full record of one item.

    Example::

        grimoire show /api/spells/fireball
        grimoire show magic-missile --json
    """
    detail = _run(ctx, lambda catalog: catalog.fetch_detail(reference))
    output = get_output()
    if output.format == OutputFormat.JSON:
        format_data(detail.raw())
        return
    _print_detail(detail)


def categories_command(ctx: typer.Context) -> None:
    """List the category index (character classes in the SRD)."""
    categories = _run(ctx, lambda catalog: catalog.fetch_categories())
    rows = [[c.index, c.name] for c in categories]
    print_table(["index", "name"], rows, title=f"{len(categories)} categories")


def _print_detail(detail: ItemDetail) -> None:
    output = get_output()
    fields: list[tuple[str, Optional[Any]]] = [
        ("level", detail.level),
        ("school", detail.school.name if detail.school else None),
        ("casting_time", detail.casting_time),
        ("range", detail.range),
        ("duration", detail.duration),
        ("components", ", ".join(detail.components) or None),
        ("classes", ", ".join(c.name for c in detail.classes) or None),
    ]
    rows = [[name, value] for name, value in fields if value is not None]
    print_table(["field", "value"], rows, title=detail.name)
    output.print_paragraphs(detail.desc)
    output.print_paragraphs(detail.higher_level, heading="At higher levels:")
