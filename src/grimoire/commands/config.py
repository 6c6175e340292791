"""Config commands -- view and modify global configuration.

Provides the ``grimoire config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~grimoire.models.GlobalConfig`): catalog location, freshness
windows, cache behaviour and request settings.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from grimoire.output import error, format_data, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Example::

        grimoire config show
        grimoire --json config show
    """
    from grimoire.config import get_config_dir
    from grimoire.models import GlobalConfig

    config = (ctx.obj or {}).get("config") or GlobalConfig()
    info(f"Config directory: {get_config_dir()}")
    format_data(config.model_dump(mode="json"))


def _coerce(key: str, current: Any, value: str) -> Any:
    """Convert *value* to the type of the field's *current* value.

    ``null``/``none`` always becomes ``None``; validation rejects it for
    fields that are not nullable.
    """
    if value.lower() in ("null", "none"):
        return None
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, (int, float)):
        try:
            return float(value) if "." in value or isinstance(current, float) else int(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'freshness.detail_seconds')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value in the global config file.

    The value is coerced to the existing field's type and the result is
    validated before saving.

    Example::

        grimoire config set catalog.origin http://localhost:3000
        grimoire config set freshness.full_list_seconds 3600
        grimoire config set cache.coalesce_inflight true
        grimoire config set request.timeout_seconds 10
    """
    from grimoire.config import load_global_config, save_global_config
    from grimoire.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    coerced = _coerce(key, target[final_key], value)
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults (the D&D 5e SRD catalog).

    Example::

        grimoire config reset --force
    """
    from grimoire.config import save_global_config
    from grimoire.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
