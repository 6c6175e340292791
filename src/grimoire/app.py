"""Typer application and CLI entry point for grimoire.

The root callback resolves the effective configuration (see
:func:`~grimoire.config.resolve_config`) and installs the global
:class:`~grimoire.output.OutputManager`; the catalog commands and the
``config`` group then read both from the Typer context.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from grimoire import __version__
from grimoire.commands.catalog import categories_command, list_command, show_command
from grimoire.commands.config import config_app
from grimoire.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="grimoire",
    help="Browse a spell and class catalog with cached lookups.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("list")(list_command)
app.command("show")(show_command)
app.command("categories")(categories_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"grimoire {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    origin: Optional[str] = typer.Option(
        None, "--origin", help="Catalog service origin (e.g. https://www.dnd5eapi.co)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show cache hits, misses and requests."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Args:
        ctx: Typer invocation context; ``ctx.obj["config"]`` receives the
            resolved :class:`~grimoire.models.GlobalConfig`.
        version: If ``True``, print the version string and exit.
        origin: Catalog origin override (highest precedence).
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
    """
    from grimoire.config import resolve_config
    from grimoire.exceptions import GrimoireError
    from grimoire.output import OutputFormat, OutputManager, error, set_output

    fmt: Optional[OutputFormat] = None
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    try:
        config = resolve_config(
            cli_origin=origin,
            cli_format=fmt.value if fmt is not None else None,
        )
    except GrimoireError as exc:
        set_output(OutputManager(no_color=no_color))
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    try:
        resolved_format = OutputFormat(config.output.format)
    except ValueError:
        resolved_format = OutputFormat.AUTO

    set_output(
        OutputManager(
            format=resolved_format,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from grimoire.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``grimoire`` console script.

    :class:`~grimoire.exceptions.GrimoireError` instances that escape a
    command cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from grimoire.exceptions import GrimoireError
        from grimoire.output import error

        if isinstance(exc, GrimoireError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
