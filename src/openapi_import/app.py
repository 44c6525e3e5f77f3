"""Typer application and CLI entry point for openapi-import.

This module builds the root Typer application and registers the built-in
commands (``tree``, ``show``, ``example``, ``export``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~openapi_import.exceptions.OpenAPIImportError` exits with its own
code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`openapi_import.config`: Configuration resolution used in
    :func:`main_callback`.
    :mod:`openapi_import.output`: Output formatting initialised in
    :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from openapi_import import __version__
from openapi_import.commands.browse import example_command, show_command, tree_command
from openapi_import.commands.export import export_command
from openapi_import.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="openapi-import",
    help="Browse OpenAPI 3.x documents and export runnable request templates.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("tree")(tree_command)
app.command("show")(show_command)
app.command("example")(example_command)
app.command("export")(export_command)


def _version_callback(value: bool) -> None:
    """Eager ``--version`` handler."""
    if value:
        typer.echo(f"openapi-import {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the openapi-import version.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Emit trees, tables and examples as JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Emit undecorated text (no Rich styling)."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Never colour diagnostics or data."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Hide progress, info and success lines."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show reference and loading debug lines."
    ),
) -> None:
    """Resolve configuration and install the output manager.

    ``--json`` / ``--plain`` win over ``OPENAPI_IMPORT_FORMAT`` and config
    files; the resolved :class:`~openapi_import.models.GlobalConfig` is
    handed to commands through ``ctx.obj["config"]``.

    Raises:
        ConfigError: If a config file or environment variable is invalid.
    """
    from openapi_import.config import resolve_config
    from openapi_import.exceptions import ConfigError
    from openapi_import.output import OutputFormat, OutputManager, set_output

    cli_format = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    config = resolve_config(cli_format=cli_format)
    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        raise ConfigError(
            f"Unknown output format {config.output.format!r}; "
            f"expected one of: {', '.join(f.value for f in OutputFormat)}"
        ) from None

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _setup_signal_handlers() -> None:
    """Exit with status 130 on Ctrl-C outside of an export."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from openapi_import.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``openapi-import`` console script.

    Unhandled :class:`~openapi_import.exceptions.OpenAPIImportError`
    instances cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app(standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(130)
    except Exception as exc:
        from openapi_import.exceptions import OpenAPIImportError
        from openapi_import.output import error

        if isinstance(exc, OpenAPIImportError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected failure; traceback saved to {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
