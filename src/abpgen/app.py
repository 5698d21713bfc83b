"""The ``abpgen`` command line.

The root Typer app carries the flags shared by every command (output
format, verbosity, ``--dry-run``) and mounts three groups:

* ``generate`` -- :mod:`abpgen.commands.generate`, the pipeline-driven
  code generators;
* ``inspect`` -- :mod:`abpgen.commands.inspect`;
* ``config`` -- :mod:`abpgen.commands.config`.

:func:`main` is the console-script entry point. Known failures
(:class:`~abpgen.exceptions.AbpGenError`) end the process with their exit
code; anything else is a bug, reported with the path of a crash log.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from abpgen import __version__
from abpgen.commands.config import config_app
from abpgen.commands.generate import generate_app
from abpgen.commands.inspect import inspect_app
from abpgen.exit_codes import EXIT_GENERIC_FAILURE
from abpgen.output import OutputFormat, OutputManager, set_output

EXIT_CANCELLED = 130

app = typer.Typer(
    name="abpgen",
    help="Generate ABP framework code (DTOs, application services, controllers).",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)
app.add_typer(generate_app, name="generate", help="Generate code into an ABP solution.")
app.add_typer(inspect_app, name="inspect", help="Inspect existing C# sources.")
app.add_typer(config_app, name="config", help="Show and change abpgen settings.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"abpgen {__version__}")
        raise typer.Exit()


def _output_format(json_output: bool, plain_output: bool) -> OutputFormat:
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True,
        help="Print the abpgen version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Render tables and documents as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Render tables as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Print diagnostics without colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print every pipeline stage and lookup."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="List the files a generate command would write, without writing.",
    ),
) -> None:
    """Install the output manager and share ``dry_run`` with sub-commands."""
    set_output(OutputManager(
        format=_output_format(json_output, plain_output),
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    ))
    ctx.ensure_object(dict)
    ctx.obj.update(dry_run=dry_run, verbose=verbose)


def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _write_crash_log() -> Path:
    """Save the current traceback under ``<data dir>/logs`` and return its path."""
    from abpgen.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return log_path


def main() -> None:
    """Run the CLI. Always ends in :class:`SystemExit`."""
    from abpgen.exceptions import AbpGenError
    from abpgen.output import error

    signal.signal(signal.SIGINT, _on_sigint)
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except AbpGenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
