"""Console output for abpgen: generated data on stdout, diagnostics on stderr.

Everything a command wants the user to see goes through this module.
Stages and commands call the module-level helpers (:func:`info`,
:func:`warning`, :func:`debug`, ...), which forward to the one global
:class:`OutputManager` that :func:`~abpgen.app.main_callback` installs from
the global flags.

Two streams, two purposes:

* stdout receives data a user may pipe elsewhere -- dry-run path listings,
  ``inspect routes`` tables and ``config show`` documents;
* stderr receives diagnostics, one line per message, tagged by
  :class:`Level`.

Rich styling is used only when colour is allowed (``--no-color``,
``NO_COLOR`` and ``TERM=dumb`` all switch it off). Messages are printed as
:class:`rich.text.Text`, never parsed as markup, because they routinely
contain C# generics and bracketed attribute names.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text


class OutputFormat(str, Enum):
    """How data on stdout is rendered.

    ``AUTO`` picks ``RICH`` for an interactive, colour-capable terminal and
    ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class Level(str, Enum):
    """Severity of a diagnostic line."""

    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    HINT = "hint"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class _Channel:
    prefix: str
    style: Optional[str]
    quiet_hides: bool
    verbose_only: bool = False


_CHANNELS: dict[Level, _Channel] = {
    Level.DEBUG: _Channel("[debug] ", "dim", quiet_hides=False, verbose_only=True),
    Level.INFO: _Channel("", None, quiet_hides=True),
    Level.SUCCESS: _Channel("", "green", quiet_hides=True),
    Level.HINT: _Channel("→ ", "dim", quiet_hides=True),
    Level.WARNING: _Channel("Warning: ", "yellow", quiet_hides=False),
    Level.ERROR: _Channel("Error: ", "bold red", quiet_hides=False),
}


class OutputManager:
    """Writes data and diagnostics for one CLI invocation.

    Args:
        format: Rendering of stdout data; ``AUTO`` is resolved immediately.
        no_color: Print diagnostics without any styling.
        quiet: Hide info, success and hint lines. Warnings and errors
            are always shown.
        verbose: Show debug lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        rich_stdout = self._format == OutputFormat.RICH
        self._data_console = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_stdout)
        self._diag_console = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # -- stdout ------------------------------------------------------------

    def print_data(self, text: str) -> None:
        """Write one line of raw data to stdout."""
        sys.stdout.write(text + "\n")
        sys.stdout.flush()

    def print_json(self, data: Any) -> None:
        """Write *data* as an indented JSON document, highlighted in rich mode."""
        document = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._data_console.print(Syntax(document, "json", word_wrap=True))
        else:
            self.print_data(document)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows as a rich table, a JSON array of objects, or TSV."""
        if self._format == OutputFormat.JSON:
            self.print_json([dict(zip(headers, row)) for row in rows])
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(*headers, title=title, header_style="bold cyan")
        for row in rows:
            table.add_row(*row)
        self._data_console.print(table)

    # -- stderr ------------------------------------------------------------

    def log(self, level: Level, message: str) -> None:
        """Write *message* to stderr if *level* is visible in this mode."""
        channel = _CHANNELS[level]
        if channel.verbose_only and not self._verbose:
            return
        if channel.quiet_hides and self._quiet:
            return

        line = channel.prefix + message
        if self._no_color:
            sys.stderr.write(line + "\n")
            sys.stderr.flush()
        else:
            self._diag_console.print(Text(line, style=channel.style or ""), highlight=False)

    def debug(self, message: str) -> None:
        self.log(Level.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(Level.INFO, message)

    def success(self, message: str) -> None:
        self.log(Level.SUCCESS, message)

    def suggest(self, message: str) -> None:
        """Print a next-step hint, e.g. a flag that would avoid a skip."""
        self.log(Level.HINT, message)

    def warning(self, message: str) -> None:
        self.log(Level.WARNING, message)

    def error(self, message: str) -> None:
        self.log(Level.ERROR, message)


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` disables colour."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# -- global instance --------------------------------------------------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager.

    A manager keeps the ``sys.stdout``/``sys.stderr`` objects current at its
    creation, so tests that capture streams reset it between runs.
    """
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def debug(message: str) -> None:
    get_output().log(Level.DEBUG, message)


def info(message: str) -> None:
    get_output().log(Level.INFO, message)


def success(message: str) -> None:
    get_output().log(Level.SUCCESS, message)


def suggest(message: str) -> None:
    get_output().log(Level.HINT, message)


def warning(message: str) -> None:
    get_output().log(Level.WARNING, message)


def error(message: str) -> None:
    get_output().log(Level.ERROR, message)
