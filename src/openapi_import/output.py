"""Output formatting system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (trees, examples, rendered documents).
  This is what downstream tools pipe and parse.
* **stderr** -- all diagnostics (progress, warnings, errors, debug lines).
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- holds format preferences, the two Rich
   consoles, and quiet/verbose flags. Created once in
   :func:`~openapi_import.app.main_callback` and installed via
   :func:`set_output`.
2. Module-level helpers (:func:`info`, :func:`warning`, :func:`error`,
   :func:`debug`, ...) that delegate to the global instance.  The export
   driver reports per-endpoint failures through :func:`error`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from openapi_import.models import TagNode

_METHOD_STYLES = {
    "get": "bold blue",
    "post": "bold green",
    "put": "bold yellow",
    "patch": "bold cyan",
    "delete": "bold red",
}


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
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

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Print a value as JSON: highlighted in Rich mode, raw otherwise."""
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table`.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            self.print_json([dict(zip(headers, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*(escape(cell) for cell in row))
            self._stdout.print(table)

    def print_tree(self, nodes: list[TagNode], title: str = "API") -> None:
        """Print a tag -> path -> endpoint tree.

        * **Rich mode** -- :class:`~rich.tree.Tree` with coloured verbs.
        * **JSON mode** -- nested ``{tag, paths: [{path, endpoints}]}`` records.
        * **Plain mode** -- indented text, one node per line.
        """
        if self._format == OutputFormat.JSON:
            self.print_json([
                {
                    "tag": tag.label,
                    "description": tag.description,
                    "paths": [
                        {
                            "path": path.label,
                            "endpoints": [
                                {
                                    "id": ep.id,
                                    "method": ep.method.value.upper(),
                                    "summary": ep.summary,
                                    "operationId": ep.operation_id,
                                }
                                for ep in path.children
                            ],
                        }
                        for path in tag.children
                    ],
                }
                for tag in nodes
            ])
        elif self._format == OutputFormat.PLAIN:
            for tag in nodes:
                self.print_data(tag.label)
                for path in tag.children:
                    self.print_data(f"  {path.label}")
                    for ep in path.children:
                        summary = f"  {ep.summary}" if ep.summary else ""
                        self.print_data(f"    {ep.method.value.upper()}{summary}")
        else:
            root = Tree(f"[bold]{escape(title)}[/bold]")
            for tag in nodes:
                label = f"[bold magenta]{escape(tag.label)}[/bold magenta]"
                if tag.description:
                    label += f" [dim]{escape(tag.description)}[/dim]"
                tag_branch = root.add(label)
                for path in tag.children:
                    path_branch = tag_branch.add(escape(path.label))
                    for ep in path.children:
                        style = _METHOD_STYLES.get(ep.method.value, "bold")
                        line = f"[{style}]{ep.method.value.upper()}[/{style}]"
                        if ep.summary:
                            line += f" {escape(ep.summary)}"
                        path_branch.add(line)
            self._stdout.print(root)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def _diagnostic(self, plain: str, rich: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(rich)

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, escape(message))

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Yellow warning. NOT suppressed by ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Bold-red error. Never suppressed."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    def debug(self, message: str) -> None:
        """Debug line, only shown with ``--verbose``."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]")

    def progress(self, current: int, total: int, message: str = "") -> None:
        """``[current/total] message`` progress line. Suppressed by ``--quiet``."""
        if not self._quiet:
            line = f"[{current}/{total}] {message}".rstrip()
            self._diagnostic(line, f"[dim]{escape(line)}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating an ``AUTO`` one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global instance; used by the test-suite between tests."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_json(data: Any) -> None:
    get_output().print_json(data)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)


def progress(current: int, total: int, message: str = "") -> None:
    get_output().progress(current, total, message)
