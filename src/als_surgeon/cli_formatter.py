"""
CLI Formatter - terminal output for ALS Surgeon

All command output goes through one CLIFormatter so colors can be switched
off in a single place: --no-color, or NO_COLOR / ALS_SURGEON_NO_COLOR set to
any non-empty value (https://no-color.org).

Color Scheme:
    Status: Success=green, Error=red, Warning=yellow
    Tags: removed=red, kept=green, plugin names=cyan
"""

import json
import os
import sys
from typing import Any, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme


CUSTOM_THEME = Theme({
    'status.success': 'bold green',
    'status.error': 'bold red',
    'status.warning': 'bold yellow',
    'tag.removed': 'red',
    'tag.kept': 'green',
    'plugin': 'cyan',
    'header': 'bold',
})

NO_COLOR_VARS = ('NO_COLOR', 'ALS_SURGEON_NO_COLOR')


def color_disabled_by_env() -> bool:
    return any(os.environ.get(var) for var in NO_COLOR_VARS)


class CLIFormatter:
    """
    Console output with a rich (colored) mode and a plain-text mode.

    In plain mode every message is written with print() exactly as given,
    which keeps output stable for pipes and tests.
    """

    def __init__(self, no_color: bool = False):
        self.use_rich = not (no_color or color_disabled_by_env())
        self._console = Console(theme=CUSTOM_THEME, highlight=False)
        self._err_console = Console(theme=CUSTOM_THEME, stderr=True, highlight=False)

    def print(self, text: str = ""):
        if self.use_rich:
            self._console.print(text)
        else:
            print(text)

    def print_raw(self, text: str):
        """Print text exactly as given, markup characters included."""
        if self.use_rich:
            self._console.print(text, markup=False, soft_wrap=True)
        else:
            print(text)

    def print_json(self, data: Any):
        """Indented JSON, never colored so it can be piped."""
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def tag_text(self, name: str, removed: bool = False) -> str:
        """An element name as <name>, styled for use inside print()."""
        text = f"<{name}>"
        if not self.use_rich:
            return text
        style = 'tag.removed' if removed else 'tag.kept'
        return f"[{style}]{escape(text)}[/{style}]"

    def plugin_text(self, name: str) -> str:
        return f"[plugin]{escape(name)}[/plugin]" if self.use_rich else name

    def _status(self, console: Console, style: str, prefix: str, message: str):
        if self.use_rich:
            console.print(f"[{style}]{prefix}[/{style}]{escape(message)}")
        else:
            print(f"{prefix}{message}", file=console.file)

    def success(self, message: str):
        self._status(self._console, 'status.success', "SUCCESS: ", message)

    def warning(self, message: str):
        self._status(self._console, 'status.warning', "WARNING: ", message)

    def error(self, message: str):
        """Errors go to stderr."""
        self._status(self._err_console, 'status.error', "ERROR: ", message)

    def header(self, text: str):
        if self.use_rich:
            self._console.print(f"[header]{escape(text)}[/header]")
        else:
            print(text)

    def create_table(self, title: Optional[str] = None) -> 'TableBuilder':
        return TableBuilder(self, title)


class TableBuilder:
    """A titled table of left- or right-aligned columns."""

    def __init__(self, formatter: CLIFormatter, title: Optional[str] = None):
        self.formatter = formatter
        self.title = title
        self.columns: List[Tuple[str, bool]] = []  # (header, right aligned)
        self.rows: List[List[str]] = []

    def add_column(self, header: str, right: bool = False) -> 'TableBuilder':
        self.columns.append((header, right))
        return self

    def add_row(self, *values) -> 'TableBuilder':
        self.rows.append([str(value) for value in values])
        return self

    def render(self):
        if self.formatter.use_rich:
            table = Table(title=self.title)
            for header, right in self.columns:
                table.add_column(header, justify='right' if right else 'left')
            for row in self.rows:
                table.add_row(*row)
            self.formatter._console.print(table)
            return

        if self.title:
            print(self.title)
            print()
        widths = [max([len(header)] + [len(row[i]) for row in self.rows])
                  for i, (header, _) in enumerate(self.columns)]
        lines = [[header for header, _ in self.columns]] + self.rows
        for n, cells in enumerate(lines):
            line = "  ".join(
                cell.rjust(width) if right else cell.ljust(width)
                for cell, width, (_, right) in zip(cells, widths, self.columns)
            )
            print(line)
            if n == 0:
                print("-" * len(line))


# === Global Formatter Instance ===

_formatter: Optional[CLIFormatter] = None


def get_formatter(no_color: bool = False) -> CLIFormatter:
    """Get or create the global formatter instance."""
    global _formatter

    if _formatter is None:
        _formatter = CLIFormatter(no_color=no_color)
    elif no_color:
        _formatter.use_rich = False

    return _formatter


def reset_formatter():
    """Reset the global formatter instance."""
    global _formatter
    _formatter = None
