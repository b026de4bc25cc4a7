"""
gocodegen.debugutil - Helpers for Inspecting Generated Code
===========================================================

Mostly useful in tests: show where generated output differs from what was
expected.

>>> print(with_line_numbers("a\\nb"))
1: a
2: b
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text


DIFF_MARK = "Δ"
SAME_MARK = "| "


def with_line_numbers(text: str) -> str:
    """Prefix each line with its right-aligned, 1-based line number."""
    lines = text.split("\n")
    width = len(str(len(lines)))
    return "\n".join(f"{i:>{width}}: {line}" for i, line in enumerate(lines, start=1))


def _compare(a: str, b: str) -> list[tuple[str, str, bool]]:
    lines_a = a.replace("\t", "  ").split("\n")
    lines_b = b.replace("\t", "  ").split("\n")
    rows = []
    for i in range(max(len(lines_a), len(lines_b))):
        line_a = lines_a[i] if i < len(lines_a) else None
        line_b = lines_b[i] if i < len(lines_b) else None
        rows.append((line_a or "", line_b or "", line_a == line_b))
    return rows


def side_by_side(a: str, b: str) -> str:
    """
    Show ``a`` and ``b`` in two numbered columns.

    Equal lines are separated by ``|``, differing lines (including a line
    present on one side only) by ``Δ``. Tabs are shown as two spaces.
    """
    rows = _compare(a, b)
    width = max((len(left) for left, _, _ in rows), default=0)
    lines = [
        f"{left.ljust(width)}{SAME_MARK if same else DIFF_MARK} {right}"
        for left, right, same in rows
    ]
    return with_line_numbers("\n".join(lines))


def print_side_by_side(a: str, b: str, console: Console | None = None) -> None:
    """Print the comparison of ``a`` and ``b`` as a table, highlighting differing lines."""
    console = console or Console()
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("#", justify="right", style="dim")
    table.add_column("got")
    table.add_column("")
    table.add_column("want")

    for i, (left, right, same) in enumerate(_compare(a, b), start=1):
        style = "" if same else "bold red"
        table.add_row(
            str(i),
            Text(left, style=style),
            SAME_MARK.strip() if same else DIFF_MARK,
            Text(right, style=style),
        )
    console.print(table)
