"""Aligned table rendering of a CSV report, built on Rich."""

from __future__ import annotations

import csv
import io
from typing import List

from rich.cells import cell_len
from rich.console import Console
from rich.table import Table
from rich.text import Text

_SEVERITY_STYLE = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
}


def _rows(csv_text: str) -> List[List[str]]:
    # tabs are expanded up front so cell_len matches the rendered width
    return [
        [cell.expandtabs() for cell in row]
        for row in csv.reader(io.StringIO(csv_text))
        if row
    ]


def build_table(rows: List[List[str]], *, styled: bool = False) -> Table:
    """Build a borderless Rich table; the first row is the header.

    Every column but the last keeps its full width. The last one (the
    finding text) folds onto extra lines when the console is too narrow.
    """
    header, body = rows[0], rows[1:]
    table = Table(box=None, pad_edge=False, show_edge=False, header_style="bold" if styled else "")
    last = len(header) - 1
    for index, name in enumerate(header):
        if index == last:
            table.add_column(Text(name), overflow="fold")
        else:
            table.add_column(Text(name), no_wrap=True)

    width = len(header)
    for row in body:
        cells = (row + [""] * width)[:width]
        texts = [Text(cell) for cell in cells]
        if styled:
            texts[0].stylize(_SEVERITY_STYLE.get(cells[0].lower(), ""))
        table.add_row(*texts)
    return table


def render(csv_text: str) -> str:
    """Return *csv_text* as a whitespace-aligned table.

    Each column is as wide as its widest cell. Text without any rows is
    returned verbatim.
    """
    rows = _rows(csv_text)
    if not rows:
        return csv_text

    width = len(rows[0])
    col_widths = [
        max(cell_len(row[i]) if i < len(row) else 0 for row in rows)
        for i in range(width)
    ]
    total = sum(col_widths) + 2 * width + 1

    console = Console(
        file=io.StringIO(),
        width=total,
        color_system=None,
        highlight=False,
        emoji=False,
        legacy_windows=False,
    )
    console.print(build_table(rows))
    lines = console.file.getvalue().splitlines()
    return "\n".join(line.rstrip() for line in lines) + "\n"


def print_table(console: Console, csv_text: str) -> None:
    """Print *csv_text* as a coloured table, or verbatim when it has no rows."""
    rows = _rows(csv_text)
    if not rows:
        console.print(csv_text, markup=False, highlight=False)
        return
    console.print(build_table(rows, styled=True))
