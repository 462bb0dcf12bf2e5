"""Shared text formatting helpers for benchrunner.

Provides number humanizing, percentage formatting, and the pipe-delimited
table layout used by the benchmark reporter.
"""

from __future__ import annotations

import math
from typing import Callable

_SI_SUFFIXES = "kMGTPE"

# Values at or past this magnitude round up to the next suffix.
_SI_ROLLOVER = 999_950


def humanize_number(value: float) -> str:
    """Format a number with an SI-like suffix.

    Values strictly between -1000 and 1000 print with two decimals
    (``'42.00'``, ``'-500.00'``). Larger magnitudes are divided by 1000
    per step and printed with one decimal plus the suffix letter
    (``'1.5k'``, ``'1.5M'``). Non-finite values print as ``'inf'``,
    ``'-inf'`` or ``'nan'``.
    """
    if not math.isfinite(value):
        return f"{value:.2f}"
    if -1000 < value < 1000:
        return f"{value:.2f}"

    idx = 0
    while value <= -_SI_ROLLOVER or value >= _SI_ROLLOVER:
        if idx == len(_SI_SUFFIXES) - 1:
            break
        value /= 1000
        idx += 1
    return f"{value / 1000:.1f}{_SI_SUFFIXES[idx]}"


def format_percentage(value: float) -> str:
    """Format a percentage with two decimals: ``'20.00%'``."""
    return f"{value:.2f}%"


def format_markdown_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    styles: list[list[Callable[[str], str] | None]] | None = None,
) -> str:
    """Format rows as a fixed-width, pipe-delimited table.

    Every cell is right-aligned to the widest string of its column
    (header included). Widths are computed on the plain text, so
    *styles* (one optional callable per cell, e.g. a colorizer) may
    wrap the padded cell without breaking alignment.

    Example::

        | Benchmark | Score |
        |-----------|-------|
        |   Foo_bar |  1.50 |
    """
    if not headers:
        return ""

    ncols = len(headers)
    widths = [len(h) for h in headers]
    for row in rows:
        for ci, cell in enumerate(row[:ncols]):
            widths[ci] = max(widths[ci], len(cell))

    def _line(cells: list[str], cell_styles: list[Callable[[str], str] | None]) -> str:
        parts: list[str] = []
        for ci in range(ncols):
            text = cells[ci] if ci < len(cells) else ""
            padded = text.rjust(widths[ci])
            style = cell_styles[ci] if ci < len(cell_styles) else None
            if style is not None:
                padded = style(padded)
            parts.append(f"| {padded} ")
        return "".join(parts) + "|"

    lines = [_line(headers, [])]
    lines.append("".join(f"|-{'-' * w}-" for w in widths) + "|")
    for ri, row in enumerate(rows):
        row_styles = styles[ri] if styles and ri < len(styles) else []
        lines.append(_line(row, row_styles))
    return "\n".join(lines)
