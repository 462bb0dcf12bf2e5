"""Terminal display formatting for benchmark results.

Renders pipe-delimited tables of StatRows, either flat or relative to a
scenario winner, and the win-count leaderboard of a comparison session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import click

from benchrunner.bench.modes import Mode
from benchrunner.bench.results import StatRow
from benchrunner.formatting import format_markdown_table, format_percentage

if TYPE_CHECKING:
    from benchrunner.bench.compare import WinnerTally

STAT_HEADERS = ["Benchmark", "Args", "Mode", "Cnt", "Score", "Error", "Units"]
RELATIVE_HEADERS = STAT_HEADERS + ["Change"]


def _green(text: str) -> str:
    return click.style(text, fg="green")


def _red(text: str) -> str:
    return click.style(text, fg="red")


def _stat_cells(row: StatRow) -> list[str]:
    return [
        row.name,
        row.args,
        row.mode,
        str(row.iterations),
        row.score_str,
        row.error_str,
        row.unit,
    ]


def format_stat_table(rows: list[StatRow]) -> str:
    """Format rows as the flat results table, in the given order."""
    return format_markdown_table(STAT_HEADERS, [_stat_cells(r) for r in rows])


def format_relative_table(
    rows: list[StatRow],
    best: StatRow,
    mode: Mode,
    *,
    color: bool = True,
) -> str:
    """Format one scenario's rows with their change against the winner.

    Rows are listed best first.  The winning row is highlighted; the
    change of every other row is styled as a regression.
    """
    ordered = sorted(rows, key=lambda r: r.score * mode.direction())

    cells: list[list[str]] = []
    styles: list[list[Callable[[str], str] | None]] = []
    for row in ordered:
        change = _format_change(row.score, best.score, mode)
        cells.append(_stat_cells(row) + [change])
        if not color:
            styles.append([])
        elif row is best:
            styles.append([_green] * len(RELATIVE_HEADERS))
        else:
            styles.append([None] * len(STAT_HEADERS) + [_red])

    return format_markdown_table(RELATIVE_HEADERS, cells, styles=styles)


def _format_change(score: float, best: float, mode: Mode) -> str:
    from benchrunner.bench.compare import relative_change

    try:
        return format_percentage(relative_change(score, best, mode))
    except ZeroDivisionError:
        return "N/A"


def format_leaderboard(tally: WinnerTally) -> str:
    """Format win counts, most wins first: ``'Foo_bar — Won: 3 out of 5'``."""
    lines = [
        f"{name} — Won: {wins} out of {tally.scenarios}"
        for name, wins in tally.standings()
    ]
    return "\n".join(lines)
