"""Benchmark targets and result rows.

A ``Target`` is one callable bound to one argument list.  A ``StatRow``
is the immutable summary produced after a target has been measured;
rows are totally ordered by raw score, and compare equal when their
scores are equal, so ``min``/``max``/``sorted`` work on them directly.
Code that must tell two tied rows apart compares them with ``is``.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable

from benchrunner.formatting import humanize_number


@dataclass(frozen=True)
class Target:
    """One unit of work under measurement."""

    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()
    name: str = ""

    @property
    def args_str(self) -> str:
        """Arguments joined for display: ``'1, 2'``."""
        return ", ".join(str(a) for a in self.args)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class StatRow:
    """Measured summary for one target."""

    name: str
    args: str
    mode: str
    iterations: int
    score: float
    error: float
    unit: str
    # Position among the compared implementations, -1 for flat runs.
    index: int = -1

    @property
    def score_str(self) -> str:
        return humanize_number(self.score)

    @property
    def error_str(self) -> str:
        return f"± {humanize_number(self.error)}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatRow):
            return NotImplemented
        return self.score == other.score

    def __hash__(self) -> int:
        return hash(self.score)

    def __lt__(self, other: StatRow) -> bool:
        if not isinstance(other, StatRow):
            return NotImplemented
        return self.score < other.score
