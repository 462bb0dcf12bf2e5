"""Benchmark modes: how a measured duration becomes a comparable score.

Two modes exist:

- ``AverageTime`` (``avgt``) reports the duration itself; lower is better.
- ``Throughput`` (``thrpt``) reports operations per time unit; higher is
  better.

Each mode carries a comparison *direction* (+1 for lower-is-better,
-1 for higher-is-better) used both to pick scenario winners and to sign
relative changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from benchrunner.bench.results import StatRow


class Mode:
    """Base class for a benchmark mode. Stateless."""

    name: str = ""

    def interpret(self, value: float) -> float:
        """Turn a duration (already in the output unit) into a score."""
        raise NotImplementedError

    def unit(self, base_unit: str) -> str:
        """Unit label for scores given the time unit symbol."""
        raise NotImplementedError

    def direction(self) -> int:
        """+1 if lower scores are better, -1 if higher scores are better."""
        raise NotImplementedError

    def best_of(self, candidate: StatRow, incumbent: StatRow | None) -> StatRow:
        """Return the better of two rows.

        An absent incumbent is replaced unconditionally. On an exact tie
        the incumbent is kept, so the first row seen wins.
        """
        if incumbent is None:
            return candidate
        if self.is_better(candidate.score, incumbent.score):
            return candidate
        return incumbent

    def is_better(self, score: float, other: float) -> bool:
        """True if *score* strictly beats *other* in this mode."""
        if self.direction() > 0:
            return score < other
        return score > other

    def format_value(self, value: float, unit: str) -> str:
        """Format a single score for progress output: ``'1.23 ms'``."""
        return f"{value:.2f} {unit}"

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class AverageTime(Mode):
    """Average time per operation. Lower is better."""

    name = "avgt"

    def interpret(self, value: float) -> float:
        return value

    def unit(self, base_unit: str) -> str:
        return base_unit

    def direction(self) -> int:
        return 1


class Throughput(Mode):
    """Operations per time unit. Higher is better."""

    name = "thrpt"

    def interpret(self, value: float) -> float:
        # A call faster than the unit's resolution converts to zero.
        if value == 0:
            return float("inf")
        return 1 / value

    def unit(self, base_unit: str) -> str:
        return f"ops/{base_unit}"

    def direction(self) -> int:
        return -1


AVERAGE_TIME = AverageTime()
THROUGHPUT = Throughput()

_MODE_ALIASES: dict[str, Mode] = {
    "avgt": AVERAGE_TIME,
    "average": AVERAGE_TIME,
    "averagetime": AVERAGE_TIME,
    "thrpt": THROUGHPUT,
    "throughput": THROUGHPUT,
}

# Every name mode_from_name accepts, spelled without separators.
MODE_NAMES: tuple[str, ...] = tuple(_MODE_ALIASES)


def mode_from_name(name: str) -> Mode:
    """Look up a mode by name (case insensitive).

    Raises:
        ValueError: If *name* is not a known mode.
    """
    key = name.strip().lower().replace("_", "").replace("-", "")
    try:
        return _MODE_ALIASES[key]
    except KeyError:
        raise ValueError(
            f"Unknown benchmark mode '{name}'. Valid modes: avgt, thrpt"
        ) from None
