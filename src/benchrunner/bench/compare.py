"""Scenario-driven comparison of competing implementations.

For every scenario in a (possibly unbounded) stream, each implementation
is measured with freshly built arguments, the best row is chosen with
the mode's ordering, and the winner's tally is incremented.  Once the
stream is exhausted a leaderboard of win counts is printed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, Sequence

from benchrunner.bench.config import ConfigurationError, ValidationError
from benchrunner.bench.display import format_leaderboard, format_relative_table
from benchrunner.bench.modes import Mode
from benchrunner.bench.results import StatRow

if TYPE_CHECKING:
    from benchrunner.bench.runner import BenchmarkRunner

log = logging.getLogger("benchrunner")

# A scenario builds the argument list shared by every implementation.
ArgumentFactory = Callable[[], Sequence[Any]]


def relative_change(score: float, best: float, mode: Mode) -> float:
    """Percentage deviation of *score* from the winning *best* score.

    Lower-is-better: ``(score - best) / best * 100``.
    Higher-is-better: ``(best - score) / score * 100``.

    Raises:
        ZeroDivisionError: If the divisor score is zero.
    """
    if mode.direction() > 0:
        return (score - best) / best * 100
    return (best - score) / score * 100


# ---------------------------------------------------------------------------
# Winner tally
# ---------------------------------------------------------------------------


@dataclass
class WinnerTally:
    """Win counts per implementation for one comparison session.

    Implementations are tracked by position, so two callables with the
    same display name keep separate counts.
    """

    names: list[str]
    wins: list[int] = field(default_factory=list)
    scenarios: int = 0

    def __post_init__(self) -> None:
        if not self.wins:
            self.wins = [0] * len(self.names)

    def record(self, winner_index: int) -> None:
        """Count one finished scenario won by *winner_index*."""
        self.wins[winner_index] += 1
        self.scenarios += 1

    def standings(self) -> list[tuple[str, int]]:
        """(name, wins) pairs, most wins first; ties keep registration order."""
        order = sorted(range(len(self.names)), key=lambda i: -self.wins[i])
        return [(self.names[i], self.wins[i]) for i in order]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ScenarioResult:
    """All rows measured for one scenario, and the winner among them."""

    number: int  # 1-based
    rows: list[StatRow]
    best: StatRow

    def changes(self, mode: Mode) -> list[float]:
        """Relative change of each row against the winner, in row order."""
        return [relative_change(r.score, self.best.score, mode) for r in self.rows]


@dataclass
class ComparisonReport:
    """Outcome of a comparison session.

    Only the tally and the most recent scenario are kept unless the
    engine was asked to keep every result, so an unbounded scenario
    stream runs in constant memory.
    """

    tally: WinnerTally
    last: ScenarioResult | None = None
    scenarios: list[ScenarioResult] = field(default_factory=list)

    @property
    def total_scenarios(self) -> int:
        return self.tally.scenarios


# ---------------------------------------------------------------------------
# ComparisonEngine
# ---------------------------------------------------------------------------


class ComparisonEngine:
    """Runs a comparison session with a runner's config, hooks and output.

    Usage::

        engine = ComparisonEngine(BenchmarkRunner(iterations=5))
        report = engine.compare(
            (lambda n=n: [list(range(n, 0, -1))] for n in (10, 100, 1000)),
            [sorted, my_sort],
        )

    With ``keep_results=True`` every ScenarioResult is kept on the
    report; only use it with a bounded scenario stream.
    """

    def __init__(
        self,
        runner: BenchmarkRunner,
        *,
        color: bool = True,
        keep_results: bool = False,
    ) -> None:
        self.runner = runner
        self.color = color
        self.keep_results = keep_results

    @property
    def mode(self) -> Mode:
        return self.runner.config.mode

    def compare(
        self,
        scenarios: Iterable[ArgumentFactory],
        implementations: Sequence[Callable[..., Any]],
    ) -> ComparisonReport:
        """Measure every implementation on every scenario.

        *scenarios* is consumed lazily, once, in order.  Each factory is
        called once per implementation.  ``before_all``/``after_all``
        wrap the whole session; ``after_all`` runs even if an
        implementation raises, and the exception then propagates.

        Returns:
            ComparisonReport with per-scenario results and the tally.

        Raises:
            ConfigurationError: If *implementations* is empty.
        """
        if not implementations:
            raise ConfigurationError(
                [ValidationError(field="implementations", message="No implementations to compare")]
            )

        runner = self.runner
        names = [runner.invoker.display_name(fn) for fn in implementations]
        report = ComparisonReport(tally=WinnerTally(names=names))

        runner.print_header()
        runner.hooks.before_all()
        try:
            for number, factory in enumerate(scenarios, start=1):
                result = self._run_scenario(number, factory, implementations)
                report.tally.record(result.best.index)
                report.last = result
                if self.keep_results:
                    report.scenarios.append(result)
                runner.echo("")
                runner.echo(
                    format_relative_table(result.rows, result.best, self.mode, color=self.color)
                )
        finally:
            runner.hooks.after_all()

        log.debug("Comparison finished after %d scenarios", report.total_scenarios)
        runner.echo("")
        runner.echo(format_leaderboard(report.tally))
        return report

    def _run_scenario(
        self,
        number: int,
        factory: ArgumentFactory,
        implementations: Sequence[Callable[..., Any]],
    ) -> ScenarioResult:
        runner = self.runner
        rows: list[StatRow] = []
        best: StatRow | None = None
        for index, fn in enumerate(implementations):
            target = runner.make_target(fn, factory())
            row = runner.measure_target(target, index=index)
            rows.append(row)
            best = self.mode.best_of(row, best)

        assert best is not None
        log.debug("Scenario %d won by %s", number, best.name)
        return ScenarioResult(number=number, rows=rows, best=best)
