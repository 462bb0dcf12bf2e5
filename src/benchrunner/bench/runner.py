"""Benchmark execution engine.

Orchestrates, for each registered target:
1. The ``before_all`` hook
2. Warm-up passes (timed and reported, never recorded)
3. Measured passes, accumulated into RunningStats
4. The ``after_all`` hook, even if the target raised
5. A results table once every target has run

Execution is strictly sequential: one target is measured completely
before the next one starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

import click

from benchrunner.bench.config import (
    BenchConfig,
    ConfigurationError,
    validate_counts,
)
from benchrunner.bench.display import format_stat_table
from benchrunner.bench.modes import Mode
from benchrunner.bench.results import StatRow, Target
from benchrunner.bench.stats import RunningStats
from benchrunner.bench.timing import (
    CallableInvoker,
    Invoker,
    TimeUnit,
    convert_duration,
)

log = logging.getLogger("benchrunner")


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------


def _noop() -> None:
    pass


@dataclass
class Hooks:
    """Caller-supplied callbacks around each invocation and each target."""

    before_each: Callable[[], Any] = _noop
    after_each: Callable[[], Any] = _noop
    before_all: Callable[[], Any] = _noop
    after_all: Callable[[], Any] = _noop


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class MeasureProgress:
    """Progress info passed to the callback."""

    phase: str  # "warmup" or "measure"
    target: str
    iteration: int  # 0-based for warmup, 1-based for measure
    total_iterations: int
    score: float
    unit: str
    mode: Mode


# Type alias for the progress callback.
ProgressCallback = Callable[[MeasureProgress], None]


def echo_progress(echo: Callable[[str], Any]) -> ProgressCallback:
    """Build the default progress callback writing through *echo*."""

    def _progress(progress: MeasureProgress) -> None:
        value = progress.mode.format_value(progress.score, progress.unit)
        if progress.phase == "warmup":
            echo(
                f"# Warmup Iteration ( {progress.iteration} / "
                f"{progress.total_iterations} ) - {value}"
            )
        else:
            echo(f"Iteration {progress.iteration}: {value}")

    return _progress


def _should_report(index: int, count: int, throttle: int) -> bool:
    return count < throttle or index % throttle == 0


# ---------------------------------------------------------------------------
# Measurement loop
# ---------------------------------------------------------------------------


def _timed_pass(
    target: Target,
    *,
    time_unit: TimeUnit,
    mode: Mode,
    hooks: Hooks,
    invoker: Invoker,
) -> float:
    """Run one hooked invocation and return its interpreted score."""
    hooks.before_each()
    nanos = invoker.invoke(target)
    hooks.after_each()
    return mode.interpret(convert_duration(nanos, time_unit))


def measure(
    target: Target,
    *,
    warmup: int,
    iterations: int,
    time_unit: TimeUnit,
    mode: Mode,
    hooks: Hooks | None = None,
    invoker: Invoker | None = None,
    throttle: int = 1000,
    progress: ProgressCallback | None = None,
) -> tuple[float, float]:
    """Warm up and measure one target.

    With ``warmup > 0`` there are ``warmup + 1`` warm-up passes whose
    scores are reported but discarded, followed by exactly
    ``iterations`` measured passes fed into a fresh RunningStats.

    Exceptions raised by the target propagate immediately.

    Returns:
        Tuple of (mean score, standard error of the mean).

    Raises:
        ConfigurationError: If ``iterations < 1`` or ``warmup < 0``.
            Raised before any hook or invocation.
    """
    errors = [
        e
        for e in validate_counts(warmup=warmup, iterations=iterations, throttle=throttle)
        if e.severity == "error"
    ]
    if errors:
        raise ConfigurationError(errors)

    hooks = hooks or Hooks()
    invoker = invoker or CallableInvoker()
    unit = mode.unit(time_unit.symbol)

    if warmup > 0:
        log.debug("Warming up %s (%d passes)", target.name, warmup + 1)
        for i in range(warmup + 1):
            score = _timed_pass(
                target, time_unit=time_unit, mode=mode, hooks=hooks, invoker=invoker
            )
            if progress is not None and _should_report(i, warmup, throttle):
                progress(MeasureProgress("warmup", target.name, i, warmup, score, unit, mode))

    stats = RunningStats()
    for i in range(1, iterations + 1):
        score = _timed_pass(target, time_unit=time_unit, mode=mode, hooks=hooks, invoker=invoker)
        stats.add_value(score)
        if progress is not None and _should_report(i, iterations, throttle):
            progress(MeasureProgress("measure", target.name, i, iterations, score, unit, mode))

    log.debug("Measured %s: %r", target.name, stats)
    return stats.mean(), stats.standard_error_of_mean()


# ---------------------------------------------------------------------------
# BenchmarkRunner
# ---------------------------------------------------------------------------


class BenchmarkRunner:
    """Measures registered callables and prints a results table.

    Usage::

        runner = BenchmarkRunner(iterations=20, time_unit=TimeUnit.MICROSECONDS)
        runner.add(parse, "small.json").add(parse, "large.json")
        rows = runner.run_all()

    Keyword overrides (``warmup``, ``iterations``, ``time_unit``,
    ``throttle``, ``mode``) build a BenchConfig when *config* is not
    given.  Invalid counts raise ConfigurationError here, before
    anything runs.
    """

    def __init__(
        self,
        config: BenchConfig | None = None,
        *,
        invoker: Invoker | None = None,
        echo: Callable[[str], Any] | None = None,
        progress: ProgressCallback | None = None,
        **overrides: Any,
    ) -> None:
        if config is not None and overrides:
            raise TypeError("Pass either a BenchConfig or keyword overrides, not both")
        self.config = config if config is not None else BenchConfig(**overrides)
        self.invoker: Invoker = invoker or CallableInvoker()
        self.echo: Callable[[str], Any] = echo or click.echo
        self.progress: ProgressCallback = progress or echo_progress(self.echo)
        self.hooks = Hooks()
        self.targets: list[Target] = []

    # -- registration -------------------------------------------------------

    def do_before_each(self, hook: Callable[[], Any]) -> BenchmarkRunner:
        """Run *hook* before every invocation, warm-up included."""
        self.hooks.before_each = hook
        return self

    def do_after_each(self, hook: Callable[[], Any]) -> BenchmarkRunner:
        """Run *hook* after every invocation, warm-up included."""
        self.hooks.after_each = hook
        return self

    def do_before_all(self, hook: Callable[[], Any]) -> BenchmarkRunner:
        """Run *hook* once before each target (once per comparison session)."""
        self.hooks.before_all = hook
        return self

    def do_after_all(self, hook: Callable[[], Any]) -> BenchmarkRunner:
        """Run *hook* once after each target (once per comparison session)."""
        self.hooks.after_all = hook
        return self

    def add(self, fn: Callable[..., Any], *args: Any) -> BenchmarkRunner:
        """Register *fn* called with *args*.  Registration order is report order."""
        self.targets.append(self.make_target(fn, args))
        return self

    def make_target(self, fn: Callable[..., Any], args: Sequence[Any]) -> Target:
        return Target(fn=fn, args=tuple(args), name=self.invoker.display_name(fn))

    # -- execution ----------------------------------------------------------

    def print_header(self) -> None:
        cfg = self.config
        self.echo(f"# Warmup: {cfg.warmup} iterations")
        self.echo(f"# Measurement: {cfg.iterations} iterations")
        self.echo(f"# Benchmark mode: {cfg.mode}, {cfg.unit_label}")

    def measure_target(self, target: Target, *, index: int = -1) -> StatRow:
        """Warm up and measure one target, without the all-hooks."""
        cfg = self.config
        self.echo(f"# Benchmark: {target.name}({target.args_str})")
        mean, error = measure(
            target,
            warmup=cfg.warmup,
            iterations=cfg.iterations,
            time_unit=cfg.time_unit,
            mode=cfg.mode,
            hooks=self.hooks,
            invoker=self.invoker,
            throttle=cfg.throttle,
            progress=self.progress,
        )
        return StatRow(
            name=target.name,
            args=target.args_str,
            mode=cfg.mode.name,
            iterations=cfg.iterations,
            score=mean,
            error=error,
            unit=cfg.unit_label,
            index=index,
        )

    def run_all(self) -> list[StatRow]:
        """Measure every registered target in registration order.

        ``before_all``/``after_all`` wrap each target; ``after_all`` runs
        even when the target raises, and the exception then propagates
        without a table being printed.

        Returns:
            One StatRow per target, in registration order.
        """
        self.print_header()
        rows: list[StatRow] = []
        for target in self.targets:
            log.debug("Benchmarking %s(%s)", target.name, target.args_str)
            self.hooks.before_all()
            try:
                rows.append(self.measure_target(target))
            except Exception:
                log.error("Benchmark %s failed", target.name)
                raise
            finally:
                self.hooks.after_all()

        self.echo("")
        self.echo(format_stat_table(rows))
        return rows

    def compare(
        self,
        scenarios: Iterable[Callable[[], Sequence[Any]]],
        implementations: Sequence[Callable[..., Any]],
        *,
        keep_results: bool = False,
    ) -> Any:
        """Compare *implementations* over *scenarios*.

        See ComparisonEngine.compare.
        """
        from benchrunner.bench.compare import ComparisonEngine

        engine = ComparisonEngine(self, keep_results=keep_results)
        return engine.compare(scenarios, implementations)
