"""Timing capture for benchmark iterations.

All measurements are taken in nanoseconds with ``time.perf_counter_ns``
and converted to the configured output unit afterwards.  Invocation is
behind the ``Invoker`` interface so the measurement loop never needs to
know how a unit of work is called or named.
"""

from __future__ import annotations

import enum
import functools
import time
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from benchrunner.bench.results import Target


# ---------------------------------------------------------------------------
# Time units
# ---------------------------------------------------------------------------


class TimeUnit(enum.Enum):
    """Output time units, valued by their display symbol."""

    NANOSECONDS = "ns"
    MICROSECONDS = "µs"
    MILLISECONDS = "ms"
    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"
    DAYS = "d"

    @property
    def symbol(self) -> str:
        return self.value


_NANOS_PER_UNIT: dict[TimeUnit, int] = {
    TimeUnit.NANOSECONDS: 1,
    TimeUnit.MICROSECONDS: 1_000,
    TimeUnit.MILLISECONDS: 1_000_000,
    TimeUnit.SECONDS: 1_000_000_000,
    TimeUnit.MINUTES: 60 * 1_000_000_000,
    TimeUnit.HOURS: 3600 * 1_000_000_000,
    TimeUnit.DAYS: 86400 * 1_000_000_000,
}


def convert_duration(nanos: float, unit: TimeUnit) -> float:
    """Convert a duration in nanoseconds to *unit*.

    Days are truncated to whole days; every other unit keeps the
    fractional part.
    """
    per_unit = _NANOS_PER_UNIT[unit]
    if unit is TimeUnit.DAYS:
        return float(int(nanos) // per_unit)
    return nanos / per_unit


def parse_time_unit(text: str) -> TimeUnit:
    """Parse a time unit from its name or symbol.

    Accepts ``"milliseconds"``, ``"MILLISECONDS"``, ``"ms"``, and
    ``"us"`` as an ASCII spelling of ``"µs"``.

    Raises:
        ValueError: If *text* matches no unit.
    """
    key = text.strip()
    for unit in TimeUnit:
        if key.upper() == unit.name or key == unit.value:
            return unit
    if key.lower() == "us":
        return TimeUnit.MICROSECONDS
    valid = ", ".join(u.name.lower() for u in TimeUnit)
    raise ValueError(f"Unknown time unit '{text}'. Valid units: {valid}")


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------


def display_name(fn: Callable[..., Any]) -> str:
    """Derive a stable display name ``'<owner>_<name>'`` for a callable.

    The owner is the class a method is declared on (or bound to), else
    the last component of the defining module.  ``functools.partial``
    objects are unwrapped first.

    Examples::

        display_name(json.dumps)          # 'json_dumps'
        display_name(Parser().parse)      # 'Parser_parse'
        display_name(Parser.parse)        # 'Parser_parse'
    """
    while isinstance(fn, functools.partial):
        fn = fn.func

    name = getattr(fn, "__name__", None) or type(fn).__name__

    bound_to = getattr(fn, "__self__", None)
    if bound_to is not None and not _is_module(bound_to):
        owner = bound_to.__name__ if isinstance(bound_to, type) else type(bound_to).__name__
        return f"{owner}_{name}"

    qualname = getattr(fn, "__qualname__", name)
    parts = [p for p in qualname.split(".") if p != "<locals>"]
    if len(parts) > 1:
        return f"{parts[-2]}_{name}"

    module = getattr(fn, "__module__", None) or "builtins"
    return f"{module.rsplit('.', 1)[-1]}_{name}"


def _is_module(obj: object) -> bool:
    return type(obj).__name__ == "module"


class Invoker:
    """Calls a target's callable and reports how long it took."""

    def invoke(self, target: Target) -> int:
        """Call the target once with its arguments.

        Returns:
            Elapsed wall-clock time in nanoseconds.
        """
        raise NotImplementedError

    def display_name(self, fn: Callable[..., Any]) -> str:
        """Stable display name for *fn*."""
        raise NotImplementedError


class CallableInvoker(Invoker):
    """Invoker for plain Python callables, timed with ``perf_counter_ns``."""

    def invoke(self, target: Target) -> int:
        fn = target.fn
        args = target.args
        start = time.perf_counter_ns()
        fn(*args)
        return time.perf_counter_ns() - start

    def display_name(self, fn: Callable[..., Any]) -> str:
        return display_name(fn)
