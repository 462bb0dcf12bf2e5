"""Command-line interface for benchrunner.

Subcommands:
    benchrunner run       Measure callables and print a results table
    benchrunner compare   Compare implementations over parameter scenarios
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import click
import yaml

from benchrunner import __version__
from benchrunner.bench.config import ConfigurationError
from benchrunner.bench.modes import MODE_NAMES
from benchrunner.bench.timing import TimeUnit
from benchrunner.logging import get_logger, setup_logging

log = get_logger("cli")

_TIME_UNIT_CHOICES = [u.name.lower() for u in TimeUnit] + [
    "ns",
    "us",
    "µs",
    "ms",
    "s",
    "m",
    "h",
    "d",
]


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """benchrunner — micro-benchmark Python callables."""


def _common_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by ``run`` and ``compare``."""
    options = [
        click.option(
            "--profile",
            "profile_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="YAML profile with settings, targets and scenarios.",
        ),
        click.option("--warmup", type=int, default=None, help="Warm-up iterations (default: 5)."),
        click.option(
            "--iterations", type=int, default=None, help="Measured iterations (default: 10)."
        ),
        click.option(
            "--time-unit",
            type=click.Choice(_TIME_UNIT_CHOICES, case_sensitive=False),
            default=None,
            help="Output time unit (default: milliseconds).",
        ),
        click.option(
            "--mode",
            type=click.Choice(list(MODE_NAMES), case_sensitive=False),
            default=None,
            help="avgt (average time, lower is better) or thrpt (throughput, "
            "higher is better). Default: avgt.",
        ),
        click.option(
            "--throttle",
            type=int,
            default=None,
            help="Print every Nth iteration once the count reaches N (default: 1000).",
        ),
        click.option("-v", "--verbose", is_flag=True, help="Show debug logging."),
        click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors."),
        click.option(
            "--log-file",
            type=click.Path(path_type=Path),
            default=None,
            help="Also write DEBUG logs to this file.",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _parse_value(text: str) -> Any:
    """Parse a CLI argument as a YAML scalar: ``'10'`` -> 10."""
    return yaml.safe_load(text)


def _parse_scenario(text: str) -> list[Any]:
    """Parse ``'1, [2, 3]'`` (or ``'[1, [2, 3]]'``) into an argument list.

    One pair of outer brackets is dropped, so a single list argument
    has to be written ``'[[1, 2]]'``.
    """
    stripped = text.strip()
    if not stripped:
        return []
    value = yaml.safe_load(f"[{stripped}]")
    if len(value) == 1 and isinstance(value[0], list) and stripped.startswith("["):
        return value[0]
    return value


def _build_runner(
    profile_data: dict[str, Any],
    *,
    warmup: int | None,
    iterations: int | None,
    time_unit: str | None,
    mode: str | None,
    throttle: int | None,
) -> Any:
    from benchrunner.bench.config import config_from_profile
    from benchrunner.bench.runner import BenchmarkRunner

    config = config_from_profile(
        profile_data,
        cli_overrides={
            "warmup": warmup,
            "iterations": iterations,
            "time_unit": time_unit,
            "mode": mode,
            "throttle": throttle,
        },
    )
    return BenchmarkRunner(config)


def _load_profile_data(profile_path: Path | None) -> dict[str, Any]:
    if profile_path is None:
        return {}
    from benchrunner.bench.config import load_profile

    return load_profile(profile_path)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.argument("callables", nargs=-1)
@click.option(
    "--arg",
    "arg_values",
    type=str,
    multiple=True,
    help="Argument passed to every CLI callable, parsed as YAML (repeatable).",
)
@_common_options
def run(
    callables: tuple[str, ...],
    arg_values: tuple[str, ...],
    profile_path: Path | None,
    warmup: int | None,
    iterations: int | None,
    time_unit: str | None,
    mode: str | None,
    throttle: int | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Measure CALLABLES and print one row per target.

    Each CALLABLE is a 'module:qualname' reference.

    \b
    Examples:
        benchrunner run json:dumps --arg "{a: 1}" --iterations 100
        benchrunner run --profile bench.yaml --time-unit us
    """
    from benchrunner.bench.config import resolve_callable, targets_from_profile

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        profile_data = _load_profile_data(profile_path)
        runner = _build_runner(
            profile_data,
            warmup=warmup,
            iterations=iterations,
            time_unit=time_unit,
            mode=mode,
            throttle=throttle,
        )
        for fn, args in targets_from_profile(profile_data):
            runner.add(fn, *args)
        cli_args = [_parse_value(a) for a in arg_values]
        for ref in callables:
            runner.add(resolve_callable(ref), *cli_args)
    except (ValueError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if not runner.targets:
        raise click.UsageError("Nothing to run: pass CALLABLES or a --profile with targets.")

    log.debug("Running %d target(s)", len(runner.targets))
    try:
        runner.run_all()
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904


# ---------------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------------


@main.command()
@click.argument("implementations", nargs=-1)
@click.option(
    "--scenario",
    "scenario_specs",
    type=str,
    multiple=True,
    help=(
        "Comma-separated arguments for one scenario, parsed as YAML "
        "(repeatable). '1, abc' passes two arguments. Outer brackets are "
        "optional, so '[1, 2]' also passes two; pass one list argument "
        "as '[[1, 2]]'."
    ),
)
@_common_options
def compare(
    implementations: tuple[str, ...],
    scenario_specs: tuple[str, ...],
    profile_path: Path | None,
    warmup: int | None,
    iterations: int | None,
    time_unit: str | None,
    mode: str | None,
    throttle: int | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Compare IMPLEMENTATIONS over parameter scenarios.

    Each IMPLEMENTATION is a 'module:qualname' reference.  Every
    scenario is run against every implementation; the fastest (or
    highest-throughput) one wins the scenario.

    \b
    Examples:
        benchrunner compare math:floor math:ceil --scenario 2.5 --scenario 7.1
        benchrunner compare --profile sorting.yaml --mode thrpt
    """
    from benchrunner.bench.config import (
        implementations_from_profile,
        resolve_callable,
        scenario_factory,
        scenarios_from_profile,
    )

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        profile_data = _load_profile_data(profile_path)
        runner = _build_runner(
            profile_data,
            warmup=warmup,
            iterations=iterations,
            time_unit=time_unit,
            mode=mode,
            throttle=throttle,
        )
        impls = implementations_from_profile(profile_data)
        impls.extend(resolve_callable(ref) for ref in implementations)
        scenarios = scenarios_from_profile(profile_data)
        scenarios.extend(scenario_factory(_parse_scenario(s)) for s in scenario_specs)
    except (ValueError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if not impls:
        raise click.UsageError(
            "Nothing to compare: pass IMPLEMENTATIONS or a --profile with implementations."
        )
    if not scenarios:
        scenarios = [scenario_factory([])]

    try:
        runner.compare(scenarios, impls)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nComparison interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904
