"""Benchmark configuration and profile loading.

Handles:
- The resolved configuration of a runner (counts, unit, mode, throttle).
- Validating that configuration at construction time.
- Loading benchmark profiles from YAML files.
- Merging CLI options with profile values.
- Resolving ``module:qualname`` references to callables.
"""

from __future__ import annotations

import copy
import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from benchrunner.bench.modes import AVERAGE_TIME, Mode, mode_from_name
from benchrunner.bench.timing import TimeUnit, parse_time_unit

log = logging.getLogger("benchrunner")

DEFAULT_WARMUP = 5
DEFAULT_ITERATIONS = 10
DEFAULT_THROTTLE = 1000


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


class ConfigurationError(ValueError):
    """Raised when a benchmark is configured with invalid parameters."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        super().__init__("\n".join(e.message for e in errors))


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class BenchConfig:
    """Resolved configuration for a benchmark session.

    Validated on construction.  ``time_unit`` and ``mode`` may also be
    given by name (``"us"``, ``"thrpt"``); invalid counts, unknown names
    and values of the wrong type raise ConfigurationError.
    """

    warmup: int = DEFAULT_WARMUP  # Untimed passes before measuring
    iterations: int = DEFAULT_ITERATIONS  # Measured passes
    time_unit: TimeUnit = TimeUnit.MILLISECONDS
    throttle: int = DEFAULT_THROTTLE  # Print every Nth iteration past this count
    mode: Mode = field(default_factory=lambda: AVERAGE_TIME)

    def __post_init__(self) -> None:
        fatal = self._resolve_names()
        fatal.extend(e for e in validate_config(self) if e.severity == "error")
        if fatal:
            raise ConfigurationError(fatal)

    def _resolve_names(self) -> list[ValidationError]:
        errors: list[ValidationError] = []
        try:
            if isinstance(self.time_unit, str):
                self.time_unit = parse_time_unit(self.time_unit)
            elif not isinstance(self.time_unit, TimeUnit):
                raise ValueError(
                    f"time_unit must be a TimeUnit or unit name, got {self.time_unit!r}"
                )
        except ValueError as exc:
            errors.append(ValidationError(field="time_unit", message=str(exc)))

        try:
            if isinstance(self.mode, str):
                self.mode = mode_from_name(self.mode)
            elif not isinstance(self.mode, Mode):
                raise ValueError(f"mode must be a Mode or mode name, got {self.mode!r}")
        except ValueError as exc:
            errors.append(ValidationError(field="mode", message=str(exc)))
        return errors

    @property
    def unit_label(self) -> str:
        """Score unit, e.g. ``'ms'`` or ``'ops/s'``."""
        return self.mode.unit(self.time_unit.symbol)

    @property
    def passes_per_target(self) -> int:
        """Invocations per target, warmup included."""
        if self.warmup > 0:
            return self.warmup + 1 + self.iterations
        return self.iterations


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    return validate_counts(
        warmup=config.warmup,
        iterations=config.iterations,
        throttle=config.throttle,
    )


def validate_counts(
    *,
    warmup: int,
    iterations: int,
    throttle: int = DEFAULT_THROTTLE,
) -> list[ValidationError]:
    """Validate iteration counts, independent of a BenchConfig."""
    errors: list[ValidationError] = []

    if iterations < 1:
        errors.append(
            ValidationError(
                field="iterations",
                message="Iteration count should be greater than zero",
            )
        )

    if warmup < 0:
        errors.append(ValidationError(field="warmup", message="Warmup cannot be negative"))

    if throttle < 1:
        errors.append(ValidationError(field="throttle", message="Throttle must be at least 1"))

    if 0 < iterations < 3:
        errors.append(
            ValidationError(
                field="iterations",
                message=(
                    f"Only {iterations} measured iteration(s); "
                    f"the reported error will not be meaningful."
                ),
                severity="warning",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        warmup: 5
        iterations: 10
        time_unit: ms
        mode: avgt
        throttle: 1000

        targets:
          - callable: "package.module:function"
            args: [1, 2]

        implementations:
          - "package.fast:sort"
          - "package.slow:sort"
        scenarios:
          - [[3, 1, 2]]
          - [[9, 8, 7, 6]]

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())

    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchConfig:
    """Build a BenchConfig from a parsed YAML profile.

    CLI overrides take precedence over profile values.  Keys match
    BenchConfig field names; ``None`` means "not given on the CLI".
    """
    cli = cli_overrides or {}

    def _pick(key: str, default: Any) -> Any:
        if cli.get(key) is not None:
            return cli[key]
        return profile_data.get(key, default)

    config = BenchConfig(
        warmup=int(_pick("warmup", DEFAULT_WARMUP)),
        iterations=int(_pick("iterations", DEFAULT_ITERATIONS)),
        time_unit=_pick("time_unit", TimeUnit.MILLISECONDS),
        throttle=int(_pick("throttle", DEFAULT_THROTTLE)),
        mode=_pick("mode", AVERAGE_TIME),
    )
    for warning in validate_config(config):
        log.warning("Config warning: %s: %s", warning.field, warning.message)
    return config


# ---------------------------------------------------------------------------
# Callable resolution
# ---------------------------------------------------------------------------


def resolve_callable(reference: str) -> Callable[..., Any]:
    """Import a callable from a ``'module:qualname'`` reference.

    Examples::

        resolve_callable("json:dumps")
        resolve_callable("mypkg.parsers:Parser.parse")

    Raises:
        ValueError: If the reference is malformed, the module cannot be
            imported, or the attribute is missing or not callable.
    """
    if ":" not in reference:
        raise ValueError(f"Invalid callable reference: '{reference}'. Expected 'module:qualname'")

    module_name, qualname = reference.split(":", 1)
    module_name = module_name.strip()
    qualname = qualname.strip()
    if not module_name or not qualname:
        raise ValueError(f"Invalid callable reference: '{reference}'. Expected 'module:qualname'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import module '{module_name}': {exc}") from exc

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise ValueError(f"'{module_name}' has no attribute '{qualname}'") from None

    if not callable(obj):
        raise ValueError(f"'{reference}' is not callable")
    return obj


def targets_from_profile(
    profile_data: dict[str, Any],
) -> list[tuple[Callable[..., Any], list[Any]]]:
    """Resolve the ``targets`` section of a profile.

    Each entry is either a ``'module:qualname'`` string or a mapping
    with ``callable`` and optional ``args``.
    """
    entries = profile_data.get("targets", [])
    if not isinstance(entries, list):
        raise ValueError("Profile 'targets' must be a list")

    targets: list[tuple[Callable[..., Any], list[Any]]] = []
    for entry in entries:
        if isinstance(entry, str):
            targets.append((resolve_callable(entry), []))
            continue
        if not isinstance(entry, dict) or "callable" not in entry:
            raise ValueError(f"Invalid target entry: {entry!r}")
        args = entry.get("args", [])
        if not isinstance(args, list):
            args = [args]
        targets.append((resolve_callable(entry["callable"]), args))
    return targets


def implementations_from_profile(profile_data: dict[str, Any]) -> list[Callable[..., Any]]:
    """Resolve the ``implementations`` section of a profile."""
    refs = profile_data.get("implementations", [])
    if not isinstance(refs, list):
        raise ValueError("Profile 'implementations' must be a list")
    return [resolve_callable(ref) for ref in refs]


def scenario_factory(args: list[Any]) -> Callable[[], list[Any]]:
    """Wrap a parsed argument list as a scenario factory.

    Every call returns a deep copy, so implementations that mutate
    their arguments never see each other's changes.
    """

    def _factory() -> list[Any]:
        return copy.deepcopy(args)

    return _factory


def scenarios_from_profile(profile_data: dict[str, Any]) -> list[Callable[[], list[Any]]]:
    """Turn the ``scenarios`` section of a profile into factories."""
    entries = profile_data.get("scenarios", [])
    if not isinstance(entries, list):
        raise ValueError("Profile 'scenarios' must be a list")
    return [scenario_factory(e if isinstance(e, list) else [e]) for e in entries]
