"""Tests for benchrunner.cli — Click CLI for run and compare."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

from benchrunner import __version__
from benchrunner.bench.modes import MODE_NAMES
from benchrunner.cli import _parse_scenario, _parse_value, main


class CliTestCase(unittest.TestCase):
    """Invokes the CLI and drops the handlers it installs."""

    def tearDown(self) -> None:
        logger = logging.getLogger("benchrunner")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def invoke(self, *args: str):  # type: ignore[no-untyped-def]
        return CliRunner().invoke(main, list(args))


class TestHelp(CliTestCase):
    """Tests for --help and --version."""

    def test_group_help(self) -> None:
        """Group help lists both subcommands."""
        result = self.invoke("--help")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("run", result.output)
        self.assertIn("compare", result.output)

    def test_version(self) -> None:
        result = self.invoke("--version")
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_run_help(self) -> None:
        """run --help shows the shared options and --arg."""
        result = self.invoke("run", "--help")
        self.assertEqual(result.exit_code, 0)
        for option in ("--profile", "--warmup", "--iterations", "--time-unit", "--arg"):
            self.assertIn(option, result.output)

    def test_compare_help(self) -> None:
        """compare --help explains how to pass a list argument."""
        result = self.invoke("compare", "--help")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--scenario", result.output)
        self.assertIn("--mode", result.output)
        self.assertIn("one list argument", " ".join(result.output.split()))


class TestParsing(unittest.TestCase):
    """Tests for --arg and --scenario value parsing."""

    def test_parse_value(self) -> None:
        """--arg values are YAML scalars or flow collections."""
        self.assertEqual(_parse_value("16"), 16)
        self.assertEqual(_parse_value("2.5"), 2.5)
        self.assertEqual(_parse_value("[3, 1, 2]"), [3, 1, 2])
        self.assertEqual(_parse_value("hello"), "hello")

    def test_parse_scenario(self) -> None:
        """Scenarios are comma-separated; outer brackets are optional."""
        self.assertEqual(_parse_scenario("2.5"), [2.5])
        self.assertEqual(_parse_scenario("1, abc"), [1, "abc"])
        self.assertEqual(_parse_scenario("[1, 2]"), [1, 2])
        self.assertEqual(_parse_scenario("[1, 2], 3"), [[1, 2], 3])
        self.assertEqual(_parse_scenario("  "), [])

    def test_parse_scenario_single_list_argument(self) -> None:
        """Doubled brackets pass one list argument."""
        self.assertEqual(_parse_scenario("[[1, 2]]"), [[1, 2]])


class TestRunCommand(CliTestCase):
    """Tests for benchrunner run."""

    def test_run_callable(self) -> None:
        """A module:qualname target is measured and tabulated."""
        result = self.invoke(
            "run", "math:sqrt", "--arg", "16", "--iterations", "2", "--warmup", "0"
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("# Measurement: 2 iterations", result.output)
        self.assertIn("# Benchmark: math_sqrt(16)", result.output)
        self.assertIn("Iteration 2:", result.output)
        self.assertIn("| Benchmark", result.output)

    def test_run_throughput_microseconds(self) -> None:
        result = self.invoke(
            "run",
            "math:sqrt",
            "--arg",
            "4",
            "--iterations",
            "1",
            "--warmup",
            "0",
            "--mode",
            "thrpt",
            "--time-unit",
            "us",
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("# Benchmark mode: thrpt, ops/µs", result.output)

    def test_every_mode_name_accepted(self) -> None:
        """--mode accepts the same names as mode_from_name."""
        for name in MODE_NAMES:
            with self.subTest(mode=name):
                result = self.invoke(
                    "run", "time:monotonic", "--iterations", "1", "--warmup", "0", "--mode", name
                )
                self.assertEqual(result.exit_code, 0, result.output)

    def test_average_mode_alias(self) -> None:
        """'average' selects average time."""
        result = self.invoke(
            "run", "time:monotonic", "--iterations", "1", "--warmup", "0", "--mode", "average"
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("# Benchmark mode: avgt, ms", result.output)

    def test_zero_iterations_is_an_error(self) -> None:
        """Invalid counts exit 1 with the configuration message."""
        result = self.invoke("run", "math:sqrt", "--arg", "1", "--iterations", "0")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error: Iteration count should be greater than zero", result.output)

    def test_negative_warmup_is_an_error(self) -> None:
        result = self.invoke("run", "math:sqrt", "--arg", "1", "--warmup", "-1")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Warmup cannot be negative", result.output)

    def test_unknown_callable(self) -> None:
        result = self.invoke("run", "json:not_a_function")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error:", result.output)

    def test_nothing_to_run(self) -> None:
        """No callables and no profile is a usage error."""
        result = self.invoke("run")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Nothing to run", result.output)

    def test_missing_profile(self) -> None:
        result = self.invoke("run", "--profile", "/nonexistent/bench.yaml")
        self.assertNotEqual(result.exit_code, 0)

    def test_profile_targets(self) -> None:
        """Targets and counts are read from a YAML profile."""
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text(
                "warmup: 0\n"
                "iterations: 3\n"
                "targets:\n"
                "  - callable: 'math:sqrt'\n"
                "    args: [9]\n"
                "  - 'time:monotonic'\n"
            )
            result = self.invoke("run", "--profile", str(profile))
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("# Measurement: 3 iterations", result.output)
        self.assertIn("math_sqrt", result.output)
        self.assertIn("time_monotonic", result.output)

    def test_cli_overrides_profile(self) -> None:
        """--iterations wins over the profile value."""
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text("warmup: 0\niterations: 3\ntargets: ['time:monotonic']\n")
            result = self.invoke("run", "--profile", str(profile), "--iterations", "1")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("# Measurement: 1 iterations", result.output)

    def test_target_failure_propagates(self) -> None:
        """An exception raised by the target is not swallowed."""
        result = self.invoke("run", "math:sqrt", "--arg", "-1", "--warmup", "0")
        self.assertNotEqual(result.exit_code, 0)
        self.assertIsInstance(result.exception, ValueError)


class TestCompareCommand(CliTestCase):
    """Tests for benchrunner compare."""

    def test_compare_scenarios(self) -> None:
        """Each --scenario is one round; the leaderboard counts them."""
        result = self.invoke(
            "compare",
            "math:floor",
            "math:ceil",
            "--scenario",
            "2.5",
            "--scenario",
            "7.1",
            "--iterations",
            "2",
            "--warmup",
            "0",
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Change", result.output)
        self.assertIn("out of 2", result.output)
        self.assertIn("math_floor", result.output)
        self.assertIn("math_ceil", result.output)

    def test_compare_single_list_scenario(self) -> None:
        """'[[3, 1, 2]]' hands sorted one list."""
        result = self.invoke(
            "compare", "builtins:sorted", "--scenario", "[[3, 1, 2]]",
            "--iterations", "1", "--warmup", "0",
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("out of 1", result.output)

    def test_compare_without_scenarios_runs_once(self) -> None:
        """With no scenarios a single empty-argument round runs."""
        result = self.invoke(
            "compare", "time:monotonic", "time:perf_counter", "--iterations", "1", "--warmup", "0"
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("out of 1", result.output)

    def test_compare_profile(self) -> None:
        """Implementations, scenarios and mode come from the profile."""
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "sorting.yaml"
            profile.write_text(
                "warmup: 0\n"
                "iterations: 2\n"
                "mode: thrpt\n"
                "implementations: ['builtins:sorted', 'builtins:list']\n"
                "scenarios:\n"
                "  - [[3, 1, 2]]\n"
                "  - [[5, 4]]\n"
                "  - [[]]\n"
            )
            result = self.invoke("compare", "--profile", str(profile))
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("# Benchmark mode: thrpt", result.output)
        self.assertIn("out of 3", result.output)

    def test_nothing_to_compare(self) -> None:
        result = self.invoke("compare", "--scenario", "1")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Nothing to compare", result.output)

    def test_bad_mode_rejected(self) -> None:
        result = self.invoke("compare", "math:floor", "--mode", "fastest")
        self.assertEqual(result.exit_code, 2)

    def test_zero_iterations_is_an_error(self) -> None:
        result = self.invoke("compare", "math:floor", "--scenario", "1", "--iterations", "0")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error:", result.output)


if __name__ == "__main__":
    unittest.main()
