"""Logging setup for benchrunner.

Benchmark progress and result tables go to stdout through ``click.echo``;
log records go to stderr, through click as well, so a redirected table
never picks up diagnostics.  Warnings and errors are coloured the same
way the result tables colour regressions.  An optional log file always
receives DEBUG records, including the per-target timings.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

_LOGGER_NAME = "benchrunner"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"

_LEVEL_COLORS = {
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class ClickEchoHandler(logging.Handler):
    """Write records to stderr with ``click.echo``.

    The stream is looked up on every record, so the handler follows
    whatever stderr click sees at that moment (a terminal, a pipe or a
    test runner's capture).
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            color = _LEVEL_COLORS.get(record.levelno)
            if color is not None:
                message = click.style(message, fg=color)
            click.echo(message, err=True)
        except Exception:
            self.handleError(record)


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the ``benchrunner`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        verbose: Show DEBUG records on the console.
        quiet: Only show warnings and errors. Ignored if *verbose* is True.
        log_file: Also write every record, DEBUG included, to this path.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = ClickEchoHandler(level=_console_level(verbose, quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)
        logger.debug("Logging to %s", log_file)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger ``benchrunner.<name>``."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
