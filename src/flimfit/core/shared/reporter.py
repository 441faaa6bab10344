"""Progress and status reporting for the fitting core.

The batch worker reports through the :class:`Reporter` protocol so that it
never depends on the console layer. ``NullReporter`` is the default inside
the core, ``LoggingReporter`` forwards to :mod:`logging`, and the rich
console reporter lives in :mod:`flimfit.ui.reporter`.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Sink for plain-string status messages."""

    def action(self, message: str) -> None:
        """Report an operation that is starting, e.g. 'Fitting batch 3/10'."""
        ...

    def info(self, message: str) -> None:
        """Report a neutral status update."""
        ...

    def warning(self, message: str) -> None:
        """Report a non-fatal problem, e.g. a solver return code that is not OK."""
        ...

    def error(self, message: str) -> None:
        """Report an error that does not stop the run."""
        ...

    def success(self, message: str) -> None:
        """Report that an operation finished."""
        ...


class NullReporter:
    """Reporter that discards everything.

    Example:
        >>> reporter = NullReporter()
        >>> reporter.info("batch done")  # no output
    """

    def action(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass


class LoggingReporter:
    """Reporter that writes to a :mod:`logging` logger.

    Example:
        >>> reporter = LoggingReporter("flimfit.worker")
        >>> reporter.warning("solver returned -13")  # WARNING level
    """

    def __init__(self, logger_name: str = "flimfit") -> None:
        self._logger = logging.getLogger(logger_name)

    def action(self, message: str) -> None:
        self._logger.info("[ACTION] %s", message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def success(self, message: str) -> None:
        self._logger.info("[SUCCESS] %s", message)
