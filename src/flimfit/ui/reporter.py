"""Console-based reporter implementation using Rich."""

from __future__ import annotations

from flimfit.ui.messages import action, error, info, success, warning


class ConsoleReporter:
    """Reporter printing to the themed console (and the log, when enabled).

    Example:
        >>> reporter = ConsoleReporter()
        >>> reporter.action("Fitting 4096 traces")
    """

    def action(self, message: str) -> None:
        action(message)

    def info(self, message: str) -> None:
        info(message)

    def warning(self, message: str) -> None:
        warning(message)

    def error(self, message: str) -> None:
        error(message)

    def success(self, message: str) -> None:
        success(message)
