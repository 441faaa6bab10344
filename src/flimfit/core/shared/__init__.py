"""Shared foundational utilities for flimfit."""

from flimfit.core.shared import reporter, typing
from flimfit.core.shared.exceptions import ConfigError, DataIOError, FlimFitError, SolverError
from flimfit.core.shared.reporter import LoggingReporter, NullReporter, Reporter

__all__ = [
    "ConfigError",
    "DataIOError",
    "FlimFitError",
    "LoggingReporter",
    "NullReporter",
    "Reporter",
    "SolverError",
    "reporter",
    "typing",
]
