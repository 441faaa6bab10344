"""Exception taxonomy for flimfit.

Per-trace fit failures are never raised; they are reported as a
:class:`~flimfit.core.domain.results.FitStatus`. The exceptions below cover
the conditions that abort a whole run instead.
"""

from __future__ import annotations


class FlimFitError(Exception):
    """Base class for all flimfit-specific exceptions."""


class ConfigError(FlimFitError):
    """Configuration is inconsistent with the data it is applied to."""


class DataIOError(FlimFitError):
    """Data loading/saving errors (files, formats, shapes)."""


class SolverError(FlimFitError):
    """A solver returned a solution that does not match its problem."""


__all__ = [
    "ConfigError",
    "DataIOError",
    "FlimFitError",
    "SolverError",
]
