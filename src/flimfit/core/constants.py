"""Numeric constants for flimfit fitting and classification."""

CHISQ_CEILING = 1e5
"""Upper plausibility bound for a trace chi-square under drop-bad filtering.

A trace whose chi-square exceeds this value (or is NaN) is reported as
CHISQ_OUT_OF_RANGE. The bound itself is still accepted.
"""

DEFAULT_CHISQ_DELTA = 1e-4
"""Default convergence threshold on the relative change of chi-square."""

DROPPED_TRACE_CHISQ = -1.0
"""Chi-square reported by the solver for a trace dropped from the joint fit."""

TAU_LOWER_BOUND = 1e-9
"""Smallest lifetime allowed under the default restraint."""

RLD_MIN_COUNTS = 1.0
"""Minimum integral (counts) required on both RLD gates to estimate a lifetime."""

LEAST_SQUARES_MAX_NFEV = 1000
"""Maximum number of function evaluations for the reference least-squares solver."""
