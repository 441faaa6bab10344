"""Mapping of global solver return codes onto :class:`FitStatus`.

The solver reports a single integer for the whole joint fit: a non-negative
value is the iteration count of a completed solve, a negative value names the
step that failed. The negative space is sparse and some codes overlap in
meaning, so the table below only buckets the codes whose origin is known;
everything else is reported as UNKNOWN rather than guessed.
"""

from __future__ import annotations

import math
from types import MappingProxyType

from flimfit.core.constants import CHISQ_CEILING
from flimfit.core.domain.results import FitStatus

RETURN_CODES: MappingProxyType[int, FitStatus] = MappingProxyType(
    {
        -1: FitStatus.BAD_SETTING,  # bad parameter
        -12: FitStatus.BAD_SETTING,  # bad fit type
        -21: FitStatus.BAD_SETTING,  # bad fit type
        -22: FitStatus.BAD_SETTING,  # bad fit type while computing exponentials
        -31: FitStatus.BAD_SETTING,  # bad fit type in the instrument fit
        -32: FitStatus.BAD_SETTING,  # bad fit type in the instrument fit
        -2: FitStatus.INTERNAL_ERROR,  # allocation failed
        -3: FitStatus.INTERNAL_ERROR,
        -4: FitStatus.INTERNAL_ERROR,
        -5: FitStatus.INTERNAL_ERROR,
        -11: FitStatus.INTERNAL_ERROR,  # zeroed allocation failed
        -13: FitStatus.DIVERGED,  # initial estimate failed
    }
)


def convert_ret_code(ret_code: int) -> FitStatus:
    """Bucket a solver return code into a coarse status."""
    if ret_code >= 0:
        return FitStatus.OK
    return RETURN_CODES.get(ret_code, FitStatus.UNKNOWN)


def check_chisq(chisq: float) -> FitStatus:
    """Plausibility check applied to one trace's chi-square under drop-bad.

    The solver marks a trace it dropped from the joint fit with a negative
    chi-square.
    """
    if chisq < 0:
        return FitStatus.DIVERGED
    if math.isnan(chisq) or chisq > CHISQ_CEILING:
        return FitStatus.CHISQ_OUT_OF_RANGE
    return FitStatus.OK


def classify(skipped: bool, ret_code: int, drop_bad: bool, chisq: float) -> FitStatus:
    """Status of one trace of a batch.

    Args:
        skipped: The trace could not be loaded and never reached the solver.
        ret_code: Return code of the joint solve.
        drop_bad: Whether the solve dropped bad traces, enabling the
            per-trace chi-square check.
        chisq: The trace's chi-square.

    Returns
    -------
        INSUFFICIENT_SIGNAL for skipped traces, otherwise the bucket of
        ``ret_code``, refined by :func:`check_chisq` when that bucket is OK
        and ``drop_bad`` is set.
    """
    if skipped:
        return FitStatus.INSUFFICIENT_SIGNAL
    status = convert_ret_code(ret_code)
    if drop_bad and status is FitStatus.OK:
        status = check_chisq(float(chisq))
    return status


__all__ = ["RETURN_CODES", "check_chisq", "classify", "convert_ret_code"]
