"""Per-trace and per-batch fit results."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flimfit.core.shared.typing import FloatArray


class FitStatus(IntEnum):
    """Closed set of outcomes reported for every trace.

    The integer values are what result maps store on disk.
    """

    OK = 0
    INSUFFICIENT_SIGNAL = 1
    BAD_SETTING = 2
    INTERNAL_ERROR = 3
    DIVERGED = 4
    CHISQ_OUT_OF_RANGE = 5
    UNKNOWN = 6

    @property
    def label(self) -> str:
        """Human-readable name, e.g. 'chisq out of range'."""
        return self.name.lower().replace("_", " ")


@dataclass(slots=True)
class FitOutcome:
    """Result bundle for one trace, handed to the result sink and then dropped.

    ``fitted`` and ``residuals`` are the batch's representative row (the solver
    computes a single curve per batch) and are therefore identical for every
    trace of a batch. ``param`` is genuinely per trace. Each of the three is
    ``None`` when its output was not requested.
    """

    status: FitStatus
    chisq: float
    param: FloatArray | None = None
    fitted: FloatArray | None = None
    residuals: FloatArray | None = None

    @property
    def ok(self) -> bool:
        return self.status is FitStatus.OK


@dataclass(frozen=True, slots=True)
class BatchStatistic:
    """Joint fit quality of a whole batch."""

    chisq: float
    df: int
    ret_code: int

    @property
    def reduced_chisq(self) -> float:
        """Global chi-square per degree of freedom (NaN when df < 1)."""
        if self.df < 1:
            return math.nan
        return self.chisq / self.df


__all__ = ["BatchStatistic", "FitOutcome", "FitStatus"]
