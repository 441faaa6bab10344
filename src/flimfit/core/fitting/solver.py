"""Boundary between the batch worker and a global decay solver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from flimfit.core.domain.config import NoiseType, RestrainType
    from flimfit.core.shared.typing import BoolArray, FloatArray


class FitType(Enum):
    """Model selector understood by global solvers."""

    GLOBAL_MULTIEXP = "global_multiexp"
    GLOBAL_STRETCHEDEXP = "global_stretchedexp"


@dataclass(slots=True)
class GlobalFitProblem:
    """Everything a solver needs for one joint fit.

    ``trans`` holds one trace per row and ``param`` one parameter row per
    trace. ``param`` carries the initial guess and is overwritten in place
    with the fitted values. ``fit_start``/``fit_end`` index into the rows of
    ``trans``. Rows flagged in ``skip`` are placeholders for traces that were
    never loaded: they take the shared lifetimes but count towards neither
    the global chi-square nor the degrees of freedom.
    """

    x_inc: float
    trans: FloatArray
    fit_start: int
    fit_end: int
    instr: FloatArray | None
    noise: NoiseType
    sig: FloatArray | None
    fit_type: FitType
    param: FloatArray
    param_free: BoolArray
    restrain: RestrainType
    chisq_delta: float
    drop_bad: bool
    skip: BoolArray | None = None

    @property
    def n_trans(self) -> int:
        return int(self.trans.shape[0])

    def skip_mask(self) -> BoolArray:
        """Rows that hold no trace (all False when ``skip`` is unset)."""
        if self.skip is None:
            return np.zeros(self.n_trans, dtype=bool)
        return np.asarray(self.skip, dtype=bool)

    @property
    def n_data(self) -> int:
        return int(self.trans.shape[1])


@dataclass(slots=True)
class GlobalFitSolution:
    """Outputs of a joint fit, apart from the parameters written in place.

    ``fitted`` and ``residuals`` have shape ``(1, n_data)``: a solver reports
    one representative curve (trace 0), not one per trace. ``chisq`` has one
    entry per trace; a negative entry marks a trace dropped from the joint
    fit. ``ret_code`` is the iteration count when non-negative and an error
    code otherwise.
    """

    ret_code: int
    fitted: FloatArray
    residuals: FloatArray
    chisq: FloatArray
    chisq_global: float
    df: int


class GlobalSolver(Protocol):
    """A blocking joint fit over all traces of a batch."""

    def solve(self, problem: GlobalFitProblem) -> GlobalFitSolution:
        """Fit every trace of ``problem`` at once, sharing the global parameters."""
        ...


__all__ = ["FitType", "GlobalFitProblem", "GlobalFitSolution", "GlobalSolver"]
