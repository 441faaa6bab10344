"""Reference global solver built on :func:`scipy.optimize.least_squares`.

All traces of a batch are fitted in one problem. The lifetimes are shared
(global) while each trace keeps its own offset and amplitudes (local). The
Jacobian of such a problem is block sparse: the residuals of a trace depend on
the global parameters and on its own locals only, which is passed to the
optimizer as ``jac_sparsity``.

Return codes follow the convention mapped by
:mod:`flimfit.core.fitting.retcodes`: the number of function evaluations on
success, a negative code otherwise.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from scipy.optimize import least_squares
from scipy.signal import fftconvolve
from scipy.sparse import lil_matrix

from flimfit.core.constants import DROPPED_TRACE_CHISQ, LEAST_SQUARES_MAX_NFEV, TAU_LOWER_BOUND
from flimfit.core.fitting.solver import FitType, GlobalFitProblem, GlobalFitSolution

if TYPE_CHECKING:
    from flimfit.core.shared.typing import FloatArray

RET_BAD_PARAMETER = -1
RET_ALLOC_FAILED = -2
RET_BAD_FIT_TYPE = -12
RET_INITIAL_ESTIMATE_FAILED = -13


def multiexp_curves(
    t: FloatArray,
    param: FloatArray,
    kernel: FloatArray | None = None,
) -> FloatArray:
    """Evaluate ``Z + sum_k A_k exp(-t / tau_k)`` for each parameter row.

    Args:
        t: Sample times, shape ``(n_data,)``
        param: Parameter rows ``[Z, A1, tau1, ...]``, shape ``(n_rows, n_param)``
        kernel: Normalized instrument response convolved with the decay part

    Returns
    -------
        Model curves, shape ``(n_rows, n_data)``
    """
    offsets = param[:, 0]
    amplitudes = param[:, 1::2]
    taus = param[:, 2::2]
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        exps = np.exp(-t[None, None, :] / taus[:, :, None])
        decay = np.einsum("rk,rkt->rt", amplitudes, exps)
        if kernel is not None:
            decay = fftconvolve(decay, kernel[None, :], axes=1)[:, : t.size]
    return decay + offsets[:, None]


class _GlobalObjective:
    """Packs the free parameters of a batch into one vector and back."""

    def __init__(self, problem: GlobalFitProblem, base: FloatArray, active: np.ndarray) -> None:
        n_param = problem.param.shape[1]
        free = problem.param_free
        self.problem = problem
        self.base = base
        self.active = active
        self.global_idx = [i for i in range(2, n_param, 2) if free[i]]
        self.local_idx = [i for i in (0, *range(1, n_param, 2)) if free[i]]
        self.window = slice(problem.fit_start, problem.fit_end)
        self.n_window = problem.fit_end - problem.fit_start
        self.t = problem.x_inc * np.arange(problem.n_data)
        self.kernel = _normalized_kernel(problem.instr)
        self.data = problem.trans[active][:, self.window]

    @property
    def n_global(self) -> int:
        return len(self.global_idx)

    @property
    def n_local(self) -> int:
        return len(self.local_idx)

    @property
    def n_vars(self) -> int:
        return self.n_global + self.n_local * self.active.size

    def pack(self) -> FloatArray:
        x_global = self.base[0, self.global_idx]
        x_local = self.base[np.ix_(self.active, self.local_idx)].ravel()
        return np.concatenate([x_global, x_local])

    def unpack(self, x: FloatArray) -> FloatArray:
        """Full parameter matrix (every row) for the vector ``x``."""
        param = self.base.copy()
        param[:, self.global_idx] = x[: self.n_global]
        local = x[self.n_global :].reshape(self.active.size, self.n_local)
        param[np.ix_(self.active, self.local_idx)] = local
        return param

    def weighted_residuals(self, data: FloatArray, model: FloatArray) -> FloatArray:
        """Residuals inside the fit window divided by the noise estimate."""
        model = model[:, self.window]
        return (data - model) / _sigma(self.problem, data, model, self.window)

    def __call__(self, x: FloatArray) -> FloatArray:
        param = self.unpack(x)[self.active]
        model = multiexp_curves(self.t, param, self.kernel)
        return self.weighted_residuals(self.data, model).ravel()

    def bounds(self) -> tuple[FloatArray, FloatArray]:
        lower = np.full(self.n_vars, -np.inf)
        upper = np.full(self.n_vars, np.inf)
        if self.problem.restrain == "default":
            lower[: self.n_global] = TAU_LOWER_BOUND
            local_lower = np.array([-np.inf if i == 0 else 0.0 for i in self.local_idx])
            lower[self.n_global :] = np.tile(local_lower, self.active.size)
        return lower, upper

    def sparsity(self) -> lil_matrix:
        n_active = self.active.size
        structure = lil_matrix((n_active * self.n_window, self.n_vars), dtype=np.int8)
        structure[:, : self.n_global] = 1
        if self.n_local:
            for j in range(n_active):
                rows = slice(j * self.n_window, (j + 1) * self.n_window)
                start = self.n_global + j * self.n_local
                structure[rows, start : start + self.n_local] = 1
        return structure


def _normalized_kernel(instr: FloatArray | None) -> FloatArray | None:
    if instr is None:
        return None
    return instr / instr.sum()


def _sigma(
    problem: GlobalFitProblem,
    data: FloatArray,
    model: FloatArray,
    window: slice,
) -> FloatArray | float:
    if problem.noise == "poisson_fit":
        with np.errstate(invalid="ignore"):
            return np.sqrt(np.maximum(model, 1.0))
    if problem.noise == "poisson_data":
        return np.sqrt(np.maximum(data, 1.0))
    if problem.noise == "given" and problem.sig is not None:
        return problem.sig[window]
    if problem.sig is not None and problem.sig.size:
        return float(problem.sig[0])
    return 1.0


def _check_problem(problem: GlobalFitProblem) -> int | None:
    """Return an error code for malformed problems, None when usable."""
    if problem.fit_type is not FitType.GLOBAL_MULTIEXP:
        return RET_BAD_FIT_TYPE
    if problem.trans.ndim != 2 or problem.param.ndim != 2 or problem.n_trans < 1:
        return RET_BAD_PARAMETER
    n_param = problem.param.shape[1]
    if problem.param.shape[0] != problem.n_trans or n_param < 3 or n_param % 2 == 0:
        return RET_BAD_PARAMETER
    if problem.param_free.shape != (n_param,):
        return RET_BAD_PARAMETER
    if not 0 <= problem.fit_start < problem.fit_end <= problem.n_data or problem.x_inc <= 0:
        return RET_BAD_PARAMETER
    if problem.instr is not None and (problem.instr.size == 0 or problem.instr.sum() <= 0):
        return RET_BAD_PARAMETER
    if problem.skip is not None and np.shape(problem.skip) != (problem.n_trans,):
        return RET_BAD_PARAMETER
    if problem.noise == "given":
        if problem.sig is None or problem.sig.size < problem.fit_end:
            return RET_BAD_PARAMETER
        if np.any(problem.sig[problem.fit_start : problem.fit_end] <= 0):
            return RET_BAD_PARAMETER
    return None


def _shared_taus(param: FloatArray) -> FloatArray | None:
    """Common starting lifetimes: the median over rows with usable guesses.

    Rows whose lifetime guesses are not finite and positive are ignored.
    """
    taus = param[:, 2::2]
    usable = np.all(np.isfinite(taus) & (taus > 0), axis=1)
    if not usable.any():
        return None
    return np.median(taus[usable], axis=0)


class LeastSquaresGlobalSolver:
    """Global multi-exponential solver using a trust-region reflective method."""

    def __init__(self, *, max_nfev: int | None = LEAST_SQUARES_MAX_NFEV, verbose: int = 0) -> None:
        self._max_nfev = max_nfev
        self._verbose = verbose

    def solve(self, problem: GlobalFitProblem) -> GlobalFitSolution:
        """Fit all traces of ``problem`` jointly.

        ``problem.param`` is overwritten with the fitted values. The shared
        lifetimes are written to every row, including dropped and skipped
        traces.
        """
        error = _check_problem(problem)
        if error is not None:
            return self._failure(problem, error)

        skip = problem.skip_mask()
        taus = _shared_taus(problem.param[~skip])
        if taus is None:
            return self._failure(problem, RET_INITIAL_ESTIMATE_FAILED)
        base = np.array(problem.param, dtype=np.float64)
        base[:, 2::2] = taus

        loaded = np.flatnonzero(~skip)
        candidates = _GlobalObjective(problem, base, loaded)
        initial = candidates.weighted_residuals(
            candidates.data, multiexp_curves(candidates.t, base[loaded], candidates.kernel)
        )
        bad = ~np.all(np.isfinite(initial), axis=1)
        if bad.any() and not problem.drop_bad:
            return self._failure(problem, RET_INITIAL_ESTIMATE_FAILED)
        active = loaded[~bad]
        if active.size == 0:
            return self._failure(problem, RET_INITIAL_ESTIMATE_FAILED)

        objective = _GlobalObjective(problem, base, active)
        x0 = objective.pack()
        ret_code = 0
        if objective.n_vars:
            lower, upper = objective.bounds()
            try:
                result = least_squares(
                    objective,
                    np.clip(x0, lower, upper),
                    jac_sparsity=objective.sparsity(),
                    bounds=(lower, upper),
                    method="trf",
                    x_scale="jac",
                    ftol=problem.chisq_delta,
                    max_nfev=self._max_nfev,
                    verbose=self._verbose,
                )
            except MemoryError:
                return self._failure(problem, RET_ALLOC_FAILED)
            except ValueError:
                return self._failure(problem, RET_BAD_PARAMETER)
            if result.status < 0:
                return self._failure(problem, RET_BAD_PARAMETER)
            x0 = result.x
            ret_code = int(result.nfev)

        fitted_param = objective.unpack(x0)
        problem.param[:] = fitted_param
        return self._summarize(problem, objective, fitted_param, ret_code)

    @staticmethod
    def _summarize(
        problem: GlobalFitProblem,
        objective: _GlobalObjective,
        fitted_param: FloatArray,
        ret_code: int,
    ) -> GlobalFitSolution:
        window = objective.window
        curves = multiexp_curves(objective.t, fitted_param, objective.kernel)
        weighted = objective.weighted_residuals(problem.trans[:, window], curves)
        with np.errstate(invalid="ignore", over="ignore"):
            chisq = np.sum(weighted**2, axis=1)

        included = np.zeros(problem.n_trans, dtype=bool)
        included[objective.active] = True
        if problem.drop_bad:
            included &= np.isfinite(chisq)
            chisq[~included] = DROPPED_TRACE_CHISQ
        chisq[problem.skip_mask()] = DROPPED_TRACE_CHISQ

        n_included = int(included.sum())
        n_vars = objective.n_global + objective.n_local * n_included
        df = max(n_included * objective.n_window - n_vars, 0)

        fitted = np.zeros((1, problem.n_data))
        residuals = np.zeros((1, problem.n_data))
        fitted[0] = curves[0]
        residuals[0, window] = problem.trans[0, window] - curves[0, window]
        return GlobalFitSolution(
            ret_code=ret_code,
            fitted=fitted,
            residuals=residuals,
            chisq=chisq,
            chisq_global=float(np.sum(chisq[included])),
            df=df,
        )

    @staticmethod
    def _failure(problem: GlobalFitProblem, ret_code: int) -> GlobalFitSolution:
        n_trans, n_data = np.atleast_2d(problem.trans).shape[:2]
        return GlobalFitSolution(
            ret_code=ret_code,
            fitted=np.zeros((1, n_data)),
            residuals=np.zeros((1, n_data)),
            chisq=np.full(n_trans, math.nan),
            chisq_global=math.nan,
            df=0,
        )


__all__ = ["LeastSquaresGlobalSolver", "multiexp_curves"]
