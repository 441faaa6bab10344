"""Batch orchestration for global fits.

A batch is an ordered list of positions whose traces are fitted jointly:
the traces are assembled into one matrix, the solver runs once, and every
position gets exactly one committed :class:`FitOutcome`, in input order,
whatever its status.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Protocol

import numpy as np

from flimfit.core.domain.results import BatchStatistic, FitOutcome, FitStatus
from flimfit.core.fitting.least_squares import LeastSquaresGlobalSolver
from flimfit.core.fitting.retcodes import classify, convert_ret_code
from flimfit.core.fitting.solver import FitType, GlobalFitProblem
from flimfit.core.fitting.window import FitWindow
from flimfit.core.shared.exceptions import ConfigError, SolverError
from flimfit.core.shared.reporter import NullReporter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from flimfit.core.domain.config import FitParams
    from flimfit.core.fitting.solver import GlobalFitSolution, GlobalSolver
    from flimfit.core.shared.reporter import Reporter
    from flimfit.core.shared.typing import BoolArray, FloatArray, Position


class DataAccess(Protocol):
    """Source of traces and sink of per-trace results."""

    def load_data(
        self,
        trans_out: FloatArray,
        param_out: FloatArray,
        params: FitParams,
        position: Position,
    ) -> bool:
        """Fill one trace row and its initial parameter row.

        Returns False when the trace has no usable signal; the row is then
        skipped and its buffers are discarded.
        """
        ...

    def commit_results(self, params: FitParams, outcome: FitOutcome, position: Position) -> None:
        """Store the outcome of one position."""
        ...


class FitEventHandler(Protocol):
    """Notified once per batch, after every outcome has been committed."""

    def on_complete(self, params: FitParams, statistic: BatchStatistic) -> None: ...


class GlobalFitWorker:
    """Fits batches of traces that share their lifetimes.

    Args:
        params: Fit configuration shared by every batch
        data_access: Loads traces and receives committed outcomes
        n_samples: Number of samples of a raw trace
        solver: Global solver, :class:`LeastSquaresGlobalSolver` by default
        reporter: Receives a one-line summary per batch

    The worker keeps no state between batches; concurrent batches need
    separate workers only if their data access is not safe to share.
    """

    def __init__(
        self,
        params: FitParams,
        data_access: DataAccess,
        n_samples: int,
        *,
        solver: GlobalSolver | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self.params = params
        self.window = FitWindow.from_params(params, n_samples)
        self._data_access = data_access
        self._solver = solver or LeastSquaresGlobalSolver()
        self._reporter = reporter or NullReporter()
        self._instr = params.instr_array()
        self._sig = self._window_sig()
        self._param_free = params.param_free_array()

    @property
    def n_data_total(self) -> int:
        return self.window.n_data_total

    @property
    def n_param(self) -> int:
        return self.params.n_param

    def _window_sig(self) -> FloatArray | None:
        sig = self.params.sig_array()
        if sig is None or self.params.noise != "given":
            return sig
        if sig.size < self.window.load_end:
            msg = f"'sig' has {sig.size} values, the traces need {self.window.load_end}"
            raise ConfigError(msg)
        return sig[self.window.load_start : self.window.load_end]

    def fit_batch(
        self,
        positions: Sequence[Position],
        handler: FitEventHandler | None = None,
    ) -> BatchStatistic:
        """Fit the traces at ``positions`` jointly and commit one outcome each.

        Args:
            positions: Ordered, non-empty positions forming the batch
            handler: Optional completion handler, called once at the very end

        Returns
        -------
            The global chi-square and degrees of freedom of the joint fit.

        Raises
        ------
        ValueError
            If ``positions`` is empty.
        SolverError
            If the solution does not hold one chi-square per trace.
        """
        positions = list(positions)
        if not positions:
            msg = "A batch needs at least one position"
            raise ValueError(msg)

        trans, param, skipped = self._assemble(positions)
        problem = GlobalFitProblem(
            x_inc=self.params.x_inc,
            trans=trans,
            fit_start=self.window.fit_start,
            fit_end=self.window.fit_end,
            instr=self._instr,
            noise=self.params.noise,
            sig=self._sig,
            fit_type=FitType.GLOBAL_MULTIEXP,
            param=param,
            param_free=self._param_free,
            restrain=self.params.restrain,
            chisq_delta=self.params.chisq_delta,
            drop_bad=self.params.drop_bad,
            skip=skipped,
        )
        solution = self._solver.solve(problem)
        if np.shape(solution.chisq) != (len(positions),):
            msg = (
                f"Solver returned {np.size(solution.chisq)} chi-square values "
                f"for a batch of {len(positions)} traces"
            )
            raise SolverError(msg)

        counts = self._commit(positions, problem.param, solution, skipped)
        statistic = BatchStatistic(
            chisq=float(solution.chisq_global),
            df=int(solution.df),
            ret_code=int(solution.ret_code),
        )
        self._report(len(positions), statistic, counts)

        if handler is not None:
            handler.on_complete(self.params, statistic)
        return statistic

    def _assemble(self, positions: list[Position]) -> tuple[FloatArray, FloatArray, BoolArray]:
        n_trans = len(positions)
        trans = np.zeros((n_trans, self.n_data_total))
        param = np.zeros((n_trans, self.n_param))
        skipped = np.zeros(n_trans, dtype=bool)
        for i, position in enumerate(positions):
            if not self._data_access.load_data(trans[i], param[i], self.params, position):
                skipped[i] = True
                trans[i] = 0.0
                param[i] = 0.0
        return trans, param, skipped

    def _commit(
        self,
        positions: list[Position],
        param: FloatArray,
        solution: GlobalFitSolution,
        skipped: BoolArray,
    ) -> Counter[FitStatus]:
        # Fitted curve and residuals: row 0 stands for the whole batch.
        fitted_param = param if self.params.get_param_map else None
        fitted = solution.fitted[0] if self.params.get_fitted_map else None
        residuals = solution.residuals[0] if self.params.get_residuals_map else None

        counts: Counter[FitStatus] = Counter()
        for i, position in enumerate(positions):
            chisq = float(solution.chisq[i])
            outcome = FitOutcome(
                status=classify(bool(skipped[i]), solution.ret_code, self.params.drop_bad, chisq),
                chisq=chisq,
                param=fitted_param[i] if fitted_param is not None else None,
                fitted=fitted,
                residuals=residuals,
            )
            self._data_access.commit_results(self.params, outcome, position)
            counts[outcome.status] += 1
        return counts

    def _report(self, n_trans: int, statistic: BatchStatistic, counts: Counter[FitStatus]) -> None:
        summary = ", ".join(f"{status.label}: {n}" for status, n in sorted(counts.items()))
        self._reporter.info(
            f"Batch of {n_trans} traces, reduced chi2 {statistic.reduced_chisq:.4g} ({summary})"
        )
        if statistic.ret_code < 0:
            status = convert_ret_code(statistic.ret_code)
            self._reporter.warning(
                f"Solver returned {statistic.ret_code} ({status.label}) for {n_trans} traces"
            )


__all__ = ["DataAccess", "FitEventHandler", "GlobalFitWorker"]
