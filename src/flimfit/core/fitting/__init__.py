"""Global fitting: solver boundary, reference solver and batch worker."""

from flimfit.core.fitting.estimates import estimate_initial_params
from flimfit.core.fitting.least_squares import LeastSquaresGlobalSolver
from flimfit.core.fitting.retcodes import RETURN_CODES, classify, convert_ret_code
from flimfit.core.fitting.solver import FitType, GlobalFitProblem, GlobalFitSolution, GlobalSolver
from flimfit.core.fitting.window import FitWindow
from flimfit.core.fitting.worker import DataAccess, FitEventHandler, GlobalFitWorker

__all__ = [
    "RETURN_CODES",
    "DataAccess",
    "FitEventHandler",
    "FitType",
    "FitWindow",
    "GlobalFitProblem",
    "GlobalFitSolution",
    "GlobalFitWorker",
    "GlobalSolver",
    "LeastSquaresGlobalSolver",
    "classify",
    "convert_ret_code",
    "estimate_initial_params",
]
