"""Core module for flimfit - contains data models and fitting logic."""

from flimfit.core.domain import (
    BatchStatistic,
    FitOutcome,
    FitParams,
    FitStatus,
    FlimFitConfig,
)
from flimfit.core.fitting import GlobalFitWorker, LeastSquaresGlobalSolver

__all__ = [
    "BatchStatistic",
    "FitOutcome",
    "FitParams",
    "FitStatus",
    "FlimFitConfig",
    "GlobalFitWorker",
    "LeastSquaresGlobalSolver",
]
