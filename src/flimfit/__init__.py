"""flimfit - Global multi-exponential fitting of fluorescence lifetime images.

Public API:
    - FitService: Fit whole images batch by batch
    - GlobalFitWorker: Fit one batch of traces jointly
    - LeastSquaresGlobalSolver: Reference global solver

Configuration:
    - FlimFitConfig, FitParams

Results:
    - FitStatus, FitOutcome, BatchStatistic
"""

import contextlib
from importlib import metadata

__version__ = "0.1.0"

with contextlib.suppress(metadata.PackageNotFoundError):
    __version__ = metadata.version(__name__)

from flimfit.core.domain import BatchStatistic, FitOutcome, FitParams, FitStatus, FlimFitConfig
from flimfit.core.fitting import GlobalFitWorker, LeastSquaresGlobalSolver
from flimfit.services import FitService, ImageFitResult

__all__ = [
    "__version__",
    "FitService",
    "ImageFitResult",
    "GlobalFitWorker",
    "LeastSquaresGlobalSolver",
    "FlimFitConfig",
    "FitParams",
    "BatchStatistic",
    "FitOutcome",
    "FitStatus",
]
