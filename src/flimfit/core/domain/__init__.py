"""Domain models: configuration and results."""

from flimfit.core.domain.config import BatchConfig, FitParams, FlimFitConfig, OutputConfig
from flimfit.core.domain.results import BatchStatistic, FitOutcome, FitStatus

__all__ = [
    "BatchConfig",
    "BatchStatistic",
    "FitOutcome",
    "FitParams",
    "FitStatus",
    "FlimFitConfig",
    "OutputConfig",
]
