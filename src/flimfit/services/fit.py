"""High-level fitting service facade.

CLI and other adapters fit whole images through :class:`FitService`; the
batch worker itself never decides how an image is split.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from flimfit.core.domain.config import FlimFitConfig
from flimfit.core.fitting.worker import GlobalFitWorker
from flimfit.core.shared.reporter import LoggingReporter
from flimfit.io.data_access import ArrayDataAccess

if TYPE_CHECKING:
    import numpy as np

    from flimfit.core.domain.results import BatchStatistic, FitStatus
    from flimfit.core.fitting.solver import GlobalSolver
    from flimfit.core.fitting.worker import FitEventHandler
    from flimfit.core.shared.reporter import Reporter
    from flimfit.io.data_access import ResultMaps


@dataclass(frozen=True)
class ImageFitResult:
    """Result of fitting every pixel of an image.

    Attributes
    ----------
        maps: Per-pixel status, chi-square and requested data maps
        statistics: One global statistic per batch, in batch order
    """

    maps: ResultMaps
    statistics: list[BatchStatistic]

    @property
    def status_counts(self) -> dict[FitStatus, int]:
        return self.maps.status_counts()


class FitService:
    """Fits lifetime images batch by batch.

    Example:
        service = FitService()
        result = service.fit_image(np.load("decays.npy"), FlimFitConfig())
        print(result.status_counts)

    Progress goes to the ``flimfit`` logger unless another reporter is given.
    """

    def __init__(
        self,
        reporter: Reporter | None = None,
        solver: GlobalSolver | None = None,
    ) -> None:
        self._reporter = reporter or LoggingReporter()
        self._solver = solver

    def fit_image(
        self,
        data: np.ndarray,
        config: FlimFitConfig | None = None,
        *,
        handler: FitEventHandler | None = None,
    ) -> ImageFitResult:
        """Fit every pixel of ``data`` in consecutive batches.

        Args:
            data: Image of decays, samples along ``config.fitting.lt_axis``
            config: Configuration (defaults when None)
            handler: Completion handler passed to every batch

        Returns
        -------
            ImageFitResult with the filled result maps.
        """
        config = config or FlimFitConfig()
        access = ArrayDataAccess.from_params(data, config.fitting)
        return self.fit_access(access, config, handler=handler)

    def fit_access(
        self,
        access: ArrayDataAccess,
        config: FlimFitConfig,
        *,
        handler: FitEventHandler | None = None,
    ) -> ImageFitResult:
        """Fit every pixel of an already wrapped image."""
        params = config.fitting
        worker = GlobalFitWorker(
            params,
            access,
            access.n_samples,
            solver=self._solver,
            reporter=self._reporter,
        )

        self._reporter.action(
            f"Fitting {access.n_pixels} traces in batches of up to {config.batch.size}"
        )
        statistics = [
            worker.fit_batch(batch, handler) for batch in access.batches(config.batch.size)
        ]
        self._reporter.success(f"Fitted {len(statistics)} batches")
        return ImageFitResult(maps=access.maps, statistics=statistics)


__all__ = ["FitService", "ImageFitResult"]
