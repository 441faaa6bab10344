"""Array-backed data access for global fits of lifetime images."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from itertools import islice
from typing import TYPE_CHECKING

import numpy as np
from numpy.exceptions import AxisError

from flimfit.core.domain.results import FitStatus
from flimfit.core.fitting.estimates import estimate_initial_params
from flimfit.core.fitting.window import FitWindow
from flimfit.core.shared.exceptions import DataIOError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from flimfit.core.domain.config import FitParams
    from flimfit.core.domain.results import FitOutcome
    from flimfit.core.shared.typing import FloatArray, PixelIndex

UNFITTED = -1


@dataclass(slots=True)
class ResultMaps:
    """Per-pixel fit results.

    ``status`` holds :class:`FitStatus` values (``-1`` for pixels never
    committed) and ``chisq`` the trace chi-square. The three data maps are
    allocated on the first commit that carries the corresponding row and stay
    None otherwise.
    """

    shape: tuple[int, ...]
    status: np.ndarray = field(init=False)
    chisq: np.ndarray = field(init=False)
    param: np.ndarray | None = None
    fitted: np.ndarray | None = None
    residuals: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.status = np.full(self.shape, UNFITTED, dtype=np.int8)
        self.chisq = np.full(self.shape, np.nan)

    def store(self, position: PixelIndex, outcome: FitOutcome) -> None:
        self.status[position] = int(outcome.status)
        self.chisq[position] = outcome.chisq
        if outcome.param is not None:
            self.param = self._row_map(self.param, outcome.param.size)
            self.param[position] = outcome.param
        if outcome.fitted is not None:
            self.fitted = self._row_map(self.fitted, outcome.fitted.size)
            self.fitted[position] = outcome.fitted
        if outcome.residuals is not None:
            self.residuals = self._row_map(self.residuals, outcome.residuals.size)
            self.residuals[position] = outcome.residuals

    def _row_map(self, current: np.ndarray | None, length: int) -> np.ndarray:
        if current is None:
            return np.full((*self.shape, length), np.nan)
        return current

    def status_counts(self) -> dict[FitStatus, int]:
        """Number of committed pixels per status."""
        values, counts = np.unique(self.status[self.status != UNFITTED], return_counts=True)
        return {FitStatus(int(v)): int(n) for v, n in zip(values, counts, strict=True)}


class ArrayDataAccess:
    """Loads traces from an in-memory image and collects results in maps.

    Args:
        data: Image with one decay per pixel, decay samples along ``lt_axis``
        lt_axis: Axis holding the decay samples
        param_map: Optional per-pixel initial guesses, shape
            ``(*spatial_shape, n_param)``

    Initial guesses come from ``param_map`` when given, else from
    ``FitParams.param``, else from :func:`estimate_initial_params`.
    """

    def __init__(
        self,
        data: np.ndarray,
        lt_axis: int = -1,
        param_map: np.ndarray | None = None,
    ) -> None:
        data = np.asarray(data)
        if data.ndim < 2:
            msg = f"Expected an image of decays (at least 2-D), got shape {data.shape}"
            raise DataIOError(msg)
        try:
            self.data = np.moveaxis(data, lt_axis, -1)
        except AxisError as exc:
            msg = f"lt_axis {lt_axis} is out of range for an image of shape {data.shape}"
            raise DataIOError(msg) from exc
        if param_map is not None and param_map.shape[:-1] != self.spatial_shape:
            msg = f"param_map shape {param_map.shape} does not match image {self.spatial_shape}"
            raise DataIOError(msg)
        self.param_map = param_map
        self.maps = ResultMaps(self.spatial_shape)

    @classmethod
    def from_params(cls, data: np.ndarray, params: FitParams) -> ArrayDataAccess:
        return cls(data, lt_axis=params.lt_axis)

    @property
    def spatial_shape(self) -> tuple[int, ...]:
        return self.data.shape[:-1]

    @property
    def n_samples(self) -> int:
        return self.data.shape[-1]

    @property
    def n_pixels(self) -> int:
        return math.prod(self.spatial_shape)

    def positions(self) -> list[PixelIndex]:
        """Every pixel in row-major order."""
        return list(np.ndindex(*self.spatial_shape))

    def batches(self, size: int) -> Iterator[list[PixelIndex]]:
        """Consecutive runs of at most ``size`` pixels."""
        pixels = iter(np.ndindex(*self.spatial_shape))
        while batch := list(islice(pixels, size)):
            yield batch

    def load_data(
        self,
        trans_out: FloatArray,
        param_out: FloatArray,
        params: FitParams,
        position: PixelIndex,
    ) -> bool:
        window = FitWindow.from_params(params, self.n_samples)
        segment = self.data[position][window.load_start : window.load_end]
        if not np.all(np.isfinite(segment)) or float(segment.sum()) < params.i_thresh:
            return False

        trans_out[:] = segment
        if self.param_map is not None:
            param_out[:] = self.param_map[position]
        elif params.param is not None:
            param_out[:] = params.param
        else:
            param_out[:] = estimate_initial_params(
                trans_out, params.x_inc, params.n_comp, window.fit_start, window.fit_end
            )
        return True

    def commit_results(self, params: FitParams, outcome: FitOutcome, position: PixelIndex) -> None:
        self.maps.store(position, outcome)


def read_image(path: Path) -> np.ndarray:
    """Read a decay image stored with :func:`numpy.save`.

    Raises
    ------
    DataIOError
        If the file is missing or not a ``.npy`` array.
    """
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise DataIOError(msg)
    if path.suffix != ".npy":
        msg = f"Unsupported data format '{path.suffix}', expected .npy"
        raise DataIOError(msg)
    try:
        return np.load(path, allow_pickle=False)
    except ValueError as exc:
        msg = f"Could not read {path}: {exc}"
        raise DataIOError(msg) from exc


__all__ = ["ArrayDataAccess", "ResultMaps", "read_image"]
