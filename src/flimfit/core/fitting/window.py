"""Mapping of the configured fit window onto the buffers handed to a solver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from flimfit.core.shared.exceptions import ConfigError

if TYPE_CHECKING:
    from flimfit.core.domain.config import FitParams


@dataclass(frozen=True, slots=True)
class FitWindow:
    """Which raw samples are loaded and which of them are fitted.

    Without an instrument response only the fit window itself is loaded, so
    the solver window covers the whole buffer. With one, the samples before
    the window are loaded too because the convolution needs the rising edge;
    the solver window then starts at ``fit_start``.
    """

    load_start: int
    load_end: int
    fit_start: int
    fit_end: int

    @property
    def n_data_total(self) -> int:
        """Number of samples per assembled trace."""
        return self.load_end - self.load_start

    @classmethod
    def from_params(cls, params: FitParams, n_samples: int) -> FitWindow:
        """Resolve the window of ``params`` for traces of ``n_samples`` samples.

        Raises
        ------
        ConfigError
            If the window does not fit inside the traces.
        """
        fit_end = params.fit_end if params.fit_end is not None else n_samples
        if fit_end > n_samples:
            msg = f"fit_end ({fit_end}) exceeds the trace length ({n_samples})"
            raise ConfigError(msg)
        if params.fit_start >= fit_end:
            msg = f"fit_start ({params.fit_start}) must be below fit_end ({fit_end})"
            raise ConfigError(msg)
        if params.instr is not None:
            return cls(0, fit_end, params.fit_start, fit_end)
        return cls(params.fit_start, fit_end, 0, fit_end - params.fit_start)
