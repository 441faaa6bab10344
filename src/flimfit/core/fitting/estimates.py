"""Initial parameter guesses by rapid lifetime determination (RLD).

RLD splits the decay after its peak into two adjacent gates of equal width
``w`` and uses the ratio of their integrals ``D0 / D1``: for a single
exponential ``tau = w * x_inc / ln(D0 / D1)``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from flimfit.core.constants import RLD_MIN_COUNTS

if TYPE_CHECKING:
    from flimfit.core.shared.typing import FloatArray


def rld_lifetime(decay: FloatArray, x_inc: float) -> float | None:
    """Lifetime of a background-free decay starting at its peak, or None."""
    width = decay.size // 2
    if width < 1:
        return None
    d0 = float(np.sum(decay[:width]))
    d1 = float(np.sum(decay[width : 2 * width]))
    if d1 < RLD_MIN_COUNTS or d0 <= d1:
        return None
    return width * x_inc / math.log(d0 / d1)


def estimate_initial_params(
    trace: FloatArray,
    x_inc: float,
    n_comp: int,
    fit_start: int = 0,
    fit_end: int | None = None,
) -> FloatArray:
    """Guess ``[Z, A1, tau1, ...]`` for one trace.

    Args:
        trace: Samples of the trace as assembled for the solver
        x_inc: Time between samples
        n_comp: Number of exponential components
        fit_start: First sample of the fit window
        fit_end: One past the last sample of the fit window

    Returns
    -------
        Parameter row of length ``2 * n_comp + 1``. With several components the
        lifetimes are spread by factors of two around the RLD value and the
        amplitude is split evenly.
    """
    window = np.asarray(trace[fit_start:fit_end], dtype=np.float64)
    param = np.zeros(2 * n_comp + 1)
    if window.size == 0 or not np.all(np.isfinite(window)):
        param[2::2] = x_inc
        return param

    peak = int(np.argmax(window))
    tail = window[peak:]
    n_tail = max(1, tail.size // 10)
    offset = float(np.median(tail[-n_tail:]))
    decay = tail - offset

    tau = rld_lifetime(decay, x_inc)
    if tau is None:
        tau = max(tail.size * x_inc / 4, x_inc)

    t_peak = (fit_start + peak) * x_inc
    height = max(float(decay[0]), 0.0)
    amplitude = height * math.exp(min(t_peak / tau, 50.0))

    spread = 2.0 ** (np.arange(n_comp) - (n_comp - 1) / 2)
    param[0] = offset
    param[1::2] = amplitude / n_comp
    param[2::2] = tau * spread[::-1]
    return param


__all__ = ["estimate_initial_params", "rld_lifetime"]
