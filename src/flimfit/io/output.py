"""Writing fit results to disk."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from flimfit.core.shared.exceptions import DataIOError

if TYPE_CHECKING:
    from pathlib import Path

    from flimfit.core.domain.config import FitParams
    from flimfit.core.domain.results import BatchStatistic
    from flimfit.io.data_access import ResultMaps


def save_results(
    path: Path,
    maps: ResultMaps,
    statistics: list[BatchStatistic],
    params: FitParams,
) -> Path:
    """Save result maps and per-batch statistics to a compressed ``.npz``.

    Arrays written: ``status``, ``chisq``, ``param``/``fitted``/``residuals``
    when present, ``batch_chisq``, ``batch_df``, ``batch_ret_code`` and the
    fit parameters as a JSON string under ``params``.

    Returns
    -------
        The path actually written (numpy appends ``.npz`` when missing).
    """
    arrays: dict[str, np.ndarray] = {
        "status": maps.status,
        "chisq": maps.chisq,
        "batch_chisq": np.array([s.chisq for s in statistics], dtype=np.float64),
        "batch_df": np.array([s.df for s in statistics], dtype=np.int64),
        "batch_ret_code": np.array([s.ret_code for s in statistics], dtype=np.int64),
        "params": np.array(params.model_dump_json()),
    }
    for name in ("param", "fitted", "residuals"):
        value = getattr(maps, name)
        if value is not None:
            arrays[name] = value

    if path.suffix != ".npz":
        path = path.with_name(path.name + ".npz")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez_compressed(path, **arrays)
    except OSError as exc:
        msg = f"Could not write results to {path}: {exc}"
        raise DataIOError(msg) from exc
    return path


__all__ = ["save_results"]
