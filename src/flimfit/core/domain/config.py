"""Configuration models for flimfit."""

from pathlib import Path
from typing import Annotated, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from flimfit.core.constants import DEFAULT_CHISQ_DELTA
from flimfit.core.shared.typing import BoolArray, FloatArray

NoiseType = Literal["const", "given", "poisson_data", "poisson_fit"]
RestrainType = Literal["default", "none"]
LogFormat = Literal["text", "json"]


class FitParams(BaseModel):
    """Parameters shared by every trace of a global fit.

    The parameter row of a trace is laid out as ``[Z, A1, tau1, A2, tau2, ...]``:
    ``Z`` is the constant offset, ``Ak`` and ``tauk`` the amplitude and
    lifetime of component ``k``. In a global fit the lifetimes are shared by
    all traces of a batch while ``Z`` and the amplitudes are per trace.

    Example TOML section:
        [fitting]
        x_inc = 0.048828125
        fit_start = 10
        fit_end = 200
        n_comp = 2
        noise = "poisson_fit"
        drop_bad = true
        i_thresh = 100.0
    """

    model_config = ConfigDict(extra="forbid")

    x_inc: Annotated[float, Field(gt=0)] = Field(
        default=1.0,
        description="Time increment between two samples of a trace.",
    )
    fit_start: Annotated[int, Field(ge=0)] = Field(
        default=0,
        description="First sample index of the fit window.",
    )
    fit_end: Annotated[int, Field(gt=0)] | None = Field(
        default=None,
        description="Sample index one past the fit window. None uses the whole trace.",
    )
    instr: list[float] | None = Field(
        default=None,
        description="Instrument response function, convolved with the model.",
    )
    noise: NoiseType = Field(
        default="poisson_fit",
        description="Noise model used to weight residuals.",
    )
    sig: list[float] | None = Field(
        default=None,
        description="Standard deviations: one value for 'const', one per sample for 'given'.",
    )
    n_comp: Annotated[int, Field(ge=1, le=10)] = Field(
        default=1,
        description="Number of exponential components.",
    )
    param: list[float] | None = Field(
        default=None,
        description="Initial guess [Z, A1, tau1, ...]. None estimates one per trace.",
    )
    param_free: list[bool] | None = Field(
        default=None,
        description="Which parameters vary. None lets every parameter vary.",
    )
    restrain: RestrainType = Field(
        default="default",
        description="'default' keeps lifetimes positive and amplitudes non-negative.",
    )
    chisq_delta: Annotated[float, Field(gt=0)] = Field(
        default=DEFAULT_CHISQ_DELTA,
        description="Convergence threshold on the relative change of chi-square.",
    )
    drop_bad: bool = Field(
        default=False,
        description="Drop divergent traces from the joint fit and re-check each chi-square.",
    )
    i_thresh: Annotated[float, Field(ge=0)] = Field(
        default=0.0,
        description="Traces whose summed intensity is below this value are skipped.",
    )
    lt_axis: int = Field(
        default=-1,
        description="Axis of the image holding the decay (lifetime) samples.",
    )
    get_param_map: bool = Field(default=True, description="Materialize fitted parameters.")
    get_fitted_map: bool = Field(default=False, description="Materialize the fitted curve.")
    get_residuals_map: bool = Field(default=False, description="Materialize the residuals.")

    @property
    def n_param(self) -> int:
        """Length of a parameter row."""
        return 2 * self.n_comp + 1

    @model_validator(mode="after")
    def _check_consistency(self) -> "FitParams":
        if self.fit_end is not None and self.fit_end <= self.fit_start:
            msg = f"fit_end ({self.fit_end}) must be greater than fit_start ({self.fit_start})"
            raise ValueError(msg)
        if self.param is not None and len(self.param) != self.n_param:
            msg = f"param must have {self.n_param} entries for n_comp={self.n_comp}"
            raise ValueError(msg)
        if self.param_free is not None and len(self.param_free) != self.n_param:
            msg = f"param_free must have {self.n_param} entries for n_comp={self.n_comp}"
            raise ValueError(msg)
        if self.noise == "given" and not self.sig:
            msg = "noise='given' requires per-sample 'sig' values"
            raise ValueError(msg)
        if self.instr is not None and len(self.instr) == 0:
            msg = "instr must not be empty"
            raise ValueError(msg)
        return self

    def instr_array(self) -> FloatArray | None:
        """Instrument response as an array, or None."""
        if self.instr is None:
            return None
        return np.asarray(self.instr, dtype=np.float64)

    def sig_array(self) -> FloatArray | None:
        """Noise standard deviations as an array, or None."""
        if self.sig is None:
            return None
        return np.asarray(self.sig, dtype=np.float64)

    def param_free_array(self) -> BoolArray:
        """Free/fixed mask as an array (all free when unset)."""
        if self.param_free is None:
            return np.ones(self.n_param, dtype=bool)
        return np.asarray(self.param_free, dtype=bool)


class BatchConfig(BaseModel):
    """How the command line splits an image into batches."""

    model_config = ConfigDict(extra="forbid")

    size: Annotated[int, Field(gt=0)] = Field(
        default=256,
        description="Maximum number of traces fitted jointly.",
    )


class OutputConfig(BaseModel):
    """Configuration for result files and logs."""

    model_config = ConfigDict(extra="forbid")

    path: Path = Field(default=Path("fit_results.npz"), description="Result archive.")
    log_format: LogFormat = Field(
        default="text",
        description="Format for log file: text (human-readable) or json (structured).",
    )


class FlimFitConfig(BaseModel):
    """Top-level flimfit configuration.

    Example TOML configuration:
        [fitting]
        x_inc = 0.05
        n_comp = 2
        drop_bad = true

        [batch]
        size = 128

        [output]
        path = "fit_results.npz"
    """

    model_config = ConfigDict(extra="forbid")

    fitting: FitParams = Field(default_factory=FitParams)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


__all__ = [
    "BatchConfig",
    "FitParams",
    "FlimFitConfig",
    "LogFormat",
    "NoiseType",
    "OutputConfig",
    "RestrainType",
]
