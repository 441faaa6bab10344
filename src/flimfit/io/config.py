"""Configuration file loading and saving."""

import tomllib
from pathlib import Path

import tomli_w

from flimfit.core.domain.config import FlimFitConfig


def load_config(path: Path) -> FlimFitConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        FlimFitConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If the configuration is invalid.
    """
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as f:
        data = tomllib.load(f)

    return FlimFitConfig.model_validate(data)


def save_config(config: FlimFitConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Unset optional values are omitted since TOML has no null.
    """
    data = config.model_dump(mode="json", exclude_none=True)

    with path.open("wb") as f:
        tomli_w.dump(data, f)


def generate_default_config() -> str:
    """Generate a default configuration file as a string."""
    return """# flimfit configuration file
# Generated automatically - edit as needed

[fitting]
x_inc = 1.0            # time between two samples
fit_start = 0
# fit_end = 256        # one past the last fitted sample (default: whole trace)
n_comp = 1             # number of exponential components
noise = "poisson_fit"  # const, given, poisson_data, poisson_fit
restrain = "default"   # default, none
chisq_delta = 0.0001
drop_bad = false
i_thresh = 0.0         # skip traces with less total intensity
lt_axis = -1           # axis of the decay samples
get_param_map = true
get_fitted_map = false
get_residuals_map = false
# instr = [0.1, 0.8, 0.1]           # instrument response
# param = [0.0, 1000.0, 2.5]        # initial [Z, A1, tau1, ...]
# param_free = [true, true, true]

[batch]
size = 256

[output]
path = "fit_results.npz"
log_format = "text"
"""
