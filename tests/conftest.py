"""Pytest fixtures for flimfit tests."""

import numpy as np
import pytest

from flimfit.core.fitting.least_squares import multiexp_curves

X_INC = 0.1
N_SAMPLES = 96
TAU = 2.0
OFFSET = 5.0


def make_decay_image(
    shape: tuple[int, ...],
    taus: tuple[float, ...] = (TAU,),
    n_samples: int = N_SAMPLES,
    x_inc: float = X_INC,
    offset: float = OFFSET,
    instr: np.ndarray | None = None,
    seed: int = 42,
) -> tuple[np.ndarray, np.ndarray]:
    """Noise-free multi-exponential decays with random per-pixel amplitudes.

    Returns the image (decays along the last axis) and the true parameter
    rows, shape ``(*shape, 2 * len(taus) + 1)``.
    """
    rng = np.random.default_rng(seed)
    n_pixels = int(np.prod(shape))
    param = np.zeros((n_pixels, 2 * len(taus) + 1))
    param[:, 0] = offset
    param[:, 1::2] = rng.uniform(500.0, 1500.0, size=(n_pixels, len(taus)))
    param[:, 2::2] = taus
    t = x_inc * np.arange(n_samples)
    kernel = None if instr is None else instr / instr.sum()
    curves = multiexp_curves(t, param, kernel)
    return curves.reshape(*shape, n_samples), param.reshape(*shape, -1)


@pytest.fixture
def decay_image():
    """A 3x4 image of mono-exponential decays (tau = 2.0)."""
    return make_decay_image((3, 4))


@pytest.fixture
def sample_config_file(tmp_path):
    """Create a sample TOML configuration file."""
    config_path = tmp_path / "flimfit.toml"
    content = """
[fitting]
x_inc = 0.1
fit_start = 2
fit_end = 90
n_comp = 2
drop_bad = true
i_thresh = 50.0

[batch]
size = 64

[output]
path = "results.npz"
"""
    config_path.write_text(content)
    return config_path


@pytest.fixture
def image_factory():
    """Factory building synthetic decay images, see make_decay_image."""
    return make_decay_image
