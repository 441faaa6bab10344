"""Shared typing aliases used across flimfit."""

from collections.abc import Hashable

import numpy as np
import numpy.typing as npt

FloatArray = npt.NDArray[np.float64 | np.float32]
BoolArray = npt.NDArray[np.bool_]

# Positions are opaque to the fitting core; array helpers use index tuples.
Position = Hashable
PixelIndex = tuple[int, ...]
