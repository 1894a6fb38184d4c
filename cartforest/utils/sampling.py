"""Uniform sampling with replacement."""

from __future__ import annotations

import math

import numpy as np

from ..errors import InvalidConfiguration, InvalidInput

MIN_DRAW = 2


def draw_size(n_samples: int, ratio: float) -> int:
    """Return ``ceil(ratio * n_samples)``, the number of rows in one bootstrap draw.

    Raises
    ------
    InvalidConfiguration
        If ``ratio`` lies outside ``(0, 1]`` or the draw would hold fewer than
        two samples.
    """
    if not (0.0 < ratio <= 1.0):
        raise InvalidConfiguration(f"resample ratio must lie in (0, 1], got {ratio}")
    size = math.ceil(ratio * n_samples)
    if size < MIN_DRAW:
        raise InvalidConfiguration(
            f"a draw of {size} sample(s) from {n_samples} is too small; need at least {MIN_DRAW}"
        )
    return size


def subset(samples: np.ndarray, ratio: float, rng: np.random.Generator) -> np.ndarray:
    """Draw ``ceil(ratio * len(samples))`` rows uniformly and with replacement.

    Parameters
    ----------
    samples: np.ndarray
        Data set of shape (n_samples, n_columns).
    ratio: float
        Draw size relative to ``samples``, in ``(0, 1]``.
    rng: np.random.Generator
        Source of randomness; the same generator state yields the same draw.

    Returns
    -------
    np.ndarray
        Array of shape (draw_size, n_columns). Rows may repeat and some
        original rows are usually missing.
    """
    if samples.shape[0] == 0:
        raise InvalidInput("cannot sample an empty data set")
    size = draw_size(samples.shape[0], ratio)
    indices = rng.integers(0, samples.shape[0], size=size)
    return samples[indices]

