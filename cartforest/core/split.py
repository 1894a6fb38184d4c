"""Split records and sample partitioning."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True, slots=True)
class Split:
    """Best partition found for a group of samples.

    ``below`` holds the samples with ``x[feature] < threshold`` and ``above``
    the remaining ones. ``evaluated`` counts the thresholds scored to find it.
    """

    feature: int
    threshold: float
    score: float
    below: np.ndarray
    above: np.ndarray
    evaluated: int = 0

    @property
    def is_degenerate(self) -> bool:
        """``True`` when one side is empty, i.e. the split separates nothing."""
        return self.below.shape[0] == 0 or self.above.shape[0] == 0

    @property
    def sample_count(self) -> int:
        return int(self.below.shape[0] + self.above.shape[0])


def partition(samples: np.ndarray, feature: int, threshold: float) -> Tuple[np.ndarray, np.ndarray]:
    """Partition ``samples`` into rows below ``threshold`` and rows at or above it."""
    mask = samples[:, feature] < threshold
    if mask.all():
        return samples, samples[:0]
    if not mask.any():
        return samples[:0], samples
    return samples[mask], samples[~mask]
