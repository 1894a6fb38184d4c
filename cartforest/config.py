"""Configuration objects for cartforest."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidConfiguration


@dataclass(frozen=True, slots=True)
class TreeConfig:
    """Hyper-parameters steering the growth of a single classification tree.

    Parameters
    ----------
    min_size:
        A child holding ``min_size`` samples or fewer is not split further.
    max_depth:
        Maximum number of decision levels; the root split sits at depth 1, so
        ``max_depth=1`` grows a stump.
    """

    min_size: int = 10
    max_depth: int = 10

    def __post_init__(self) -> None:
        if self.min_size < 0:
            raise InvalidConfiguration(f"min_size must be non-negative, got {self.min_size}")
        if self.max_depth < 1:
            raise InvalidConfiguration(f"max_depth must be at least 1, got {self.max_depth}")


@dataclass(frozen=True, slots=True)
class ForestConfig:
    """Hyper-parameters steering bootstrap aggregation and random forests.

    Parameters
    ----------
    ensemble_size:
        Number of bootstrap draws, and therefore of trained models.
    resample_ratio:
        Size of every draw relative to the training set, in ``(0, 1]``. A draw
        holds ``ceil(resample_ratio * n_samples)`` samples.
    features_per_split:
        Candidate features examined at every split by a random forest.
        ``None`` picks ``2 * floor(sqrt(n_features))`` clipped to the
        available features. Ignored by plain bagging.
    min_size, max_depth:
        Passed to every tree, see :class:`TreeConfig`.
    random_state:
        Optional seed; every draw gets its own generator spawned from it.
    n_jobs:
        Number of threads training trees concurrently. ``1`` trains in order
        on the calling thread.
    """

    ensemble_size: int = 100
    resample_ratio: float = 1.0
    features_per_split: int | None = None
    min_size: int = 10
    max_depth: int = 10
    random_state: int | None = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.ensemble_size < 1:
            raise InvalidConfiguration(f"ensemble_size must be at least 1, got {self.ensemble_size}")
        if not (0.0 < self.resample_ratio <= 1.0):
            raise InvalidConfiguration(f"resample_ratio must lie in (0, 1], got {self.resample_ratio}")
        if self.features_per_split is not None and self.features_per_split < 1:
            raise InvalidConfiguration(
                f"features_per_split must be at least 1, got {self.features_per_split}"
            )
        if self.n_jobs < 1:
            raise InvalidConfiguration(f"n_jobs must be at least 1, got {self.n_jobs}")
        # surface tree parameter errors at construction time
        self.tree_config()

    def tree_config(self) -> TreeConfig:
        return TreeConfig(min_size=self.min_size, max_depth=self.max_depth)

    def resolve_features_per_split(self, n_features: int) -> int:
        """Return the candidate count used by a random forest on ``n_features``."""
        if self.features_per_split is None:
            return min(n_features, max(1, 2 * math.isqrt(n_features)))
        if self.features_per_split > n_features:
            raise InvalidConfiguration(
                f"features_per_split={self.features_per_split} exceeds the {n_features} available features"
            )
        return self.features_per_split
