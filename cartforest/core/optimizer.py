"""Split search minimising a cost function over candidate features and thresholds.

Finding a globally optimal tree is NP-hard; the optimizers below only find the
locally best split of one group of samples. Which features are examined is
decided by :meth:`SplittingOptimizer.candidate_features`:

* :class:`FullScanOptimizer` examines every feature (plain CART, bagging);
* :class:`RandomFeaturesOptimizer` examines a fresh random subset per call
  (random forests).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np

from ..errors import InvalidConfiguration, InvalidInput
from .cost import CostFunction, gini_index, weighted_score
from .dataset import distinct_in_order, feature_count, labels_of
from .split import Split, partition


def choose_features(n_features: int, k: int, rng: np.random.Generator) -> np.ndarray:
    """Draw ``k`` distinct feature indices out of ``n_features``, returned sorted."""
    if not 1 <= k <= n_features:
        raise InvalidConfiguration(f"cannot choose {k} features out of {n_features}")
    chosen = rng.choice(n_features, size=k, replace=False)
    return np.sort(chosen).astype(np.int64, copy=False)


class SplittingOptimizer(ABC):
    """Find the split of a sample group with minimal weighted cost.

    Every distinct value observed for a candidate feature is tried as a
    threshold, in order of first appearance; ties keep the split found first.
    """

    def __init__(self, n_features: int, cost: CostFunction = gini_index) -> None:
        if n_features < 1:
            raise InvalidConfiguration("an optimizer needs at least one feature")
        self.n_features = int(n_features)
        self.cost = cost

    @abstractmethod
    def candidate_features(self) -> Iterable[int]:
        """Feature indices examined by the next call to :meth:`find_best_split`."""

    def find_best_split(self, samples: np.ndarray) -> Split:
        if samples is None or samples.shape[0] == 0:
            raise InvalidInput("cannot split an empty data set")
        if samples.ndim != 2 or feature_count(samples) != self.n_features:
            raise InvalidInput(
                f"expected samples with {self.n_features} features followed by a label"
            )

        labels = labels_of(samples)
        best_score = math.inf
        best_feature = -1
        best_threshold = math.nan
        evaluated = 0
        for feature in self.candidate_features():
            column = samples[:, feature]
            for threshold in distinct_in_order(column):
                mask = column < threshold
                score = weighted_score((labels[mask], labels[~mask]), self.cost)
                evaluated += 1
                if score < best_score:
                    best_score = score
                    best_feature = int(feature)
                    best_threshold = float(threshold)

        if best_feature < 0:
            raise InvalidInput("no candidate threshold could be evaluated")
        below, above = partition(samples, best_feature, best_threshold)
        return Split(
            feature=best_feature,
            threshold=best_threshold,
            score=float(best_score),
            below=below,
            above=above,
            evaluated=evaluated,
        )


class FullScanOptimizer(SplittingOptimizer):
    """Examine every feature at every split."""

    def __init__(self, n_features: int, cost: CostFunction = gini_index) -> None:
        super().__init__(n_features, cost)
        self._features = tuple(range(self.n_features))

    def candidate_features(self) -> Iterable[int]:
        return self._features


class RandomFeaturesOptimizer(SplittingOptimizer):
    """Examine ``candidates`` randomly chosen features, re-drawn for every split."""

    def __init__(
        self,
        n_features: int,
        candidates: int,
        rng: np.random.Generator | int | None = None,
        cost: CostFunction = gini_index,
    ) -> None:
        super().__init__(n_features, cost)
        if not 1 <= candidates <= self.n_features:
            raise InvalidConfiguration(
                f"candidates must lie in [1, {self.n_features}], got {candidates}"
            )
        self.candidates = int(candidates)
        self._rng = np.random.default_rng(rng)

    def candidate_features(self) -> Iterable[int]:
        return choose_features(self.n_features, self.candidates, self._rng).tolist()


__all__ = [
    "FullScanOptimizer",
    "RandomFeaturesOptimizer",
    "SplittingOptimizer",
    "choose_features",
]
