"""Cost functions scoring groups of labelled samples."""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

# A cost function maps a 1-D array of labels to a non-negative impurity.
CostFunction = Callable[[np.ndarray], float]


def gini_index(labels: np.ndarray) -> float:
    """Gini impurity ``1 - sum(p_k ** 2)`` of ``labels``; an empty group scores 0."""
    n = labels.shape[0]
    if n == 0:
        return 0.0
    _, counts = np.unique(labels, return_counts=True)
    proportions = counts / float(n)
    return float(1.0 - np.sum(proportions * proportions))


def weighted_score(groups: Sequence[np.ndarray], cost: CostFunction = gini_index) -> float:
    """Size-weighted average of ``cost`` over label ``groups``."""
    total = sum(int(group.shape[0]) for group in groups)
    if total == 0:
        return 0.0
    return float(sum(cost(group) * (group.shape[0] / total) for group in groups))


__all__ = ["CostFunction", "gini_index", "weighted_score"]
