"""CART classification tree grown with a pluggable splitting optimizer."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Sequence

import numpy as np

from .config import TreeConfig
from .core import FullScanOptimizer, Split, SplittingOptimizer, is_single_class, labels_of, majority_label
from .core.dataset import feature_count
from .data import as_samples, as_vector, ensure_numpy
from .errors import DegenerateSplit, InvalidInput
from .model import Tree, TreeBuilder


@dataclass(slots=True)
class TreeStats:
    nodes: int = 0
    leaves: int = 0
    depth: int = 0
    degenerate_nodes: int = 0
    splits_evaluated: int = 0
    fit_seconds: float = 0.0

    def to_dict(self) -> dict[str, int | float]:
        return {
            "nodes": self.nodes,
            "leaves": self.leaves,
            "depth": self.depth,
            "degenerate_nodes": self.degenerate_nodes,
            "splits_evaluated": self.splits_evaluated,
            "fit_seconds": self.fit_seconds,
        }


@dataclass(slots=True)
class _PendingNode:
    node_id: int
    depth: int
    samples: np.ndarray


class ClassificationTree:
    """Binary classification tree minimising Gini impurity (the C of CART).

    Growth is top-down: the best split of a node's samples creates two
    children which are split again until one of the stopping rules holds:

    * the split separates nothing, in which case the node itself becomes a
      leaf over its undivided samples;
    * the maximum depth is reached;
    * a child holds a single class;
    * a child holds ``min_size`` samples or fewer.

    Leaves predict the most frequent label of their samples, ties going to the
    label seen first. Samples are not retained once a leaf is labelled.

    Parameters
    ----------
    config:
        Size limits of the tree.
    optimizer:
        Split search used at every node. Defaults to a
        :class:`~cartforest.core.FullScanOptimizer` over all features.
    """

    def __init__(self, config: TreeConfig | None = None, optimizer: SplittingOptimizer | None = None) -> None:
        self.config = config if config is not None else TreeConfig()
        self._optimizer = optimizer
        self._logger = logging.getLogger(__name__)
        self._tree: Tree | None = None
        self._n_features: int | None = None
        self._stats = TreeStats()

    # Public -------------------------------------------------------------

    @property
    def tree(self) -> Tree:
        if self._tree is None:
            raise RuntimeError("Model must be fitted before use")
        return self._tree

    @property
    def n_features(self) -> int:
        if self._n_features is None:
            raise RuntimeError("Model must be fitted before use")
        return self._n_features

    @property
    def stats(self) -> TreeStats:
        return self._stats

    def fit(self, samples: np.ndarray | Sequence[Sequence[float]]) -> "ClassificationTree":
        """Grow the tree on ``samples`` (features followed by the label)."""
        data = as_samples(samples)
        n_features = feature_count(data)
        optimizer = self._optimizer if self._optimizer is not None else FullScanOptimizer(n_features)
        if optimizer.n_features != n_features:
            raise InvalidInput(
                f"optimizer expects {optimizer.n_features} features but samples carry {n_features}"
            )

        start = perf_counter()
        stats = TreeStats()
        builder = TreeBuilder()

        frontier = [_PendingNode(node_id=0, depth=1, samples=data)]
        while frontier:
            next_frontier: list[_PendingNode] = []
            for pending in frontier:
                try:
                    split = self._split(optimizer, pending.samples, stats)
                except DegenerateSplit:
                    stats.degenerate_nodes += 1
                    self._make_leaf(builder, pending.node_id, pending.samples)
                    continue

                left_id, right_id = builder.split(
                    pending.node_id, split.feature, split.threshold, split.sample_count
                )
                for child_id, subset in ((left_id, split.below), (right_id, split.above)):
                    if self._is_terminal(subset, pending.depth):
                        self._make_leaf(builder, child_id, subset)
                    else:
                        next_frontier.append(_PendingNode(child_id, pending.depth + 1, subset))
            frontier = next_frontier

        tree = builder.build()
        stats.nodes = len(tree.nodes)
        stats.leaves = len(tree.leaves)
        stats.depth = tree.depth
        stats.fit_seconds = perf_counter() - start

        self._tree = tree
        self._n_features = n_features
        self._stats = stats
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(json.dumps(stats.to_dict()))
        return self

    def predict(self, vector: Sequence[float]) -> float:
        """Return the predicted class of ``vector``."""
        tree = self.tree
        x = as_vector(vector, self.n_features)
        return tree.leaf_for(x).value

    def predict_many(self, X: np.ndarray | Sequence[Sequence[float]]) -> np.ndarray:
        """Return the predicted class of every row of ``X``."""
        X_np = ensure_numpy(X)
        if X_np.ndim != 2:
            raise InvalidInput("X must be 2-D")
        return np.array([self.predict(row) for row in X_np], dtype=np.float64)

    # Internals -----------------------------------------------------------

    @staticmethod
    def _split(optimizer: SplittingOptimizer, samples: np.ndarray, stats: TreeStats) -> Split:
        split = optimizer.find_best_split(samples)
        stats.splits_evaluated += split.evaluated
        if split.is_degenerate:
            raise DegenerateSplit(f"no informative split among {samples.shape[0]} samples")
        return split

    def _is_terminal(self, samples: np.ndarray, depth: int) -> bool:
        return (
            depth >= self.config.max_depth
            or is_single_class(samples)
            or samples.shape[0] <= self.config.min_size
        )

    @staticmethod
    def _make_leaf(builder: TreeBuilder, node_id: int, samples: np.ndarray) -> None:
        builder.set_leaf(node_id, majority_label(labels_of(samples)), samples.shape[0])


__all__ = ["ClassificationTree", "TreeStats"]
