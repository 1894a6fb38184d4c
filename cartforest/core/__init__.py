"""Core split search for cartforest trees."""

from .cost import CostFunction, gini_index, weighted_score
from .dataset import class_counts, is_single_class, labels_of, majority_label
from .optimizer import FullScanOptimizer, RandomFeaturesOptimizer, SplittingOptimizer, choose_features
from .split import Split, partition

__all__ = [
    "CostFunction",
    "FullScanOptimizer",
    "RandomFeaturesOptimizer",
    "Split",
    "SplittingOptimizer",
    "choose_features",
    "class_counts",
    "gini_index",
    "is_single_class",
    "labels_of",
    "majority_label",
    "partition",
    "weighted_score",
]
