"""cartforest: CART classification trees, bagging and random forests with parallel ensemble evaluation."""

from .committee import CommitteeOfExperts, average, majority_vote, weighted_vote
from .config import ForestConfig, TreeConfig
from .ensemble import BootstrapAggregation, RandomForest
from .errors import InvalidConfiguration, InvalidInput
from .model import Model, ModelSupplier
from .processor import ParallelProcessor, SequentialProcessor
from .stacking import StackedGeneralization
from .tree import ClassificationTree

__all__ = [
    "BootstrapAggregation",
    "ClassificationTree",
    "CommitteeOfExperts",
    "ForestConfig",
    "InvalidConfiguration",
    "InvalidInput",
    "Model",
    "ModelSupplier",
    "ParallelProcessor",
    "RandomForest",
    "SequentialProcessor",
    "StackedGeneralization",
    "TreeConfig",
    "average",
    "majority_vote",
    "weighted_vote",
]
