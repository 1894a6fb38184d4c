"""scikit-learn wrapper for cartforest."""

from __future__ import annotations

from typing import Optional

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from .committee import majority_vote
from .config import ForestConfig
from .data import ensure_numpy, merge_features
from .ensemble import BootstrapAggregation, RandomForest
from .errors import InvalidInput
from .processor import ParallelProcessor


class CartForestClassifier(ClassifierMixin, BaseEstimator):
    """scikit-learn compatible classifier wrapping :class:`RandomForest`."""

    def __init__(
        self,
        *,
        n_estimators: int = 100,
        resample_ratio: float = 1.0,
        features_per_split: Optional[int] = None,
        min_size: int = 10,
        max_depth: int = 10,
        random_features: bool = True,
        random_state: Optional[int] = None,
        n_jobs: int = 1,
    ) -> None:
        self.n_estimators = n_estimators
        self.resample_ratio = resample_ratio
        self.features_per_split = features_per_split
        self.min_size = min_size
        self.max_depth = max_depth
        self.random_features = random_features
        self.random_state = random_state
        self.n_jobs = n_jobs
        self._forest: Optional[BootstrapAggregation] = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> "CartForestClassifier":
        """Fit the estimator.

        Parameters
        ----------
        X: np.ndarray
            Feature matrix of shape (n_samples, n_features).
        y: np.ndarray
            Class labels of shape (n_samples,); any hashable, sortable type.
        """
        y_array = np.asarray(y)
        if y_array.ndim != 1:
            raise InvalidInput("y must be 1-D")
        classes, encoded = np.unique(y_array, return_inverse=True)
        config = ForestConfig(
            ensemble_size=self.n_estimators,
            resample_ratio=self.resample_ratio,
            features_per_split=self.features_per_split,
            min_size=self.min_size,
            max_depth=self.max_depth,
            random_state=self.random_state,
            n_jobs=self.n_jobs,
        )
        forest_cls = RandomForest if self.random_features else BootstrapAggregation
        forest = forest_cls(config)
        forest.fit(merge_features(X, encoded.astype(np.float64)))
        self._forest = forest
        self.classes_ = classes
        self.n_features_in_ = int(ensure_numpy(X).shape[1])
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        forest = self.get_model()
        X_np = ensure_numpy(X)
        if X_np.ndim != 2:
            raise InvalidInput("X must be 2-D")
        if self.n_jobs > 1:
            with ParallelProcessor(max_workers=self.n_jobs) as processor:
                votes = [majority_vote(processor.predictions(forest.models, row)) for row in X_np]
        else:
            votes = [forest.classify(row) for row in X_np]
        return self.classes_[np.asarray(votes, dtype=np.int64)]

    def get_model(self) -> BootstrapAggregation:
        if self._forest is None:
            raise RuntimeError("Estimator has not been fitted")
        return self._forest
