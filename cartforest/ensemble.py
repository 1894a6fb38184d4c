"""Bootstrap aggregation (bagging) and random forests of classification trees.

Bagging reduces variance error: every model is trained on its own bootstrap
draw of the training set and the models vote (classification) or are averaged
(regression). It pays off most for low-bias, high-variance models such as deep
decision trees. A random forest additionally decorrelates the trees by letting
every split examine only a random subset of the features.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial
from time import perf_counter
from typing import Sequence

import numpy as np

from .committee import average, majority_vote
from .config import ForestConfig
from .core import FullScanOptimizer, RandomFeaturesOptimizer
from .core.dataset import feature_count
from .data import as_samples
from .model import Model, ModelSupplier
from .processor import EnsembleModelProcessor, SequentialProcessor
from .tree import ClassificationTree
from .utils.sampling import draw_size, subset


class BootstrapAggregation:
    """Train ``ensemble_size`` models on bootstrap draws of one training set.

    Parameters
    ----------
    config:
        Ensemble size, resample ratio, tree limits and seed.
    processor:
        Evaluates the fitted ensemble for :meth:`predictions`; sequential by
        default.
    executor:
        Optional pool used to train the models concurrently. Takes precedence
        over ``config.n_jobs`` and is never shut down here.
    """

    def __init__(
        self,
        config: ForestConfig | None = None,
        *,
        processor: EnsembleModelProcessor | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.config = config if config is not None else ForestConfig()
        self.processor = processor if processor is not None else SequentialProcessor()
        self._executor = executor
        self._logger = logging.getLogger(__name__)
        self._models: tuple[Model, ...] = ()
        self._tree_metrics: list[dict[str, object]] = []

    # Public -------------------------------------------------------------

    @property
    def models(self) -> tuple[Model, ...]:
        return self._models

    @property
    def tree_metrics(self) -> Sequence[dict[str, object]]:
        return self._tree_metrics

    def __len__(self) -> int:
        return len(self._models)

    def fit(
        self,
        samples: np.ndarray | Sequence[Sequence[float]],
        supplier: ModelSupplier | None = None,
    ) -> "BootstrapAggregation":
        """Draw ``ensemble_size`` bootstrap samples and fit one model on each.

        ``supplier`` builds a fitted model from a draw and a generator; when
        omitted a classification tree is grown on every draw.
        """
        data = as_samples(samples)
        size = draw_size(data.shape[0], self.config.resample_ratio)
        if supplier is None:
            supplier = self._default_supplier(feature_count(data))

        # one independent stream per draw keeps results identical across n_jobs
        rngs = np.random.default_rng(self.config.random_state).spawn(self.config.ensemble_size)
        train = partial(self._train_one, data, supplier)
        indices = range(self.config.ensemble_size)

        start = perf_counter()
        if self._executor is not None:
            trained = list(self._executor.map(train, indices, rngs))
        elif self.config.n_jobs > 1:
            with ThreadPoolExecutor(max_workers=self.config.n_jobs, thread_name_prefix="cartforest-fit") as pool:
                trained = list(pool.map(train, indices, rngs))
        else:
            trained = [train(index, rng) for index, rng in zip(indices, rngs)]

        self._models = tuple(model for model, _ in trained)
        self._tree_metrics = [metrics for _, metrics in trained]
        self._logger.info(
            "trained %d models on draws of %d samples in %.3fs",
            len(self._models),
            size,
            perf_counter() - start,
        )
        return self

    def predictions(self, vector: Sequence[float]) -> np.ndarray:
        """Per-model predictions for ``vector``, ordered like :attr:`models`."""
        if not self._models:
            raise RuntimeError("Model must be fitted before predict()")
        return self.processor.predictions(self._models, vector)

    def classify(self, vector: Sequence[float]) -> float:
        """Class chosen by the majority of the models."""
        return majority_vote(self.predictions(vector))

    def estimate(self, vector: Sequence[float]) -> float:
        """Average of the model outputs."""
        return average(self.predictions(vector))

    def predict(self, vector: Sequence[float]) -> float:
        return self.classify(vector)

    # Internals -----------------------------------------------------------

    def _default_supplier(self, n_features: int) -> ModelSupplier:
        tree_config = self.config.tree_config()

        def grow_tree(sample: np.ndarray, rng: np.random.Generator) -> ClassificationTree:
            return ClassificationTree(tree_config, FullScanOptimizer(n_features)).fit(sample)

        return grow_tree

    def _train_one(
        self,
        data: np.ndarray,
        supplier: ModelSupplier,
        index: int,
        rng: np.random.Generator,
    ) -> tuple[Model, dict[str, object]]:
        start = perf_counter()
        draw = subset(data, self.config.resample_ratio, rng)
        model = supplier(draw, rng)
        metrics: dict[str, object] = {"model": index, "draw_size": int(draw.shape[0])}
        if isinstance(model, ClassificationTree):
            metrics.update(model.stats.to_dict())
        metrics["seconds"] = perf_counter() - start
        if self._logger.isEnabledFor(logging.INFO):
            self._logger.info(json.dumps(metrics))
        return model, metrics


class RandomForest(BootstrapAggregation):
    """Bagged classification trees whose splits examine random feature subsets.

    Each split considers ``features_per_split`` features drawn afresh; by
    default ``2 * floor(sqrt(n_features))``, clipped to the available features.
    """

    def _default_supplier(self, n_features: int) -> ModelSupplier:
        tree_config = self.config.tree_config()
        candidates = self.config.resolve_features_per_split(n_features)

        def grow_tree(sample: np.ndarray, rng: np.random.Generator) -> ClassificationTree:
            optimizer = RandomFeaturesOptimizer(n_features, candidates, rng)
            return ClassificationTree(tree_config, optimizer).fit(sample)

        return grow_tree


__all__ = ["BootstrapAggregation", "RandomForest"]
