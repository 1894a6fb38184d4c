"""Stacked generalization: a level-1 combiner trained on level-0 predictions."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .core.dataset import labels_of
from .data import as_samples, as_vector
from .errors import InvalidInput
from .model import Model, ModelSupplier
from .processor import EnsembleModelProcessor, SequentialProcessor

logger = logging.getLogger(__name__)


class StackedGeneralization:
    """Combine diverse level-0 models through a trained level-1 model.

    The level-0 models are fitted on the training samples. Every training row
    is then replaced by the vector of level-0 predictions (optionally preceded
    by the row's own features) followed by the row's label, and the combiner
    is fitted on those rows. Diverse enough level-0 models are expected to make
    uncorrelated errors that the combiner learns to smooth out.

    Parameters
    ----------
    suppliers:
        Builders of the level-0 models.
    combiner_supplier:
        Builder of the level-1 model.
    include_original:
        Prefix the combiner's input with the original features.
    processor:
        Evaluates the level-0 ensemble; sequential by default.
    random_state:
        Seed for the generators handed to the suppliers.
    """

    def __init__(
        self,
        suppliers: Sequence[ModelSupplier],
        combiner_supplier: ModelSupplier,
        *,
        include_original: bool = False,
        processor: EnsembleModelProcessor | None = None,
        random_state: int | None = None,
    ) -> None:
        if not suppliers:
            raise InvalidInput("stacking needs at least one level-0 supplier")
        self.suppliers = tuple(suppliers)
        self.combiner_supplier = combiner_supplier
        self.include_original = include_original
        self.processor = processor if processor is not None else SequentialProcessor()
        self.random_state = random_state
        self._models: tuple[Model, ...] = ()
        self._combiner: Model | None = None
        self._n_features: int | None = None

    @property
    def models(self) -> tuple[Model, ...]:
        return self._models

    @property
    def combiner(self) -> Model:
        if self._combiner is None:
            raise RuntimeError("Model must be fitted before use")
        return self._combiner

    def fit(self, samples: np.ndarray | Sequence[Sequence[float]]) -> "StackedGeneralization":
        data = as_samples(samples)
        self._n_features = int(data.shape[1]) - 1
        rngs = np.random.default_rng(self.random_state).spawn(len(self.suppliers) + 1)
        self._models = tuple(supplier(data, rng) for supplier, rng in zip(self.suppliers, rngs))
        training_set = self.level_one_training_set(data)
        self._combiner = self.combiner_supplier(training_set, rngs[-1])
        logger.debug(
            "fitted %d level-0 models and a combiner on %d-column rows",
            len(self._models),
            training_set.shape[1],
        )
        return self

    def level_one_training_set(self, samples: np.ndarray) -> np.ndarray:
        """Rows of level-0 predictions (features first when requested) with labels last."""
        if not self._models:
            raise RuntimeError("Model must be fitted before use")
        data = as_samples(samples)
        rows = [self._combiner_input(row[:-1]) for row in data]
        return np.column_stack([np.vstack(rows), labels_of(data)])

    def predict(self, vector: Sequence[float]) -> float:
        if self._n_features is None:
            raise RuntimeError("Model must be fitted before predict()")
        x = as_vector(vector, self._n_features)[: self._n_features]
        return self.combiner.predict(self._combiner_input(x))

    def _combiner_input(self, features: np.ndarray) -> np.ndarray:
        predictions = self.processor.predictions(self._models, features)
        if self.include_original:
            return np.concatenate([features, predictions])
        return predictions


__all__ = ["StackedGeneralization"]
