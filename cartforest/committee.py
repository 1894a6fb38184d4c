"""Turn ensemble prediction vectors into a single verdict."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .core.dataset import majority_label
from .errors import InvalidInput
from .model import Model
from .processor import EnsembleModelProcessor, SequentialProcessor


def _as_predictions(predictions: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.asarray(predictions, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidInput("predictions must be a non-empty 1-D vector")
    return arr


def majority_vote(predictions: Sequence[float] | np.ndarray) -> float:
    """Most frequent prediction; ties go to the one seen first."""
    return majority_label(_as_predictions(predictions))


def average(predictions: Sequence[float] | np.ndarray) -> float:
    return float(np.mean(_as_predictions(predictions)))


def weighted_vote(predictions: Sequence[float] | np.ndarray, weights: Sequence[float] | np.ndarray) -> float:
    """Prediction with the largest summed weight; ties go to the one seen first."""
    preds = _as_predictions(predictions)
    w = np.asarray(weights, dtype=np.float64)
    if w.shape != preds.shape:
        raise InvalidInput("weights must align with predictions")
    totals: dict[float, float] = {}
    for prediction, weight in zip(preds.tolist(), w.tolist()):
        totals[prediction] = totals.get(prediction, 0.0) + weight
    best = next(iter(totals))
    for prediction, total in totals.items():
        if total > totals[best]:
            best = prediction
    return best


class CommitteeOfExperts:
    """Equal-say committee over a fixed ensemble.

    Every model, weak or strong, casts one vote for :meth:`classify`, and
    :meth:`estimate` averages the model outputs.
    """

    def __init__(self, models: Sequence[Model], processor: EnsembleModelProcessor | None = None) -> None:
        if not models:
            raise InvalidInput("a committee needs at least one model")
        self.models = tuple(models)
        self.processor = processor if processor is not None else SequentialProcessor()

    def __len__(self) -> int:
        return len(self.models)

    def predictions(self, vector: Sequence[float]) -> np.ndarray:
        return self.processor.predictions(self.models, vector)

    def classify(self, vector: Sequence[float]) -> float:
        return majority_vote(self.predictions(vector))

    def estimate(self, vector: Sequence[float]) -> float:
        return average(self.predictions(vector))

    def predict(self, vector: Sequence[float]) -> float:
        return self.classify(vector)


__all__ = ["CommitteeOfExperts", "average", "majority_vote", "weighted_vote"]
