"""Accuracy summaries for fitted classifiers, on a hold-out set or by k-fold."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold

from .core.dataset import class_counts, labels_of
from .data import as_samples
from .errors import InvalidConfiguration, InvalidInput
from .model import Model, ModelSupplier


@dataclass(frozen=True)
class Summary:
    """Classification quality measured on a validation set.

    ``confusion_matrix`` counts samples per expected class (rows) and predicted
    class (columns).
    """

    overall_accuracy: float
    class_accuracy: dict[float, float]
    confusion_matrix: pd.DataFrame


def evaluate(model: Model, samples: np.ndarray | Sequence[Sequence[float]]) -> Summary:
    """Score ``model`` on labelled ``samples``."""
    data = as_samples(samples)
    expected = labels_of(data)
    predicted = np.array([model.predict(row[:-1]) for row in data], dtype=np.float64)
    correct = predicted == expected

    class_accuracy = {label: float(np.mean(correct[expected == label])) for label in class_counts(expected)}
    confusion = pd.crosstab(
        pd.Series(expected, name="expected"),
        pd.Series(predicted, name="predicted"),
    )
    return Summary(
        overall_accuracy=float(np.mean(correct)),
        class_accuracy=class_accuracy,
        confusion_matrix=confusion,
    )


def average_summaries(summaries: Sequence[Summary]) -> Summary:
    """Average accuracies over ``summaries`` and add up their confusion matrices.

    A class missing from some validation sets is averaged over the summaries
    that contain it.
    """
    if not summaries:
        raise InvalidInput("cannot average an empty list of summaries")
    overall = float(np.mean([s.overall_accuracy for s in summaries]))
    per_class: dict[float, list[float]] = {}
    for summary in summaries:
        for label, accuracy in summary.class_accuracy.items():
            per_class.setdefault(label, []).append(accuracy)
    confusion = reduce(
        lambda left, right: left.add(right, fill_value=0),
        (s.confusion_matrix for s in summaries),
    )
    return Summary(
        overall_accuracy=overall,
        class_accuracy={label: float(np.mean(values)) for label, values in per_class.items()},
        confusion_matrix=confusion.fillna(0).astype(np.int64),
    )


def k_fold(
    supplier: ModelSupplier,
    samples: np.ndarray | Sequence[Sequence[float]],
    k: int = 5,
    random_state: int | None = None,
) -> Summary:
    """Stratified k-fold validation of the models built by ``supplier``.

    Every fold serves once as the validation set while the model is trained on
    the other ``k - 1`` folds; the ``k`` summaries are averaged.
    """
    if k < 2:
        raise InvalidConfiguration(f"k-fold needs at least 2 folds, got {k}")
    data = as_samples(samples)
    labels = labels_of(data)
    folds = StratifiedKFold(n_splits=k, shuffle=True, random_state=random_state)
    rngs = np.random.default_rng(random_state).spawn(k)

    summaries = []
    for (train_rows, validation_rows), rng in zip(folds.split(data[:, :-1], labels), rngs):
        model = supplier(data[train_rows], rng)
        summaries.append(evaluate(model, data[validation_rows]))
    return average_summaries(summaries)


__all__ = ["Summary", "average_summaries", "evaluate", "k_fold"]
