"""Sample ingestion utilities for cartforest."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from .errors import InvalidInput


def ensure_numpy(array: np.ndarray | pd.DataFrame | Sequence[Sequence[float]]) -> np.ndarray:
    """Convert ``array`` to an ``np.ndarray`` of ``float64``.

    Ragged nested sequences and non-numeric entries raise :class:`InvalidInput`.
    """

    if isinstance(array, (pd.DataFrame, pd.Series)):
        array = array.to_numpy()
    try:
        return np.asarray(array, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"samples must be numeric with identical arity: {exc}") from exc


def as_samples(samples: np.ndarray | pd.DataFrame | Sequence[Sequence[float]] | None) -> np.ndarray:
    """Return ``samples`` as a 2-D ``float64`` matrix whose last column is the label.

    Parameters
    ----------
    samples:
        A non-empty collection of fixed-arity numeric vectors. Every vector
        holds at least one feature followed by its label.
    """

    if samples is None:
        raise InvalidInput("training set must not be None")
    data = ensure_numpy(samples)
    if data.ndim != 2:
        raise InvalidInput("samples must form a 2-D collection of vectors")
    if data.shape[0] == 0:
        raise InvalidInput("training set must not be empty")
    if data.shape[1] < 2:
        raise InvalidInput("every sample needs at least one feature followed by a label")
    if not np.all(np.isfinite(data)):
        raise InvalidInput("samples must be finite")
    return data


def as_vector(vector: np.ndarray | Sequence[float] | None, n_features: int) -> np.ndarray:
    """Return a query as a 1-D ``float64`` vector holding at least ``n_features`` values.

    A full sample (features followed by its label) is accepted; the trailing
    label is never read.
    """

    if vector is None:
        raise InvalidInput("query vector must not be None")
    arr = ensure_numpy(vector)
    if arr.ndim != 1:
        raise InvalidInput("query must be a 1-D vector")
    if arr.size == 0:
        raise InvalidInput("query vector must not be empty")
    if arr.size < n_features:
        raise InvalidInput(f"query holds {arr.size} values but the model uses {n_features} features")
    return arr


def merge_features(X: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Append labels ``y`` to feature matrix ``X`` as the trailing column."""

    X_np = ensure_numpy(X)
    y_np = ensure_numpy(y)
    if X_np.ndim != 2:
        raise InvalidInput("X must be 2-D")
    if y_np.ndim != 1:
        raise InvalidInput("y must be 1-D")
    if X_np.shape[0] != y_np.shape[0]:
        raise InvalidInput("X and y row mismatch")
    return np.column_stack([X_np, y_np])


__all__ = ["as_samples", "as_vector", "ensure_numpy", "merge_features"]
