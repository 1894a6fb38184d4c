"""Label helpers over sample matrices whose last column is the class label."""

from __future__ import annotations

import numpy as np


def labels_of(samples: np.ndarray) -> np.ndarray:
    """Return the label column of ``samples``."""
    return samples[:, -1]


def feature_count(samples: np.ndarray) -> int:
    return int(samples.shape[1]) - 1


def is_single_class(samples: np.ndarray) -> bool:
    """Return ``True`` when every sample carries the label of the first one."""
    labels = labels_of(samples)
    if labels.size == 0:
        return True
    return bool(np.all(labels == labels[0]))


def class_counts(labels: np.ndarray) -> dict[float, int]:
    """Count labels, keyed in order of first appearance."""
    values, first_seen, counts = np.unique(labels, return_index=True, return_counts=True)
    order = np.argsort(first_seen, kind="stable")
    return {float(values[i]): int(counts[i]) for i in order}


def majority_label(labels: np.ndarray) -> float:
    """Most frequent label; ties go to the label encountered first."""
    counts = class_counts(labels)
    if not counts:
        raise ValueError("cannot take the majority of an empty group")
    best_label, best_count = next(iter(counts.items()))
    for label, count in counts.items():
        if count > best_count:
            best_label, best_count = label, count
    return best_label


def distinct_in_order(values: np.ndarray) -> np.ndarray:
    """Distinct entries of ``values`` in order of first appearance."""
    uniq, first_seen = np.unique(values, return_index=True)
    return uniq[np.argsort(first_seen, kind="stable")]
