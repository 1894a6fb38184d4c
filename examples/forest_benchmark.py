"""Benchmark cartforest ensembles against scikit-learn on synthetic data."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

import numpy as np
from sklearn.datasets import make_classification
from sklearn.ensemble import RandomForestClassifier
from sklearn.metrics import accuracy_score
from sklearn.model_selection import train_test_split

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cartforest import ForestConfig, ParallelProcessor, RandomForest
from cartforest.data import merge_features
from cartforest.evaluation import evaluate


N_SAMPLES = 2000
N_FEATURES = 16
N_CLASSES = 3
SEED = 123

N_TREES = 50
MAX_DEPTH = 8
MIN_SIZE = 5
N_JOBS = 4


@dataclass
class BenchmarkResult:
    name: str
    fit_time: float
    predict_time: float
    accuracy: float


def generate_data() -> tuple[np.ndarray, np.ndarray]:
    X, y = make_classification(
        n_samples=N_SAMPLES,
        n_features=N_FEATURES,
        n_informative=8,
        n_redundant=4,
        n_classes=N_CLASSES,
        random_state=SEED,
    )
    return X, y.astype(np.float64)


def benchmark(
    name: str,
    fit_fn: Callable[[], None],
    predict_fn: Callable[[], np.ndarray],
    y_true: np.ndarray,
) -> BenchmarkResult:
    """Measure fit/predict time and compute accuracy."""
    t0 = time.perf_counter()
    fit_fn()
    fit_time = time.perf_counter() - t0

    t0 = time.perf_counter()
    preds = predict_fn()
    predict_time = time.perf_counter() - t0

    accuracy = float(accuracy_score(y_true, preds))
    return BenchmarkResult(name=name, fit_time=fit_time, predict_time=predict_time, accuracy=accuracy)


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    X, y = generate_data()
    X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=0.2, random_state=SEED)
    train = merge_features(X_train, y_train)

    results: List[BenchmarkResult] = []

    config = ForestConfig(
        ensemble_size=N_TREES,
        min_size=MIN_SIZE,
        max_depth=MAX_DEPTH,
        random_state=SEED,
        n_jobs=N_JOBS,
    )
    forest = RandomForest(config)

    def forest_fit() -> None:
        forest.fit(train)

    def forest_predict_sequential() -> np.ndarray:
        return np.array([forest.classify(row) for row in X_test])

    results.append(benchmark("cartforest", forest_fit, forest_predict_sequential, y_test))

    with ParallelProcessor(max_workers=N_JOBS) as processor:
        forest.processor = processor
        results.append(
            benchmark(
                "cartforest/par",
                lambda: None,
                lambda: np.array([forest.classify(row) for row in X_test]),
                y_test,
            )
        )
        summary = evaluate(forest, merge_features(X_test, y_test))

    # scikit-learn baseline
    sk_forest = RandomForestClassifier(
        n_estimators=N_TREES,
        max_depth=MAX_DEPTH,
        min_samples_split=MIN_SIZE + 1,
        max_features=min(N_FEATURES, 2 * int(np.sqrt(N_FEATURES))),
        n_jobs=N_JOBS,
        random_state=SEED,
    )
    results.append(
        benchmark(
            "scikit-learn",
            lambda: sk_forest.fit(X_train, y_train),
            lambda: sk_forest.predict(X_test),
            y_test,
        )
    )

    print("Model            Fit (s)   Predict (s)   Accuracy")
    print("-" * 50)
    for res in results:
        print(f"{res.name:<15} {res.fit_time:>8.3f} {res.predict_time:>12.3f} {res.accuracy:>9.4f}")
    print()
    print("cartforest confusion matrix (parallel processor):")
    print(summary.confusion_matrix)
