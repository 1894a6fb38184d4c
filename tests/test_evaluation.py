from dataclasses import replace

import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import load_iris

from cartforest import ClassificationTree, ForestConfig, RandomForest, TreeConfig
from cartforest.errors import InvalidConfiguration, InvalidInput
from cartforest.evaluation import Summary, average_summaries, evaluate, k_fold


class ConstantModel:
    def __init__(self, value: float) -> None:
        self.value = value

    def predict(self, vector) -> float:
        return self.value


def make_iris() -> np.ndarray:
    data = load_iris()
    return np.column_stack([data.data, data.target.astype(np.float64)])


def grow_tree(samples: np.ndarray, rng: np.random.Generator) -> ClassificationTree:
    return ClassificationTree(TreeConfig(min_size=2, max_depth=6)).fit(samples)


def test_evaluate_constant_model() -> None:
    samples = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 1.0], [3.0, 1.0], [4.0, 1.0]])
    summary = evaluate(ConstantModel(0.0), samples)

    assert summary.overall_accuracy == pytest.approx(0.4)
    assert summary.class_accuracy == {0.0: 1.0, 1.0: 0.0}
    assert summary.confusion_matrix.loc[0.0, 0.0] == 2
    assert summary.confusion_matrix.loc[1.0, 0.0] == 3
    assert summary.confusion_matrix.index.name == "expected"
    assert summary.confusion_matrix.columns.name == "predicted"


def test_average_summaries_adds_confusion_matrices() -> None:
    first = evaluate(ConstantModel(0.0), np.array([[0.0, 0.0], [1.0, 1.0]]))
    second = evaluate(ConstantModel(1.0), np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 1.0]]))
    summary = average_summaries([first, second])

    assert summary.overall_accuracy == pytest.approx((0.5 + 2.0 / 3.0) / 2)
    assert summary.class_accuracy == {0.0: 0.5, 1.0: 0.5}
    expected = pd.DataFrame([[1, 1], [1, 2]], index=[0.0, 1.0], columns=[0.0, 1.0])
    np.testing.assert_array_equal(summary.confusion_matrix.to_numpy(), expected.to_numpy())


def test_average_of_nothing_is_rejected() -> None:
    with pytest.raises(InvalidInput):
        average_summaries([])


def test_k_fold_on_iris() -> None:
    samples = make_iris()
    summary = k_fold(grow_tree, samples, k=5, random_state=0)

    assert isinstance(summary, Summary)
    assert summary.overall_accuracy > 0.85
    assert set(summary.class_accuracy) == {0.0, 1.0, 2.0}
    assert int(summary.confusion_matrix.to_numpy().sum()) == samples.shape[0]


def test_k_fold_of_random_forest_is_reproducible() -> None:
    samples = make_iris()
    config = ForestConfig(ensemble_size=10, min_size=2, max_depth=6)

    def grow_forest(train: np.ndarray, rng: np.random.Generator) -> RandomForest:
        seed = int(rng.integers(2**31))
        return RandomForest(replace(config, random_state=seed)).fit(train)

    first = k_fold(grow_forest, samples, k=3, random_state=4)
    second = k_fold(grow_forest, samples, k=3, random_state=4)
    assert first.overall_accuracy == second.overall_accuracy
    assert first.overall_accuracy > 0.85


def test_k_fold_needs_two_folds() -> None:
    with pytest.raises(InvalidConfiguration):
        k_fold(grow_tree, make_iris(), k=1)
