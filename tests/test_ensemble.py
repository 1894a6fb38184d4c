from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from cartforest import BootstrapAggregation, ClassificationTree, ForestConfig, RandomForest, TreeConfig
from cartforest.errors import InvalidConfiguration


def make_blobs(n_per_class: int = 50, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    negative = np.column_stack(
        [rng.normal(-3.0, 0.5, n_per_class), rng.normal(size=n_per_class), np.zeros(n_per_class)]
    )
    positive = np.column_stack(
        [rng.normal(3.0, 0.5, n_per_class), rng.normal(size=n_per_class), np.ones(n_per_class)]
    )
    return rng.permutation(np.vstack([negative, positive]))


def make_config(**overrides) -> ForestConfig:
    params = {"ensemble_size": 7, "min_size": 1, "max_depth": 5, "random_state": 0}
    params.update(overrides)
    return ForestConfig(**params)


@pytest.mark.parametrize("forest_cls", [BootstrapAggregation, RandomForest])
def test_ensemble_holds_one_model_per_draw(forest_cls) -> None:
    samples = make_blobs()
    forest = forest_cls(make_config()).fit(samples)

    assert len(forest) == 7
    assert all(isinstance(model, ClassificationTree) for model in forest.models)
    assert forest.predictions(samples[0, :-1]).shape == (7,)
    assert len(forest.tree_metrics) == 7
    assert [m["model"] for m in forest.tree_metrics] == list(range(7))
    assert all(m["draw_size"] == samples.shape[0] for m in forest.tree_metrics)


@pytest.mark.parametrize("forest_cls", [BootstrapAggregation, RandomForest])
def test_forest_classifies_separable_data(forest_cls) -> None:
    samples = make_blobs()
    forest = forest_cls(make_config(ensemble_size=15)).fit(samples)
    predicted = np.array([forest.classify(row[:-1]) for row in samples])
    assert np.mean(predicted == samples[:, -1]) >= 0.9
    assert set(np.unique(predicted).tolist()) <= {0.0, 1.0}


def test_estimate_averages_tree_outputs() -> None:
    samples = make_blobs()
    forest = BootstrapAggregation(make_config()).fit(samples)
    x = samples[3, :-1]
    assert forest.estimate(x) == pytest.approx(np.mean(forest.predictions(x)))
    assert forest.predict(x) == forest.classify(x)


def test_training_is_deterministic_across_thread_counts() -> None:
    samples = make_blobs()
    sequential = RandomForest(make_config(n_jobs=1)).fit(samples)
    threaded = RandomForest(make_config(n_jobs=4)).fit(samples)
    with ThreadPoolExecutor(max_workers=3) as pool:
        injected = RandomForest(make_config(), executor=pool).fit(samples)

    for row in samples:
        expected = sequential.predictions(row)
        np.testing.assert_array_equal(threaded.predictions(row), expected)
        np.testing.assert_array_equal(injected.predictions(row), expected)


def test_custom_supplier_receives_draws_and_generators() -> None:
    samples = make_blobs()
    seen = []

    def supplier(draw: np.ndarray, rng: np.random.Generator) -> ClassificationTree:
        seen.append((draw.shape, isinstance(rng, np.random.Generator)))
        return ClassificationTree(TreeConfig(min_size=0, max_depth=1)).fit(draw)

    forest = BootstrapAggregation(make_config(ensemble_size=4, resample_ratio=0.5)).fit(samples, supplier)
    assert len(forest) == 4
    assert seen == [((50, 3), True)] * 4


def test_invalid_forest_parameters_are_rejected() -> None:
    samples = make_blobs()
    with pytest.raises(InvalidConfiguration):
        ForestConfig(ensemble_size=0)
    with pytest.raises(InvalidConfiguration):
        RandomForest(make_config(features_per_split=3)).fit(samples)
    with pytest.raises(InvalidConfiguration):
        BootstrapAggregation(make_config(resample_ratio=0.01)).fit(samples)


def test_predictions_before_fit_raise() -> None:
    with pytest.raises(RuntimeError):
        RandomForest(make_config()).predictions([0.0, 0.0])
