from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from cartforest import ClassificationTree, TreeConfig
from cartforest.core import FullScanOptimizer, majority_label
from cartforest.errors import InvalidInput
from cartforest.model import NO_NODE


def make_and_samples() -> np.ndarray:
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 1.0],
        ]
    )


def make_blobs(n_per_class: int = 50, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    negative = np.column_stack(
        [rng.uniform(-4.0, -1.0, n_per_class), rng.normal(size=n_per_class), np.zeros(n_per_class)]
    )
    positive = np.column_stack(
        [rng.uniform(1.0, 4.0, n_per_class), rng.normal(size=n_per_class), np.ones(n_per_class)]
    )
    return rng.permutation(np.vstack([negative, positive]))


def test_tree_learns_logical_and() -> None:
    samples = make_and_samples()
    tree = ClassificationTree(TreeConfig(min_size=0, max_depth=3)).fit(samples)

    for row in samples:
        assert tree.predict(row[:-1]) == row[-1]
        # a full sample is accepted, its label is not read
        assert tree.predict(row) == row[-1]

    nodes = tree.tree.nodes
    root = nodes[0]
    assert (root.feature, root.threshold) == (0, 1.0)
    assert nodes[root.left].is_leaf and nodes[root.left].value == 0.0
    right = nodes[root.right]
    assert (right.feature, right.threshold) == (1, 1.0)
    assert tree.stats.nodes == 5
    assert tree.stats.leaves == 3
    assert tree.stats.depth == 2


def test_single_class_data_gives_single_leaf() -> None:
    samples = np.array([[0.0, 2.0, 7.0], [1.0, 3.0, 7.0], [5.0, 1.0, 7.0]])
    tree = ClassificationTree(TreeConfig(min_size=0)).fit(samples)
    assert tree.stats.nodes == 1
    assert tree.tree.nodes[0].is_leaf
    assert tree.predict([9.0, 9.0]) == 7.0


def test_degenerate_root_becomes_leaf_with_first_seen_majority() -> None:
    ones_first = np.array([[0.0, 1.0], [0.0, 0.0], [1.0, 0.0], [1.0, 1.0]])
    zeros_first = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0]])

    tree = ClassificationTree(TreeConfig(min_size=0)).fit(ones_first)
    assert tree.stats.nodes == 1
    assert tree.stats.degenerate_nodes == 1
    assert tree.predict([0.0]) == 1.0

    tree = ClassificationTree(TreeConfig(min_size=0)).fit(zeros_first)
    assert tree.predict([0.0]) == 0.0


def test_min_size_stops_small_children() -> None:
    samples = np.array([[1.0, 0.0], [2.0, 1.0], [3.0, 0.0], [4.0, 1.0]])
    stump = ClassificationTree(TreeConfig(min_size=4)).fit(samples)
    assert stump.stats.nodes == 3
    assert stump.stats.depth == 1
    assert stump.predict([1.5]) == 0.0
    assert stump.predict([3.0]) == 1.0

    deep = ClassificationTree(TreeConfig(min_size=0)).fit(samples)
    np.testing.assert_array_equal(deep.predict_many(samples[:, :-1]), samples[:, -1])


def test_max_depth_bounds_tree_depth() -> None:
    samples = make_blobs()
    rng = np.random.default_rng(1)
    samples[:, -1] = rng.integers(0, 2, size=samples.shape[0])
    for max_depth in (1, 2, 4):
        tree = ClassificationTree(TreeConfig(min_size=0, max_depth=max_depth)).fit(samples)
        assert tree.stats.depth <= max_depth


def test_separable_blobs_are_fitted_exactly() -> None:
    samples = make_blobs()
    tree = ClassificationTree(TreeConfig(min_size=0)).fit(samples)
    np.testing.assert_array_equal(tree.predict_many(samples[:, :-1]), samples[:, -1])


def test_every_leaf_predicts_majority_of_its_training_samples() -> None:
    rng = np.random.default_rng(7)
    samples = np.column_stack(
        [rng.integers(0, 4, size=(120, 3)).astype(np.float64), rng.integers(0, 3, size=120)]
    )
    tree = ClassificationTree(TreeConfig(min_size=5, max_depth=4)).fit(samples)
    nodes = tree.tree.nodes

    routed: dict[int, list[float]] = {}
    for row in samples:
        leaf = tree.tree.leaf_for(row)
        index = next(i for i, node in enumerate(nodes) if node is leaf)
        routed.setdefault(index, []).append(row[-1])

    for index, labels in routed.items():
        assert nodes[index].value == majority_label(np.array(labels))
        assert nodes[index].n_samples == len(labels)


def test_leaves_have_no_children() -> None:
    tree = ClassificationTree(TreeConfig(min_size=0)).fit(make_blobs())
    for node in tree.tree.nodes:
        if node.is_leaf:
            assert node.left == NO_NODE and node.right == NO_NODE
        else:
            assert node.left != NO_NODE and node.right != NO_NODE


def test_invalid_inputs_are_rejected() -> None:
    tree = ClassificationTree()
    with pytest.raises(InvalidInput):
        tree.fit(None)
    with pytest.raises(InvalidInput):
        tree.fit([])
    with pytest.raises(InvalidInput):
        tree.fit([[0.0, 1.0], [1.0]])

    tree.fit(make_and_samples())
    with pytest.raises(InvalidInput):
        tree.predict(None)
    with pytest.raises(InvalidInput):
        tree.predict([])
    with pytest.raises(InvalidInput):
        tree.predict([1.0])


def test_predict_before_fit_raises() -> None:
    with pytest.raises(RuntimeError):
        ClassificationTree().predict([0.0, 1.0])


def test_optimizer_must_match_feature_count() -> None:
    tree = ClassificationTree(optimizer=FullScanOptimizer(3))
    with pytest.raises(InvalidInput):
        tree.fit(make_and_samples())


def test_split_counts_are_per_tree_with_shared_optimizer() -> None:
    samples = make_and_samples()
    config = TreeConfig(min_size=0, max_depth=3)
    # root scores 2 + 2 thresholds, the right child 1 + 2
    assert ClassificationTree(config).fit(samples).stats.splits_evaluated == 7

    shared = FullScanOptimizer(2)
    with ThreadPoolExecutor(max_workers=4) as pool:
        trees = list(pool.map(lambda _: ClassificationTree(config, shared).fit(samples), range(16)))
    assert [tree.stats.splits_evaluated for tree in trees] == [7] * 16
