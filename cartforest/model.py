"""Model capability and tree structures for cartforest."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

NO_NODE = -1


@runtime_checkable
class Model(Protocol):
    """Anything that maps a vector to a numeric prediction."""

    def predict(self, vector: Sequence[float]) -> float:
        ...


class ModelSupplier(Protocol):
    """Train a model on ``samples`` (label last), drawing randomness from ``rng``."""

    def __call__(self, samples: np.ndarray, rng: np.random.Generator) -> Model:
        ...


@dataclass(slots=True)
class TreeNode:
    """Single node in a classification tree.

    Decision nodes route on ``vector[feature] < threshold`` to ``left`` and
    otherwise to ``right``; leaves carry the predicted label in ``value``.
    """

    feature: int = NO_NODE
    threshold: float = 0.0
    left: int = NO_NODE
    right: int = NO_NODE
    value: float = 0.0
    is_leaf: bool = True
    n_samples: int = 0
    depth: int = 0


@dataclass
class Tree:
    """Binary tree stored as a node arena, root at index 0."""

    nodes: List[TreeNode] = field(default_factory=list)

    def add_node(self, node: TreeNode) -> int:
        """Append ``node`` and return its index."""
        self.nodes.append(node)
        return len(self.nodes) - 1

    def leaf_for(self, vector: np.ndarray) -> TreeNode:
        """Walk from the root to the leaf responsible for ``vector``."""
        node = self.nodes[0]
        while not node.is_leaf:
            if vector[node.feature] < node.threshold:
                node = self.nodes[node.left]
            else:
                node = self.nodes[node.right]
        return node

    @property
    def leaves(self) -> List[TreeNode]:
        return [node for node in self.nodes if node.is_leaf]

    @property
    def depth(self) -> int:
        """Depth of the deepest decision level (0 for a single leaf)."""
        return max((node.depth for node in self.nodes), default=0)


class TreeBuilder:
    def __init__(self) -> None:
        self.nodes: List[TreeNode] = [TreeNode()]

    def set_leaf(self, node_id: int, value: float, n_samples: int) -> None:
        n = self.nodes[node_id]
        n.value = float(value); n.is_leaf = True; n.n_samples = int(n_samples)
        n.feature = NO_NODE; n.threshold = 0.0; n.left = NO_NODE; n.right = NO_NODE

    def split(self, node_id: int, feature: int, threshold: float, n_samples: int) -> Tuple[int, int]:
        n = self.nodes[node_id]
        n.feature = int(feature); n.threshold = float(threshold); n.is_leaf = False
        n.n_samples = int(n_samples)
        l = len(self.nodes); r = l + 1
        n.left = l; n.right = r
        self.nodes.append(TreeNode(depth=n.depth + 1)); self.nodes.append(TreeNode(depth=n.depth + 1))
        return l, r

    def build(self) -> Tree:
        return Tree(nodes=self.nodes)


__all__ = ["Model", "ModelSupplier", "NO_NODE", "Tree", "TreeBuilder", "TreeNode"]
