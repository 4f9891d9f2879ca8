# gamtrain/core/nd_tree.py
from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Dict, List, Tuple

import numpy as np


@dataclass(frozen=True)
class NDTreeBuildOptions:
    max_tree_depth: int
    min_leaf_count: int


@dataclass(eq=False)
class NDTree:
    """
    Balanced partition of a k-dimensional feature space.

    Nodes are stored as flat arrays indexed by node id (root = 0):
    - axis[i]  : split dimension, -1 for leaves
    - split[i] : split value, points with x[axis] < split go left
    - lower/upper[i] : bounding box of node i, shape (n_nodes, k)
    - left/right[i]  : child ids, -1 for leaves

    Leaf boxes tile the root box. Every distinct leaf corner is indexed
    once in ``corners``; ``leaf_corners[row]`` lists the 2**k corner ids of
    a leaf in binary order (bit j set = upper bound on dimension j).
    """

    axis: np.ndarray
    split: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    left: np.ndarray
    right: np.ndarray

    def __post_init__(self):
        self._index_corners()
        self._neighbors = None

    # --------------------------------------------------
    # build
    # --------------------------------------------------
    @classmethod
    def build(cls, points: np.ndarray, options: NDTreeBuildOptions) -> "NDTree":
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points.reshape(-1, 1)
        if points.shape[0] == 0:
            raise ValueError("NDTree.build() needs at least one point")

        axis: List[int] = []
        split: List[float] = []
        lower: List[np.ndarray] = []
        upper: List[np.ndarray] = []
        left: List[int] = []
        right: List[int] = []

        def new_node(lo: np.ndarray, hi: np.ndarray) -> int:
            axis.append(-1)
            split.append(0.0)
            lower.append(lo)
            upper.append(hi)
            left.append(-1)
            right.append(-1)
            return len(axis) - 1

        root = new_node(points.min(axis=0), points.max(axis=0))
        stack: List[Tuple[int, np.ndarray, int]] = [(root, points, 0)]

        while stack:
            node, pts, depth = stack.pop()
            if depth >= options.max_tree_depth or len(pts) < 2 * options.min_leaf_count:
                continue

            widths = upper[node] - lower[node]
            dim = int(np.argmax(widths))
            if widths[dim] <= 0:
                continue

            values = np.sort(pts[:, dim])
            value = float(values[len(values) // 2])
            mask = pts[:, dim] < value
            if not mask.any() or mask.all():
                continue

            left_hi = upper[node].copy()
            left_hi[dim] = value
            right_lo = lower[node].copy()
            right_lo[dim] = value

            left_id = new_node(lower[node].copy(), left_hi)
            right_id = new_node(right_lo, upper[node].copy())

            axis[node] = dim
            split[node] = value
            left[node] = left_id
            right[node] = right_id

            stack.append((right_id, pts[~mask], depth + 1))
            stack.append((left_id, pts[mask], depth + 1))

        return cls(
            axis=np.asarray(axis, dtype=np.int64),
            split=np.asarray(split, dtype=np.float64),
            lower=np.vstack(lower),
            upper=np.vstack(upper),
            left=np.asarray(left, dtype=np.int64),
            right=np.asarray(right, dtype=np.int64),
        )

    # --------------------------------------------------
    # structure
    # --------------------------------------------------
    @property
    def dimension(self) -> int:
        return int(self.lower.shape[1])

    @property
    def leaves(self) -> np.ndarray:
        return np.flatnonzero(self.axis < 0)

    def find_leaf(self, point: np.ndarray) -> int:
        node = 0
        while self.axis[node] >= 0:
            if point[self.axis[node]] < self.split[node]:
                node = self.left[node]
            else:
                node = self.right[node]
        return int(node)

    def _index_corners(self) -> None:
        k = self.dimension
        index: Dict[Tuple[float, ...], int] = {}
        corners: List[Tuple[float, ...]] = []
        leaf_rows: Dict[int, int] = {}
        leaf_corners: List[List[int]] = []

        for row, leaf in enumerate(self.leaves):
            leaf_rows[int(leaf)] = row
            ids = []
            for bits in product((0, 1), repeat=k):
                # bit j of the corner id maps to dimension j
                corner = tuple(
                    float(self.upper[leaf, j] if bits[k - 1 - j] else self.lower[leaf, j])
                    for j in range(k)
                )
                if corner not in index:
                    index[corner] = len(corners)
                    corners.append(corner)
                ids.append(index[corner])
            leaf_corners.append(ids)

        self.corners = np.asarray(corners, dtype=np.float64).reshape(-1, k)
        self.leaf_corners = np.asarray(leaf_corners, dtype=np.int64)
        self.leaf_rows = leaf_rows

    def neighbors(self) -> List[np.ndarray]:
        """Corner ids sharing at least one leaf with each corner (self included)."""
        if self._neighbors is None:
            sets: List[set] = [set() for _ in range(len(self.corners))]
            for ids in self.leaf_corners:
                for i in ids:
                    sets[i].update(int(j) for j in ids)
            self._neighbors = [np.asarray(sorted(s), dtype=np.int64) for s in sets]
        return self._neighbors

    def interpolation(self, point: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Corner ids and multilinear coefficients for ``point`` (clamped to
        the root box). Coefficients are non-negative and sum to 1.
        """
        point = np.clip(point, self.lower[0], self.upper[0])
        leaf = self.find_leaf(point)
        lo, hi = self.lower[leaf], self.upper[leaf]
        width = hi - lo
        t = np.divide(point - lo, width, out=np.zeros_like(point), where=width > 0)

        coeffs = np.ones(1)
        for j in range(self.dimension):
            coeffs = np.concatenate([coeffs * (1.0 - t[j]), coeffs * t[j]])
        return self.leaf_corners[self.leaf_rows[leaf]], coeffs

    def same_structure(self, other: "NDTree") -> bool:
        return (
            self.corners.shape == other.corners.shape
            and np.array_equal(self.axis, other.axis)
            and np.array_equal(self.split, other.split)
            and np.array_equal(self.corners, other.corners)
        )

    def __getstate__(self):
        state = dict(self.__dict__)
        state["_neighbors"] = None
        return state
