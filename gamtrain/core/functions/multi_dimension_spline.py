# gamtrain/core/functions/multi_dimension_spline.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Sequence

import numpy as np

from gamtrain.core.functions.function import (
    FeatureValue,
    FunctionKind,
    clip_weights,
    linfinity_norm,
)
from gamtrain.core.nd_tree import NDTree
from gamtrain.utils.errors import FunctionShapeMismatch


@dataclass(eq=False)
class MultiDimensionSpline:
    """
    Spline over the leaves of an NDTree.

    One weight per distinct leaf corner; a point is scored by multilinear
    interpolation of the corners of the leaf that contains it. Resolution
    is fixed by the tree, so ``resample`` does nothing.
    """

    tree: NDTree
    weights: Optional[np.ndarray] = field(default=None)

    kind: ClassVar[FunctionKind] = FunctionKind.MULTI_DIMENSION_SPLINE

    def __post_init__(self):
        n = len(self.tree.corners)
        if self.weights is None:
            self.weights = np.zeros(n)
        else:
            self.weights = np.asarray(self.weights, dtype=np.float64).copy()
        if self.weights.shape != (n,):
            raise ValueError(f"MultiDimensionSpline expects {n} weights, got {self.weights.shape}")

    def _point(self, x: FeatureValue) -> np.ndarray:
        point = np.asarray(x, dtype=np.float64).reshape(-1)
        if point.shape[0] != self.tree.dimension:
            raise ValueError(
                f"expected a {self.tree.dimension}-d point, got {point.shape[0]} values"
            )
        return point

    def evaluate(self, x: FeatureValue) -> float:
        ids, coeffs = self.tree.interpolation(self._point(x))
        return float(np.dot(self.weights[ids], coeffs))

    def gradient_update(self, grad: float, cap: float, x: FeatureValue) -> None:
        ids, coeffs = self.tree.interpolation(self._point(x))
        # unbuffered: degenerate leaves repeat corner ids
        np.subtract.at(self.weights, ids, grad * coeffs)
        clip_weights(self.weights, cap)

    def resample(self, num_bins: int) -> None:
        pass

    def smooth(self, tolerance: float) -> None:
        """Pull each corner towards the mean of its leaf neighbours when the move is within tolerance."""
        if tolerance <= 0:
            return

        means = np.array([self.weights[ids].mean() for ids in self.tree.neighbors()])
        close = np.abs(means - self.weights) <= tolerance
        self.weights = np.where(close, means, self.weights)

    def linfinity_norm(self) -> float:
        return linfinity_norm(self.weights)

    def set_priors(self, params: Sequence[float]) -> None:
        if len(params) != 2:
            raise ValueError(f"MultiDimensionSpline priors need 2 values, got {len(params)}")
        lo, hi = self.tree.lower[0], self.tree.upper[0]
        width = hi - lo
        scaled = np.divide(
            self.tree.corners - lo,
            width,
            out=np.zeros_like(self.tree.corners),
            where=width > 0,
        )
        t = scaled.mean(axis=1)
        self.weights = float(params[0]) + (float(params[1]) - float(params[0])) * t

    def copy(self) -> "MultiDimensionSpline":
        return MultiDimensionSpline(self.tree, self.weights.copy())

    @classmethod
    def aggregate(
        cls, functions: Sequence["MultiDimensionSpline"], scale: float, num_bins: int
    ) -> "MultiDimensionSpline":
        head = functions[0]
        total = np.zeros_like(head.weights)
        for func in functions:
            if func.tree is not head.tree and not func.tree.same_structure(head.tree):
                raise FunctionShapeMismatch("MultiDimensionSpline trees differ across bags")
            total += scale * func.weights
        return cls(head.tree, total)
