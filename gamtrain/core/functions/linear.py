# gamtrain/core/functions/linear.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Sequence

import numpy as np

from gamtrain.core.functions.function import (
    FeatureValue,
    FunctionKind,
    clip_weights,
    linfinity_norm,
)
from gamtrain.utils.errors import FunctionShapeMismatch


@dataclass(eq=False)
class Linear:
    """
    f(x) = bias + slope * u(x), u(x) = (x - min) / (max - min).

    Used for string features and for families forced to linear. A
    degenerate range (max <= min) gives u(x) = 1, so bias and slope move
    together.
    """

    min_val: float
    max_val: float
    weights: np.ndarray = field(default_factory=lambda: np.zeros(2))

    kind: ClassVar[FunctionKind] = FunctionKind.LINEAR

    def __post_init__(self):
        self.weights = np.asarray(self.weights, dtype=np.float64).copy()
        if self.weights.shape != (2,):
            raise ValueError(f"Linear expects 2 weights, got {self.weights.shape}")

    def _basis(self, x: FeatureValue) -> float:
        x = float(np.asarray(x, dtype=np.float64).reshape(-1)[0])
        if self.max_val > self.min_val:
            return (x - self.min_val) / (self.max_val - self.min_val)
        return 1.0

    def evaluate(self, x: FeatureValue) -> float:
        return float(self.weights[0] + self.weights[1] * self._basis(x))

    def gradient_update(self, grad: float, cap: float, x: FeatureValue) -> None:
        u = self._basis(x)
        self.weights[0] -= grad
        self.weights[1] -= grad * u
        clip_weights(self.weights, cap)

    def smooth(self, tolerance: float) -> None:
        pass

    def resample(self, num_bins: int) -> None:
        pass

    def linfinity_norm(self) -> float:
        return linfinity_norm(self.weights)

    def set_priors(self, params: Sequence[float]) -> None:
        if len(params) != 2:
            raise ValueError(f"Linear priors need 2 values, got {len(params)}")
        self.weights[:] = [float(params[0]), float(params[1])]

    def copy(self) -> "Linear":
        return Linear(self.min_val, self.max_val, self.weights.copy())

    @classmethod
    def aggregate(cls, functions: Sequence["Linear"], scale: float, num_bins: int) -> "Linear":
        head = functions[0]
        total = np.zeros(2)
        for func in functions:
            if (func.min_val, func.max_val) != (head.min_val, head.max_val):
                raise FunctionShapeMismatch(
                    f"Linear range mismatch: "
                    f"[{head.min_val}, {head.max_val}] vs [{func.min_val}, {func.max_val}]"
                )
            total += scale * func.weights
        return cls(head.min_val, head.max_val, total)
