# gamtrain/core/functions/spline.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Sequence, Tuple

import numpy as np
from scipy.fft import dct, idct

from gamtrain.core.functions.function import (
    FeatureValue,
    FunctionKind,
    clip_weights,
    linfinity_norm,
)
from gamtrain.utils.errors import FunctionShapeMismatch


@dataclass(eq=False)
class Spline:
    """
    Piecewise-linear spline with ``num_bins`` evenly spaced knots on
    [min_val, max_val].

    Inputs outside the range are clamped to the nearest knot. A fresh
    spline is f(x) = 0 everywhere.
    """

    min_val: float
    max_val: float
    num_bins: int
    weights: Optional[np.ndarray] = field(default=None)

    kind: ClassVar[FunctionKind] = FunctionKind.SPLINE

    def __post_init__(self):
        if self.num_bins < 2:
            raise ValueError(f"Spline needs at least 2 bins, got {self.num_bins}")
        if self.weights is None:
            self.weights = np.zeros(self.num_bins)
        else:
            self.weights = np.asarray(self.weights, dtype=np.float64).copy()
        if self.weights.shape != (self.num_bins,):
            raise ValueError(
                f"Spline expects {self.num_bins} weights, got {self.weights.shape}"
            )

    # --------------------------------------------------
    # knots
    # --------------------------------------------------
    def knots(self) -> np.ndarray:
        return np.linspace(self.min_val, self.max_val, self.num_bins)

    def _locate(self, x: FeatureValue) -> Tuple[int, float]:
        """Index of the lower knot and the fractional offset towards the next."""
        x = float(np.asarray(x, dtype=np.float64).reshape(-1)[0])
        if self.max_val <= self.min_val:
            return 0, 0.0

        x = min(max(x, self.min_val), self.max_val)
        pos = (x - self.min_val) / (self.max_val - self.min_val) * (self.num_bins - 1)
        low = min(int(math.floor(pos)), self.num_bins - 2)
        return low, pos - low

    # --------------------------------------------------
    # Function capability set
    # --------------------------------------------------
    def evaluate(self, x: FeatureValue) -> float:
        low, t = self._locate(x)
        return float(self.weights[low] * (1.0 - t) + self.weights[low + 1] * t)

    def gradient_update(self, grad: float, cap: float, x: FeatureValue) -> None:
        low, t = self._locate(x)
        self.weights[low] -= grad * (1.0 - t)
        self.weights[low + 1] -= grad * t
        clip_weights(self.weights, cap)

    def resample(self, num_bins: int) -> None:
        if num_bins == self.num_bins:
            return
        if num_bins < 2:
            raise ValueError(f"Spline needs at least 2 bins, got {num_bins}")

        if self.max_val <= self.min_val:
            new_weights = np.full(num_bins, self.weights[0])
        else:
            new_knots = np.linspace(self.min_val, self.max_val, num_bins)
            new_weights = np.interp(new_knots, self.knots(), self.weights)

        self.num_bins = num_bins
        self.weights = new_weights

    def smooth(self, tolerance: float) -> None:
        """
        DCT low-pass: keep the fewest low-frequency coefficients whose
        reconstruction stays within ``tolerance`` (max abs) of the weights.
        """
        if tolerance <= 0:
            return

        coeffs = dct(self.weights, type=2, norm="ortho")
        for keep in range(1, self.num_bins):
            truncated = coeffs.copy()
            truncated[keep:] = 0.0
            candidate = idct(truncated, type=2, norm="ortho")
            if np.max(np.abs(candidate - self.weights)) <= tolerance:
                self.weights = candidate
                return

    def linfinity_norm(self) -> float:
        return linfinity_norm(self.weights)

    def set_priors(self, params: Sequence[float]) -> None:
        if len(params) != 2:
            raise ValueError(f"Spline priors need 2 values, got {len(params)}")
        self.weights = np.linspace(float(params[0]), float(params[1]), self.num_bins)

    def copy(self) -> "Spline":
        return Spline(self.min_val, self.max_val, self.num_bins, self.weights.copy())

    @classmethod
    def aggregate(cls, functions: Sequence["Spline"], scale: float, num_bins: int) -> "Spline":
        head = functions[0]
        total = np.zeros(num_bins)
        for func in functions:
            if (func.min_val, func.max_val) != (head.min_val, head.max_val):
                raise FunctionShapeMismatch(
                    f"Spline range mismatch: "
                    f"[{head.min_val}, {head.max_val}] vs [{func.min_val}, {func.max_val}]"
                )
            if func.num_bins != num_bins:
                func = func.copy()
                func.resample(num_bins)
            total += scale * func.weights
        return cls(head.min_val, head.max_val, num_bins, total)
