# gamtrain/core/functions/function.py
from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence, Union, runtime_checkable

import numpy as np

from gamtrain.utils.errors import FunctionShapeMismatch

FeatureValue = Union[float, Sequence[float], np.ndarray]


class FunctionKind(str, Enum):
    LINEAR = "linear"
    SPLINE = "spline"
    MULTI_DIMENSION_SPLINE = "multi_dimension_spline"


@runtime_checkable
class Function(Protocol):
    """
    Capability set shared by every per-feature function variant.

    Variants are independent dataclasses tagged by ``kind``; nothing
    inherits from this protocol.
    """

    kind: FunctionKind
    weights: np.ndarray

    def evaluate(self, x: FeatureValue) -> float: ...

    def gradient_update(self, grad: float, cap: float, x: FeatureValue) -> None: ...

    def smooth(self, tolerance: float) -> None: ...

    def resample(self, num_bins: int) -> None: ...

    def linfinity_norm(self) -> float: ...

    def set_priors(self, params: Sequence[float]) -> None: ...

    def copy(self) -> "Function": ...


def clip_weights(weights: np.ndarray, cap: float) -> None:
    """L-infinity cap: clip every weight into [-cap, cap] in place."""
    np.clip(weights, -cap, cap, out=weights)


def linfinity_norm(weights: np.ndarray) -> float:
    if weights.size == 0:
        return 0.0
    return float(np.max(np.abs(weights)))


def aggregate(functions: Sequence[Function], scale: float, num_bins: int) -> Function:
    """
    Combine functions of one variant into a single function.

    ``result.weights == scale * sum(f.weights)`` after every input has been
    brought to a common shape (splines are resampled to ``num_bins``).
    """
    if not functions:
        raise ValueError("aggregate() needs at least one function")

    head = functions[0]
    for func in functions[1:]:
        if func.kind != head.kind:
            raise FunctionShapeMismatch(
                f"cannot aggregate {head.kind.value} with {func.kind.value}"
            )

    return _AGGREGATORS[head.kind](functions, scale, num_bins)


def _aggregate_linear(functions, scale: float, num_bins: int):
    from gamtrain.core.functions.linear import Linear

    return Linear.aggregate(functions, scale, num_bins)


def _aggregate_spline(functions, scale: float, num_bins: int):
    from gamtrain.core.functions.spline import Spline

    return Spline.aggregate(functions, scale, num_bins)


def _aggregate_multi_dimension_spline(functions, scale: float, num_bins: int):
    from gamtrain.core.functions.multi_dimension_spline import MultiDimensionSpline

    return MultiDimensionSpline.aggregate(functions, scale, num_bins)


_AGGREGATORS = {
    FunctionKind.LINEAR: _aggregate_linear,
    FunctionKind.SPLINE: _aggregate_spline,
    FunctionKind.MULTI_DIMENSION_SPLINE: _aggregate_multi_dimension_spline,
}
