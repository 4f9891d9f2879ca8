"""
Per-feature scalar functions of the additive model.

Three independent variants share one capability set (see ``Function``):

- Linear               : string features and linear families
- Spline               : piecewise-linear spline over uniform bins
- MultiDimensionSpline : spline over the leaves of an NDTree

``aggregate`` dispatches on the variant tag.
"""

from .function import Function, FunctionKind, aggregate
from .linear import Linear
from .spline import Spline
from .multi_dimension_spline import MultiDimensionSpline

__all__ = [
    "Function",
    "FunctionKind",
    "aggregate",
    "Linear",
    "Spline",
    "MultiDimensionSpline",
]
