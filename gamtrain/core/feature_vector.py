# gamtrain/core/feature_vector.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

import numpy as np

FlatFeatures = Dict[str, Dict[str, float]]
DenseFeatures = Dict[str, Dict[str, np.ndarray]]


@dataclass
class FeatureVector:
    """
    One observation.

    - float_features  : family -> name -> value
    - string_features : family -> set of values (each flattens to value -> 1.0)
    - dense_features  : family -> name -> vector (MultiDimensionSpline inputs)

    The label lives in the float family named by ``rank_key``.
    """

    float_features: Dict[str, Dict[str, float]] = field(default_factory=dict)
    string_features: Dict[str, Set[str]] = field(default_factory=dict)
    dense_features: Dict[str, Dict[str, List[float]]] = field(default_factory=dict)

    def flatten(self) -> FlatFeatures:
        flat: FlatFeatures = {}
        for family, values in self.float_features.items():
            flat.setdefault(family, {}).update(
                {name: float(v) for name, v in values.items()}
            )
        for family, values in self.string_features.items():
            flat.setdefault(family, {}).update({name: 1.0 for name in values})
        return flat

    def dense(self) -> DenseFeatures:
        return {
            family: {name: np.asarray(v, dtype=np.float64) for name, v in values.items()}
            for family, values in self.dense_features.items()
        }


# --------------------------------------------------
# dropout
# --------------------------------------------------
def flatten_with_dropout(
    fv: FeatureVector, dropout: float, rng: Optional[np.random.Generator] = None
) -> FlatFeatures:
    """
    Flat features with each entry dropped independently with probability
    ``dropout``. No random draw happens when dropout is 0.
    """
    flat = fv.flatten()
    if dropout <= 0:
        return flat
    rng = rng or np.random.default_rng()

    kept: FlatFeatures = {}
    for family, values in flat.items():
        survivors = {name: v for name, v in values.items() if rng.random() >= dropout}
        if survivors:
            kept[family] = survivors
    return kept


def dense_with_dropout(
    fv: FeatureVector, dropout: float, rng: Optional[np.random.Generator] = None
) -> DenseFeatures:
    dense = fv.dense()
    if dropout <= 0:
        return dense
    rng = rng or np.random.default_rng()

    kept: DenseFeatures = {}
    for family, values in dense.items():
        survivors = {name: v for name, v in values.items() if rng.random() >= dropout}
        if survivors:
            kept[family] = survivors
    return kept


# --------------------------------------------------
# label
# --------------------------------------------------
def get_label(fv: FeatureVector, rank_key: str, threshold: Optional[float] = None) -> float:
    """
    Raw rank value (regression) or +1 / -1 against ``threshold``
    (classification: +1 iff value > threshold).
    """
    family = fv.float_features.get(rank_key)
    if not family:
        raise KeyError(f"label family '{rank_key}' missing from example")

    value = float(next(iter(family.values())))
    if threshold is None:
        return value
    return 1.0 if value > threshold else -1.0
