# gamtrain/core/model.py
from __future__ import annotations

import copy
from typing import Dict, Iterator, Optional, Tuple

from gamtrain.core.feature_vector import DenseFeatures, FeatureVector, FlatFeatures
from gamtrain.core.functions import Function

FeatureKey = Tuple[str, str]


class AdditiveModel:
    """
    AdditiveModel

    Semantics:
    - weights: family -> name -> Function
    - score(x) = sum of every present function evaluated on its feature
    - a family map exists only while it holds at least one function
    """

    def __init__(self, weights: Optional[Dict[str, Dict[str, Function]]] = None):
        self.weights: Dict[str, Dict[str, Function]] = weights if weights is not None else {}

    # --------------------------------------------------
    # structure
    # --------------------------------------------------
    def add_function(self, family: str, name: str, func: Function, overwrite: bool) -> bool:
        """Install ``func``; with overwrite=False an existing entry wins."""
        family_map = self.weights.setdefault(family, {})
        if not overwrite and name in family_map:
            return False
        family_map[name] = func
        return True

    def get_function(self, family: str, name: str) -> Optional[Function]:
        return self.weights.get(family, {}).get(name)

    def contains(self, family: str, name: str) -> bool:
        return name in self.weights.get(family, {})

    def replace_function(self, family: str, name: str, func: Function) -> bool:
        """Swap an existing entry; unknown keys are left out."""
        if not self.contains(family, name):
            return False
        self.weights[family][name] = func
        return True

    def remove_function(self, family: str, name: str) -> bool:
        family_map = self.weights.get(family)
        if family_map is None or name not in family_map:
            return False
        del family_map[name]
        if not family_map:
            del self.weights[family]
        return True

    def iter_functions(self) -> Iterator[Tuple[FeatureKey, Function]]:
        for family, family_map in self.weights.items():
            for name, func in family_map.items():
                yield (family, name), func

    @property
    def num_functions(self) -> int:
        return sum(len(family_map) for family_map in self.weights.values())

    def copy(self) -> "AdditiveModel":
        return copy.deepcopy(self)

    # --------------------------------------------------
    # scoring
    # --------------------------------------------------
    def score_flat_features(self, flat: FlatFeatures) -> float:
        total = 0.0
        for family, values in flat.items():
            family_map = self.weights.get(family)
            if family_map is None:
                continue
            for name, value in values.items():
                func = family_map.get(name)
                if func is not None:
                    total += func.evaluate(value)
        return total

    def score_dense_features(self, dense: DenseFeatures) -> float:
        return self.score_flat_features(dense)

    def score(self, fv: FeatureVector) -> float:
        return self.score_flat_features(fv.flatten()) + self.score_dense_features(fv.dense())

    # --------------------------------------------------
    # SGD
    # --------------------------------------------------
    def update(self, grad: float, cap: float, flat: FlatFeatures) -> None:
        for family, values in flat.items():
            family_map = self.weights.get(family)
            if family_map is None:
                continue
            for name, value in values.items():
                func = family_map.get(name)
                if func is not None:
                    func.gradient_update(grad, cap, value)

    def update_dense(self, grad: float, cap: float, dense: DenseFeatures) -> None:
        self.update(grad, cap, dense)

    def __repr__(self) -> str:
        return f"AdditiveModel(families={len(self.weights)}, functions={self.num_functions})"
