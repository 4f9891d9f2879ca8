# gamtrain/training/engines/registry.py
from typing import Callable, Dict, Optional

import numpy as np

from gamtrain.config.trainer_config import TrainerParams
from gamtrain.core.feature_vector import FeatureVector, get_label
from gamtrain.core.model import AdditiveModel
from gamtrain.training.engines.gradient_update_engine import (
    update_hinge,
    update_logistic,
    update_regressor,
)
from gamtrain.utils.errors import ConfigError

UpdateRule = Callable[
    [AdditiveModel, FeatureVector, float, TrainerParams, Optional[np.random.Generator]],
    float,
]

_UPDATE_REGISTRY: Dict[str, UpdateRule] = {
    "logistic": update_logistic,
    "hinge": update_hinge,
    "regression": update_regressor,
}


def resolve_update_rule(loss: str) -> UpdateRule:
    if loss not in _UPDATE_REGISTRY:
        available = ", ".join(_UPDATE_REGISTRY)
        raise ConfigError(
            f"No update rule for loss '{loss}'. Available: {available}"
        )

    return _UPDATE_REGISTRY[loss]


def example_label(fv: FeatureVector, params: TrainerParams) -> float:
    """Raw rank value for regression, +1 / -1 for classification losses."""
    if params.loss == "regression":
        return get_label(fv, params.rank_key)
    return get_label(fv, params.rank_key, params.threshold)


def pointwise_loss(
    fv: FeatureVector,
    model: AdditiveModel,
    params: TrainerParams,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Loss for one observation; updates ``model`` in place."""
    rule = resolve_update_rule(params.loss)
    return rule(model, fv, example_label(fv, params), params, rng)
