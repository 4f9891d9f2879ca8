# gamtrain/training/engines/gradient_update_engine.py
"""
Gradient update rules (one observation at a time).

Every rule:
- drops flat / dense features independently with probability ``dropout``
- predicts (score_flat + score_dense) / (1 - dropout), the inverted-dropout
  rescale (https://www.cs.toronto.edu/~rsalakhu/papers/srivastava14a.pdf),
  so inference never rescales
- applies one step through AdditiveModel.update / update_dense, which
  subtract ``step * basis`` and clip weights to [-linfinity_cap, linfinity_cap]
- returns the pointwise loss
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from gamtrain.config.trainer_config import TrainerParams
from gamtrain.core.feature_vector import (
    DenseFeatures,
    FeatureVector,
    FlatFeatures,
    dense_with_dropout,
    flatten_with_dropout,
)
from gamtrain.core.model import AdditiveModel

# logistic margin clamp, keeps exp() finite
MAX_CORRELATION = 10.0


def _dropped_prediction(
    model: AdditiveModel,
    fv: FeatureVector,
    params: TrainerParams,
    rng: Optional[np.random.Generator],
) -> Tuple[float, FlatFeatures, DenseFeatures]:
    flat = flatten_with_dropout(fv, params.dropout, rng)
    dense = dense_with_dropout(fv, params.dropout, rng)
    prediction = (
        model.score_flat_features(flat) + model.score_dense_features(dense)
    ) / (1.0 - params.dropout)
    return prediction, flat, dense


def _apply(
    model: AdditiveModel,
    step: float,
    params: TrainerParams,
    flat: FlatFeatures,
    dense: DenseFeatures,
) -> None:
    model.update(step, params.linfinity_cap, flat)
    model.update_dense(step, params.linfinity_cap, dense)


def update_logistic(
    model: AdditiveModel,
    fv: FeatureVector,
    label: float,
    params: TrainerParams,
    rng: Optional[np.random.Generator] = None,
) -> float:
    prediction, flat, dense = _dropped_prediction(model, fv, params, rng)

    corr = min(MAX_CORRELATION, label * prediction)
    exp_corr = math.exp(corr)
    # log(1 + exp(-corr)), written to stay finite for very negative corr
    loss = max(-corr, 0.0) + math.log1p(math.exp(-abs(corr)))
    grad = -label / (1.0 + exp_corr)

    _apply(model, grad * params.learning_rate, params, flat, dense)
    return loss


def update_hinge(
    model: AdditiveModel,
    fv: FeatureVector,
    label: float,
    params: TrainerParams,
    rng: Optional[np.random.Generator] = None,
) -> float:
    prediction, flat, dense = _dropped_prediction(model, fv, params, rng)

    loss = max(0.0, params.margin - label * prediction)
    if loss > 0.0:
        _apply(model, -label * params.learning_rate, params, flat, dense)
    return loss


def update_regressor(
    model: AdditiveModel,
    fv: FeatureVector,
    label: float,
    params: TrainerParams,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Epsilon-insensitive absolute loss; no step inside the dead zone."""
    prediction, flat, dense = _dropped_prediction(model, fv, params, rng)

    diff = prediction - label
    loss = abs(diff)
    if diff > params.epsilon:
        _apply(model, params.learning_rate, params, flat, dense)
    elif diff < -params.epsilon:
        _apply(model, -params.learning_rate, params, flat, dense)
    return loss
