# gamtrain/training/engines/model_init_engine.py
from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from gamtrain.config.trainer_config import TrainerParams
from gamtrain.core.feature_vector import FeatureVector
from gamtrain.core.functions import Linear, MultiDimensionSpline, Spline
from gamtrain.core.model import AdditiveModel
from gamtrain.io.model_artifact import load_model
from gamtrain.training.engines.dataset_engine import ExampleDataset
from gamtrain.training.engines.dynamic_bucket_engine import get_features
from gamtrain.training.engines.feature_stats_engine import FeatureStats, get_feature_statistics
from gamtrain.training.engines.prune_engine import set_prior
from gamtrain.utils.errors import ModelInitError
from gamtrain.utils.logger import logs


def init_with_dynamic_buckets(
    params: TrainerParams,
    examples: Sequence[FeatureVector],
    model: AdditiveModel,
    overwrite: bool,
    rng: np.random.Generator,
) -> int:
    result = get_features(
        examples,
        params.min_count,
        params.subsample,
        params.linear_feature_families,
        params.nd_tree_options,
        rng,
        rank_key=params.rank_key,
    )

    added = 0
    for (family, name), feature in sorted(result.items()):
        if isinstance(feature, FeatureStats):
            func = Linear(feature.min, feature.max)
        else:
            func = MultiDimensionSpline(feature)
        added += model.add_function(family, name, func, overwrite)
    return added


def init_with_uniform_buckets(
    params: TrainerParams,
    examples: Sequence[FeatureVector],
    model: AdditiveModel,
    overwrite: bool,
    rng: np.random.Generator,
) -> int:
    """
    Linear for linear families, Splines for everything else (string
    features flatten to 1.0); every new function starts as f(x) = 0.
    """
    sample = ExampleDataset(examples).sample(params.subsample, rng)

    if any(fv.dense_features for fv in sample):
        logs.warning("[ModelInit] dense features need dynamic_buckets, skipping them")

    stats = {
        key: s
        for key, s in get_feature_statistics(params.min_count, sample).items()
        if key[0] != params.rank_key
    }
    logs.info(f"[ModelInit] Num features = {len(stats)}")

    added = 0
    for (family, name), s in stats.items():
        if family in params.linear_feature_families:
            func = Linear(s.min, s.max)
        else:
            func = Spline(s.min, s.max, params.num_bins)
        added += model.add_function(family, name, func, overwrite)
    return added


def init_model(
    params: TrainerParams,
    examples: Sequence[FeatureVector],
    model: AdditiveModel,
    overwrite: bool,
    rng: np.random.Generator,
) -> AdditiveModel:
    if params.nd_tree_options is not None:
        added = init_with_dynamic_buckets(params, examples, model, overwrite, rng)
    else:
        added = init_with_uniform_buckets(params, examples, model, overwrite, rng)

    logs.info(
        f"[ModelInit] mode={'dynamic' if params.nd_tree_options else 'uniform'} "
        f"added={added} total={model.num_functions} overwrite={overwrite}"
    )
    return model


def model_initialization(
    params: TrainerParams,
    examples: Sequence[FeatureVector],
    rng: np.random.Generator,
    warnings: Optional[List[str]] = None,
) -> AdditiveModel:
    """
    Fresh model + priors, or the init_model extended with features it
    does not cover yet (existing functions are kept).

    Prior problems are logged and, when `warnings` is given, appended to it.
    """
    if params.init_model_path is None:
        model = init_model(params, examples, AdditiveModel(), True, rng)
        report = set_prior(params.priors, model)
        logs.info(f"[ModelInit] priors applied={len(report.applied)}")
        for warning in report.warnings:
            logs.warning(f"[ModelInit] prior {warning}")
            if warnings is not None:
                warnings.append(f"prior {warning}")
    else:
        model = init_model(params, examples, load_model(params.init_model_path), False, rng)

    if model.num_functions == 0:
        raise ModelInitError(
            "[ModelInit] no feature passed min_count; nothing to train"
        )
    return model
