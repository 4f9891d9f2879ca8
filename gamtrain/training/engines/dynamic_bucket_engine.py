# gamtrain/training/engines/dynamic_bucket_engine.py
from __future__ import annotations

from collections import defaultdict
from typing import AbstractSet, Dict, List, Sequence, Union

import numpy as np

from gamtrain.core.feature_vector import FeatureVector
from gamtrain.core.model import FeatureKey
from gamtrain.core.nd_tree import NDTree, NDTreeBuildOptions
from gamtrain.training.engines.dataset_engine import ExampleDataset
from gamtrain.training.engines.feature_stats_engine import FeatureStats
from gamtrain.utils.logger import logs

BucketResult = Union[FeatureStats, NDTree]


def get_features(
    examples: Sequence[FeatureVector],
    min_count: int,
    subsample: float,
    linear_families: AbstractSet[str],
    options: NDTreeBuildOptions,
    rng: np.random.Generator,
    rank_key: str = "",
) -> Dict[FeatureKey, BucketResult]:
    """
    Dynamic bucketing over a sample of ``examples``.

    - features seen fewer than ``min_count`` times, and the label family,
      are dropped
    - string features and linear families -> FeatureStats (min / max)
    - other float features -> 1-d NDTree, dense features -> k-d NDTree
    """
    sample = ExampleDataset(examples).sample(subsample, rng)

    points: Dict[FeatureKey, List[np.ndarray]] = defaultdict(list)
    categorical: Dict[FeatureKey, int] = defaultdict(int)

    for fv in sample:
        for family, values in fv.float_features.items():
            if family == rank_key:
                continue
            for name, value in values.items():
                points[(family, name)].append(np.array([float(value)]))
        for family, values in fv.dense_features.items():
            if family == rank_key:
                continue
            for name, vector in values.items():
                points[(family, name)].append(np.asarray(vector, dtype=np.float64))
        for family, values in fv.string_features.items():
            if family == rank_key:
                continue
            for name in values:
                categorical[(family, name)] += 1

    result: Dict[FeatureKey, BucketResult] = {}

    for key, count in categorical.items():
        if count >= min_count:
            result[key] = FeatureStats(min=1.0, max=1.0, count=count, categorical=True)

    for key, vectors in points.items():
        if len(vectors) < min_count:
            continue

        family, name = key
        if key in result:
            logs.warning(f"[DynamicBucket] {family}:{name} is both string and numeric, keeping string")
            continue

        dims = {v.shape[0] for v in vectors}
        if len(dims) != 1:
            raise ValueError(f"dense feature {family}:{name} has inconsistent lengths {sorted(dims)}")

        data = np.vstack(vectors)
        if family in linear_families and data.shape[1] == 1:
            result[key] = FeatureStats(
                min=float(data.min()), max=float(data.max()), count=len(vectors)
            )
        else:
            result[key] = NDTree.build(data, options)

    logs.info(f"[DynamicBucket] features={len(result)} sampled={len(sample)}")
    return result
