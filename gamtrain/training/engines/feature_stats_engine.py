# gamtrain/training/engines/feature_stats_engine.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

import pandas as pd

from gamtrain.core.feature_vector import FeatureVector
from gamtrain.core.model import FeatureKey

_COLUMNS = ["family", "name", "value", "categorical"]


@dataclass(frozen=True)
class FeatureStats:
    min: float
    max: float
    count: int
    categorical: bool = False


def feature_frame(examples: Iterable[FeatureVector]) -> pd.DataFrame:
    """
    Long table of flat feature occurrences:
    family | name | value | categorical

    String features appear with value 1.0 and categorical=True.
    """
    rows = []
    for fv in examples:
        for family, values in fv.float_features.items():
            for name, value in values.items():
                rows.append((family, name, float(value), False))
        for family, values in fv.string_features.items():
            for name in values:
                rows.append((family, name, 1.0, True))

    return pd.DataFrame.from_records(rows, columns=_COLUMNS)


def get_feature_statistics(
    min_count: int,
    examples: Iterable[FeatureVector],
) -> Dict[FeatureKey, FeatureStats]:
    """
    Per-(family, name) min / max / count over ``examples``, keeping only
    features seen at least ``min_count`` times.
    """
    frame = feature_frame(examples)
    if frame.empty:
        return {}

    stats = frame.groupby(["family", "name"], sort=True).agg(
        min=("value", "min"),
        max=("value", "max"),
        count=("value", "size"),
        categorical=("categorical", "any"),
    )
    stats = stats[stats["count"] >= min_count]

    return {
        (family, name): FeatureStats(
            min=float(row["min"]),
            max=float(row["max"]),
            count=int(row["count"]),
            categorical=bool(row["categorical"]),
        )
        for (family, name), row in stats.iterrows()
    }
