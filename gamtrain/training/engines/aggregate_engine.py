# gamtrain/training/engines/aggregate_engine.py
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from gamtrain.config.trainer_config import TrainerParams
from gamtrain.core.functions import Function, aggregate
from gamtrain.core.model import AdditiveModel, FeatureKey
from gamtrain.pipeline.parallel.executor import ParallelExecutor
from gamtrain.pipeline.parallel.types import ParallelKind
from gamtrain.training.engines.bag_engine import BagResult
from gamtrain.utils.logger import logs


@dataclass(frozen=True)
class AggregateSummary:
    installed: int
    dropped: int


@dataclass(frozen=True)
class _FeatureReduce:
    key: FeatureKey
    functions: List[Function]
    scale: float
    num_bins: int
    smoothing_tolerance: float


def aggregate_func_weights(
    functions: Sequence[Function],
    scale: float,
    num_bins: int,
    smoothing_tolerance: float,
) -> Function:
    """Weighted merge of one feature's bag functions, then smoothing."""
    output = aggregate(functions, scale, num_bins)
    output.smooth(smoothing_tolerance)
    return output


def _reduce_feature(task: _FeatureReduce) -> Tuple[FeatureKey, Function]:
    return task.key, aggregate_func_weights(
        task.functions, task.scale, task.num_bins, task.smoothing_tolerance
    )


def group_by_feature(results: Sequence[BagResult]) -> Dict[FeatureKey, List[Function]]:
    grouped: Dict[FeatureKey, List[Function]] = defaultdict(list)
    for result in sorted(results, key=lambda r: r.index):
        for key, func in result.functions.items():
            grouped[key].append(func)
    return grouped


def aggregate_bags(
    results: Sequence[BagResult],
    model: AdditiveModel,
    params: TrainerParams,
    max_workers: Optional[int] = 1,
) -> AggregateSummary:
    """
    Merge every bag's functions and install them into ``model``.

    - scale is always 1 / num_bags
    - only keys already present in ``model`` are replaced; keys a bag
      introduced on its own are dropped
    - incompatible variants / shapes raise FunctionShapeMismatch
    """
    scale = 1.0 / params.num_bags
    grouped = group_by_feature(results)

    tasks = []
    dropped = 0
    for key, functions in grouped.items():
        if not model.contains(*key):
            dropped += 1
            continue
        tasks.append(
            _FeatureReduce(
                key=key,
                functions=functions,
                scale=scale,
                num_bins=params.num_bins,
                smoothing_tolerance=params.smoothing_tolerance,
            )
        )

    merged = ParallelExecutor.run(
        kind=ParallelKind.FEATURE,
        items=tasks,
        handler=_reduce_feature,
        max_workers=max_workers,
    )

    for (family, name), func in merged:
        model.replace_function(family, name, func)

    if dropped:
        logs.warning(f"[AggregateEngine] dropped {dropped} keys absent from the model")
    logs.info(f"[AggregateEngine] installed={len(merged)} bags={len(results)}")
    return AggregateSummary(installed=len(merged), dropped=dropped)
