# gamtrain/training/engines/bag_engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from gamtrain.config.trainer_config import TrainerParams
from gamtrain.core.feature_vector import FeatureVector
from gamtrain.core.functions import Function
from gamtrain.core.model import AdditiveModel, FeatureKey
from gamtrain.training.engines.broadcast import ModelSnapshot
from gamtrain.training.engines.registry import example_label, resolve_update_rule
from gamtrain.utils.errors import BagFailure
from gamtrain.utils.logger import logs


@dataclass
class BagResult:
    """One bag's contribution to aggregation."""

    index: int
    num_bins: Optional[int]
    num_examples: int
    mean_loss: float
    functions: Dict[FeatureKey, Function] = field(default_factory=dict)


@dataclass
class BagTask:
    """Everything a worker process needs to run one bag (picklable)."""

    index: int
    examples: List[FeatureVector]
    snapshot: ModelSnapshot
    params: TrainerParams
    seed: Optional[int] = None


def multiscale_bins(index: int, multiscale: Sequence[int]) -> Optional[int]:
    if not multiscale:
        return None
    return multiscale[index % len(multiscale)]


def resample_model(model: AdditiveModel, num_bins: int) -> None:
    for _, func in model.iter_functions():
        func.resample(num_bins)


def sgd_partition(
    index: int,
    partition: Iterable[FeatureVector],
    model: AdditiveModel,
    params: TrainerParams,
    rng: Optional[np.random.Generator] = None,
) -> BagResult:
    """
    Run one bag over ``model``, which the caller owns (it is mutated).

    1. multiscale: resample every function to multiscale[index % len]
    2. SGD over the partition in order, logging mean loss every loss_mod
    3. report every (family, name) -> function of the worked model
    """
    new_bins = multiscale_bins(index, params.multiscale)
    if new_bins is not None:
        logs.info(f"[BagEngine] bag={index} resampling to {new_bins} bins")
        resample_model(model, new_bins)

    rule = resolve_update_rule(params.loss)

    loss_sum = 0.0
    loss_total = 0.0
    count = 0
    for fv in partition:
        loss = rule(model, fv, example_label(fv, params), params, rng)
        loss_sum += loss
        loss_total += loss
        count += 1
        if count % params.loss_mod == 0:
            logs.info(
                f"[BagEngine] bag={index} loss={loss_sum / params.loss_mod:.6f} samples={count}"
            )
            loss_sum = 0.0

    return BagResult(
        index=index,
        num_bins=new_bins,
        num_examples=count,
        mean_loss=loss_total / count if count else 0.0,
        functions=dict(model.iter_functions()),
    )


def run_bag(task: BagTask) -> BagResult:
    """
    Worker entry point: private copy of the snapshot, then sgd_partition.
    Any failure is re-raised as BagFailure.
    """
    try:
        model = task.snapshot.private_copy()
        rng = np.random.default_rng(task.seed)
        return sgd_partition(task.index, task.examples, model, task.params, rng)
    except Exception as e:
        logs.exception(f"[BagEngine] bag={task.index} failed")
        raise BagFailure(task.index, f"{type(e).__name__}: {e}") from e
