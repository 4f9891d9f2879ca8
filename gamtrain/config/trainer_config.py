# gamtrain/config/trainer_config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, List, Literal, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gamtrain.core.nd_tree import NDTreeBuildOptions
from gamtrain.utils.errors import ConfigError

LossKind = Literal["logistic", "hinge", "regression"]


class DynamicBucketsConfig(BaseModel):
    max_tree_depth: int = Field(gt=0)
    min_leaf_count: int = Field(gt=0)


class TrainerConfig(BaseModel):
    """
    TrainerConfig (one keyed block of the training YAML)

    Required keys fail fast at load time; optional keys carry defaults.
    The presence of ``dynamic_buckets`` switches model initialisation to
    ND-tree bucketing.
    """

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    # loop
    iterations: int = Field(gt=0)
    loss: LossKind

    # bagging / sampling
    num_bins: int = Field(ge=2)
    num_bags: int = Field(gt=0)
    subsample: float = Field(gt=0.0, le=1.0)

    # label
    rank_key: str
    rank_threshold: float

    # sgd
    learning_rate: float
    dropout: float = Field(ge=0.0, lt=1.0)
    linfinity_cap: float = Field(gt=0.0)
    margin: float = 1.0
    epsilon: float = 0.0
    loss_mod: int = Field(default=100, gt=0)

    # post-processing
    smoothing_tolerance: float
    linfinity_threshold: float
    multiscale: List[int] = Field(default_factory=list)

    # initialisation
    min_count: int = Field(ge=0)
    linear_feature: List[str] = Field(default_factory=list)
    prior: List[str] = Field(default_factory=list)
    init_model: Optional[str] = None
    dynamic_buckets: Optional[DynamicBucketsConfig] = None

    # output
    model_output: str

    # execution
    seed: Optional[int] = None
    max_workers: int = Field(default=1, gt=0)

    @field_validator("multiscale")
    @classmethod
    def _check_multiscale(cls, value: List[int]) -> List[int]:
        bad = [v for v in value if v < 2]
        if bad:
            raise ValueError(f"multiscale bin counts must be >= 2, got {bad}")
        return value

    @field_validator("init_model")
    @classmethod
    def _blank_init_model(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def to_params(self) -> "TrainerParams":
        options = None
        if self.dynamic_buckets is not None:
            options = NDTreeBuildOptions(
                max_tree_depth=self.dynamic_buckets.max_tree_depth,
                min_leaf_count=self.dynamic_buckets.min_leaf_count,
            )

        return TrainerParams(
            num_bins=self.num_bins,
            num_bags=self.num_bags,
            rank_key=self.rank_key,
            loss=self.loss,
            min_count=self.min_count,
            learning_rate=self.learning_rate,
            dropout=self.dropout,
            subsample=self.subsample,
            margin=self.margin,
            multiscale=tuple(self.multiscale),
            smoothing_tolerance=self.smoothing_tolerance,
            linfinity_threshold=self.linfinity_threshold,
            linfinity_cap=self.linfinity_cap,
            threshold=self.rank_threshold,
            loss_mod=self.loss_mod,
            epsilon=self.epsilon,
            init_model_path=self.init_model,
            linear_feature_families=frozenset(self.linear_feature),
            priors=tuple(self.prior),
            nd_tree_options=options,
            seed=self.seed,
            max_workers=self.max_workers,
        )


@dataclass(frozen=True)
class TrainerParams:
    """
    TrainerParams (FROZEN)

    Immutable snapshot of the trainer config shipped to every bag worker.
    """

    num_bins: int
    num_bags: int
    rank_key: str
    loss: str
    min_count: int
    learning_rate: float
    dropout: float
    subsample: float
    margin: float
    multiscale: Tuple[int, ...]
    smoothing_tolerance: float
    linfinity_threshold: float
    linfinity_cap: float
    threshold: float
    loss_mod: int
    epsilon: float
    init_model_path: Optional[str]
    linear_feature_families: frozenset
    priors: Tuple[str, ...]
    nd_tree_options: Optional[NDTreeBuildOptions]
    seed: Optional[int] = None
    max_workers: int = 1


# --------------------------------------------------
# loading
# --------------------------------------------------
def _select(raw: Mapping[str, Any], key: Optional[str]) -> Mapping[str, Any]:
    if not key:
        return raw

    node: Any = raw
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            raise ConfigError(f"config key '{key}' not found")
        node = node[part]

    if not isinstance(node, Mapping):
        raise ConfigError(f"config key '{key}' is not a mapping")
    return node


def load_trainer_config(
    source: Union[str, os.PathLike, Mapping[str, Any]],
    key: Optional[str] = None,
) -> TrainerConfig:
    """
    Load and validate the ``key`` block of a YAML file (or an already
    parsed mapping). Validation problems surface as ConfigError.
    """
    if isinstance(source, Mapping):
        raw = source
    else:
        if not os.path.exists(source):
            raise ConfigError(f"Config file not found: {source}")
        with open(source, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    block = _select(raw, key)

    try:
        return TrainerConfig(**block)
    except ValidationError as e:
        raise ConfigError(f"invalid trainer config '{key or '<root>'}': {e}") from e
