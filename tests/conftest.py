# tests/conftest.py
from __future__ import annotations

import multiprocessing
from typing import Any, Dict, List

import numpy as np
import pytest
from loguru import logger

from gamtrain.config.trainer_config import TrainerConfig, TrainerParams
from gamtrain.core.feature_vector import FeatureVector


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture(scope="session", autouse=True)
def _set_start_method():
    multiprocessing.set_start_method("spawn", force=True)


@pytest.fixture
def base_config(tmp_path) -> Dict[str, Any]:
    """Smallest valid trainer block."""
    return {
        "iterations": 2,
        "loss": "logistic",
        "num_bins": 4,
        "num_bags": 2,
        "rank_key": "LABEL",
        "rank_threshold": 0.0,
        "learning_rate": 0.1,
        "dropout": 0.0,
        "subsample": 1.0,
        "linfinity_cap": 10.0,
        "smoothing_tolerance": 0.0,
        "linfinity_threshold": 0.0,
        "min_count": 1,
        "model_output": str(tmp_path / "model"),
        "seed": 7,
    }


@pytest.fixture
def make_params(base_config):
    """
    Factory fixture for TrainerParams.

    Usage:
        params = make_params(loss="hinge", dropout=0.5)
    """

    def _make(**overrides) -> TrainerParams:
        return TrainerConfig(**{**base_config, **overrides}).to_params()

    return _make


def make_fv(
    floats: Dict[str, Dict[str, float]] | None = None,
    strings: Dict[str, set] | None = None,
    dense: Dict[str, Dict[str, List[float]]] | None = None,
    label: float | None = None,
) -> FeatureVector:
    fv = FeatureVector(
        float_features={k: dict(v) for k, v in (floats or {}).items()},
        string_features={k: set(v) for k, v in (strings or {}).items()},
        dense_features={k: dict(v) for k, v in (dense or {}).items()},
    )
    if label is not None:
        fv.float_features["LABEL"] = {"": float(label)}
    return fv


@pytest.fixture
def fv_factory():
    return make_fv


@pytest.fixture
def linear_examples() -> List[FeatureVector]:
    """
    Separable toy data: label = +1 iff x > 0.5, plus a string feature
    that only shows up on positives.
    """
    rng = np.random.default_rng(0)
    examples = []
    for x in rng.random(200):
        positive = x > 0.5
        strings = {"tag": {"hot"}} if positive else {}
        examples.append(
            make_fv(
                floats={"loc": {"x": float(x)}},
                strings=strings,
                label=1.0 if positive else -1.0,
            )
        )
    return examples
