# gamtrain/training/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from gamtrain.config.trainer_config import TrainerParams
from gamtrain.core.feature_vector import FeatureVector
from gamtrain.core.model import AdditiveModel, FeatureKey


@dataclass
class TrainingContext:
    """
    TrainingContext

    Semantics:
    - One context == one training run
    - ``model`` is the authoritative model; only steps running between
      iterations replace or mutate it
    - per-iteration fields are overwritten every round
    """

    # -------------------------
    # Identity
    # -------------------------
    run_id: str

    # -------------------------
    # Static bindings
    # -------------------------
    params: TrainerParams
    examples: Sequence[FeatureVector]
    model_dir: Path
    iterations: int
    rng: np.random.Generator

    # -------------------------
    # Rolling state
    # -------------------------
    iteration: int = 0
    model: Optional[AdditiveModel] = None
    bags: List[List[FeatureVector]] = field(default_factory=list)
    bag_losses: Dict[int, float] = field(default_factory=dict)
    pruned: List[FeatureKey] = field(default_factory=list)

    inst: Any = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
