# gamtrain/io/model_artifact.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import joblib

from gamtrain.core.model import AdditiveModel
from gamtrain.utils.errors import ModelInitError
from gamtrain.utils.logger import logs
from gamtrain.utils.retry import Retry

MODEL_FILE = "model.joblib"
META_FILE = "artifact.json"


@dataclass(frozen=True)
class ModelArtifact:
    """
    ModelArtifact

    Semantics:
    - path always points to an artifact ROOT directory
    - model.joblib + artifact.json, both overwritten per checkpoint
    """

    path: Path
    run_id: Optional[str] = None
    iteration: Optional[int] = None
    created_at: Optional[datetime] = None
    metrics: Dict[str, Any] = field(default_factory=dict)


@Retry.decorator(exceptions=(OSError,), max_attempts=3, delay=0.5)
def _dump_model(model: AdditiveModel, path: Path) -> None:
    joblib.dump(model, path)


@Retry.decorator(exceptions=(OSError,), max_attempts=3, delay=0.5)
def _write_meta(meta: Dict[str, Any], path: Path) -> None:
    path.write_text(json.dumps(meta, indent=2, default=str), encoding="utf-8")


def save_model(
    model: AdditiveModel,
    output_dir: Path | str,
    *,
    run_id: Optional[str] = None,
    iteration: Optional[int] = None,
    loss: Optional[str] = None,
    metrics: Optional[Dict[str, Any]] = None,
) -> ModelArtifact:
    artifact_dir = Path(output_dir)
    artifact_dir.mkdir(parents=True, exist_ok=True)

    created_at = datetime.now(timezone.utc)
    meta = {
        "run_id": run_id,
        "iteration": iteration,
        "created_at": created_at.isoformat(),
        "loss": loss,
        "num_functions": model.num_functions,
        "families": sorted(model.weights),
        "metrics": dict(metrics or {}),
    }

    _dump_model(model, artifact_dir / MODEL_FILE)
    _write_meta(meta, artifact_dir / META_FILE)

    logs.info(
        f"[ModelArtifact] saved iteration={iteration} "
        f"functions={model.num_functions} -> {artifact_dir}"
    )

    return ModelArtifact(
        path=artifact_dir,
        run_id=run_id,
        iteration=iteration,
        created_at=created_at,
        metrics=meta["metrics"],
    )


def load_model(path: Path | str) -> AdditiveModel:
    """Load from an artifact directory or a direct .joblib file."""
    path = Path(path)
    model_path = path / MODEL_FILE if path.is_dir() else path

    if not model_path.exists():
        raise ModelInitError(f"[ModelArtifact] model not found: {model_path}")

    model = joblib.load(model_path)
    if not isinstance(model, AdditiveModel):
        raise ModelInitError(
            f"[ModelArtifact] {model_path} holds {type(model).__name__}, not AdditiveModel"
        )

    logs.info(f"[ModelArtifact] loaded {model} from {model_path}")
    return model
