# gamtrain/training/engines/broadcast.py
from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import joblib

from gamtrain.core.model import AdditiveModel
from gamtrain.utils.logger import logs


@dataclass(frozen=True)
class ModelSnapshot:
    """
    Read-only handle on a broadcast model.

    Workers never see the authoritative object: ``private_copy()`` loads a
    fresh model owned by the caller, so in-place work (resampling, SGD)
    cannot leak into other bags.
    """

    path: Path

    def private_copy(self) -> AdditiveModel:
        if not self.path.exists():
            raise RuntimeError(f"[ModelBroadcast] snapshot released: {self.path}")
        return joblib.load(self.path)


class ModelBroadcast:
    """
    Scoped broadcast of one model for one iteration.

        with ModelBroadcast(model) as snapshot:
            ... hand ``snapshot`` to every bag ...

    The model is serialised once on enter; the file is removed on exit
    whether the iteration succeeded or not.
    """

    def __init__(self, model: AdditiveModel, root: Optional[Path] = None):
        self.model = model
        self.root = root
        self._dir: Optional[Path] = None

    def __enter__(self) -> ModelSnapshot:
        self._dir = Path(tempfile.mkdtemp(prefix="gamtrain-broadcast-", dir=self.root))
        path = self._dir / "model.joblib"
        joblib.dump(self.model, path)
        logs.debug(f"[ModelBroadcast] broadcast {self.model} -> {path}")
        return ModelSnapshot(path=path)

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unpersist()

    def unpersist(self) -> None:
        if self._dir is not None:
            shutil.rmtree(self._dir, ignore_errors=True)
            logs.debug(f"[ModelBroadcast] released {self._dir}")
            self._dir = None
