# gamtrain/training/pipeline.py
from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

import numpy as np

from gamtrain.config.trainer_config import TrainerConfig, load_trainer_config
from gamtrain.core.feature_vector import FeatureVector
from gamtrain.core.model import AdditiveModel
from gamtrain.observability.instrumentation import Instrumentation
from gamtrain.pipeline.step import PipelineStep
from gamtrain.training.context import TrainingContext
from gamtrain.training.engines.registry import resolve_update_rule
from gamtrain.training.steps.bagging_step import BaggingStep
from gamtrain.training.steps.checkpoint_step import CheckpointStep
from gamtrain.training.steps.model_init_step import ModelInitStep
from gamtrain.training.steps.prune_step import PruneStep
from gamtrain.training.steps.sgd_step import SgdStep
from gamtrain.utils.logger import logs


class TrainingPipeline:
    """
    TrainingPipeline

    Semantics:
    - init steps run once and must leave ctx.model set
    - iteration steps run ``iterations`` times, in order
    - the pipeline owns the iteration counter; steps own the semantics
    """

    def __init__(
            self,
            *,
            init_steps: List[PipelineStep],
            iteration_steps: List[PipelineStep],
            cfg: TrainerConfig,
            inst: Instrumentation,
    ):
        self.init_steps = init_steps
        self.iteration_steps = iteration_steps
        self.cfg = cfg
        self.inst = inst

    def run(self, examples: Iterable[FeatureVector], run_id: Optional[str] = None) -> TrainingContext:
        run_id = run_id or uuid.uuid4().hex[:12]
        params = self.cfg.to_params()

        logs.info(f"[TrainingPipeline] START run_id={run_id} loss={params.loss}")

        ctx = TrainingContext(
            run_id=run_id,
            params=params,
            examples=list(examples),
            model_dir=Path(self.cfg.model_output),
            iterations=self.cfg.iterations,
            rng=np.random.default_rng(params.seed),
            inst=self.inst,
        )

        for step in self.init_steps:
            ctx = step.run(ctx)

        self.inst.progress.start("AdditiveTrainer", ctx.iterations, "iterations")
        for i in range(1, ctx.iterations + 1):
            ctx.iteration = i
            logs.info(f"[TrainingPipeline] Iteration {i}")

            for step in self.iteration_steps:
                ctx = step.run(ctx)

            self.inst.progress.update("AdditiveTrainer", i, ctx.iterations, "iterations")

        self.inst.progress.done("AdditiveTrainer")
        self.inst.generate_timeline_report(run_id)
        logs.info(f"[TrainingPipeline] DONE {ctx.model}")
        return ctx


def build_training_pipeline(
        cfg: TrainerConfig,
        inst: Optional[Instrumentation] = None,
) -> TrainingPipeline:
    # unknown loss kinds are rejected before any data is touched
    resolve_update_rule(cfg.loss)

    inst = inst if inst is not None else Instrumentation(enabled=True)
    return TrainingPipeline(
        init_steps=[ModelInitStep(inst)],
        iteration_steps=[
            BaggingStep(inst),
            SgdStep(inst),
            PruneStep(inst),
            CheckpointStep(inst),
        ],
        cfg=cfg,
        inst=inst,
    )


@logs.catch(msg="additive model training failed")
def train(
        examples: Iterable[FeatureVector],
        config: Union[str, Path, Mapping[str, Any], TrainerConfig],
        key: Optional[str] = None,
        inst: Optional[Instrumentation] = None,
) -> AdditiveModel:
    """
    Train an additive model.

    ``config`` is a YAML path, a parsed mapping or a TrainerConfig; ``key``
    selects the trainer block inside it. A checkpoint is written to
    ``model_output`` after every iteration; the final model is returned.
    """
    cfg = config if isinstance(config, TrainerConfig) else load_trainer_config(config, key)
    pipeline = build_training_pipeline(cfg, inst)
    return pipeline.run(examples).model
