# gamtrain/training/steps/checkpoint_step.py
from __future__ import annotations

from gamtrain.io.model_artifact import save_model
from gamtrain.pipeline.step import PipelineStep
from gamtrain.training.context import TrainingContext


class CheckpointStep(PipelineStep):
    """
    CheckpointStep

    Semantics:
    - one write per iteration, overwriting the previous checkpoint
    - restart from it by setting init_model to ctx.model_dir
    """

    stage = "checkpoint"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        if ctx.model is None:
            raise RuntimeError("No model to checkpoint")

        with self.inst.timer(f"checkpoint@{ctx.iteration}"):
            save_model(
                ctx.model,
                ctx.model_dir,
                run_id=ctx.run_id,
                iteration=ctx.iteration,
                loss=ctx.params.loss,
                metrics=ctx.metrics,
            )
        return ctx
