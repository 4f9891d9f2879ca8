# gamtrain/training/steps/model_init_step.py
from __future__ import annotations

from gamtrain.pipeline.step import PipelineStep
from gamtrain.training.context import TrainingContext
from gamtrain.training.engines.model_init_engine import model_initialization


class ModelInitStep(PipelineStep):
    """
    ModelInitStep

    Contract:
    - consumes ctx.examples / ctx.params
    - produces ctx.model (fresh, or init_model extended)
    - prior problems land in ctx.warnings
    - any failure is fatal
    """

    stage = "model_init"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        with self.timed():
            with self.inst.timer("model_init"):
                ctx.model = model_initialization(
                    ctx.params, ctx.examples, ctx.rng, warnings=ctx.warnings
                )

        self.inst.metrics.record("initial_functions", ctx.model.num_functions)
        return ctx
