# gamtrain/training/steps/prune_step.py
from __future__ import annotations

from gamtrain.pipeline.step import PipelineStep
from gamtrain.training.context import TrainingContext
from gamtrain.training.engines.prune_engine import delete_small_functions


class PruneStep(PipelineStep):
    """Drop functions whose L-inf norm fell below linfinity_threshold."""

    stage = "prune"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        with self.inst.timer(f"prune@{ctx.iteration}"):
            ctx.pruned = delete_small_functions(ctx.model, ctx.params.linfinity_threshold)

        self.inst.metrics.record("pruned_functions", len(ctx.pruned), ctx.iteration)
        self.inst.metrics.record("functions", ctx.model.num_functions, ctx.iteration)
        return ctx
