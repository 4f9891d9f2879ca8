# gamtrain/training/steps/bagging_step.py
from __future__ import annotations

from gamtrain.pipeline.step import PipelineStep
from gamtrain.training.context import TrainingContext
from gamtrain.training.engines.dataset_engine import bag_examples
from gamtrain.utils.logger import logs


class BaggingStep(PipelineStep):
    """
    BaggingStep

    Contract:
    - consumes ctx.examples
    - produces ctx.bags: subsample, then exactly num_bags partitions
    """

    stage = "bagging"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        params = ctx.params
        with self.inst.timer(f"bagging@{ctx.iteration}"):
            ctx.bags = bag_examples(ctx.examples, params.subsample, params.num_bags, ctx.rng)

        sizes = [len(bag) for bag in ctx.bags]
        logs.info(
            f"[BaggingStep] iteration={ctx.iteration} sampled={sum(sizes)} bag_sizes={sizes}"
        )
        return ctx
