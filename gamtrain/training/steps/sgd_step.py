# gamtrain/training/steps/sgd_step.py
from __future__ import annotations

from gamtrain.pipeline.parallel.executor import ParallelExecutor
from gamtrain.pipeline.parallel.types import ParallelKind
from gamtrain.pipeline.step import PipelineStep
from gamtrain.training.context import TrainingContext
from gamtrain.training.engines.aggregate_engine import aggregate_bags
from gamtrain.training.engines.bag_engine import BagTask, run_bag
from gamtrain.training.engines.broadcast import ModelBroadcast


class SgdStep(PipelineStep):
    """
    SgdStep

    Contract:
    - consumes ctx.bags / ctx.model
    - broadcasts ctx.model read-only for the duration of the step
    - runs one bag worker per partition, then merges their functions
      back into ctx.model (existing keys only)
    - a failing bag fails the step
    """

    stage = "sgd"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        params = ctx.params
        seeds = ctx.rng.integers(0, 2**32 - 1, size=len(ctx.bags))

        with self.timed():
            with ModelBroadcast(ctx.model) as snapshot:
                tasks = [
                    BagTask(
                        index=index,
                        examples=bag,
                        snapshot=snapshot,
                        params=params,
                        seed=int(seeds[index]),
                    )
                    for index, bag in enumerate(ctx.bags)
                ]

                with self.inst.timer(f"bags@{ctx.iteration}"):
                    results = ParallelExecutor.run(
                        kind=ParallelKind.BAG,
                        items=tasks,
                        handler=run_bag,
                        max_workers=params.max_workers,
                    )

            with self.inst.timer(f"aggregate@{ctx.iteration}"):
                summary = aggregate_bags(results, ctx.model, params, max_workers=1)

        ctx.bag_losses = {r.index: r.mean_loss for r in results}
        seen = [r for r in results if r.num_examples]
        mean_loss = (
            sum(r.mean_loss * r.num_examples for r in seen) / sum(r.num_examples for r in seen)
            if seen else 0.0
        )
        ctx.metrics[f"loss@{ctx.iteration}"] = mean_loss
        self.inst.metrics.record("mean_loss", mean_loss, ctx.iteration)
        self.inst.metrics.record("dropped_keys", summary.dropped, ctx.iteration)
        return ctx
