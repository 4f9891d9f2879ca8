"""
Additive model training (bagged backfitting)

------------------------------------------------------------
Iteration
------------------------------------------------------------

Each iteration over the authoritative model:

1. sample the data at ``subsample`` and shuffle it into ``num_bags`` bags
2. broadcast the model read-only; every bag works on a private copy
3. per bag: optional multiscale resample, then sequential SGD
   (logistic / hinge / regression, with dropout and L-inf clipping)
4. average every feature's function across bags (scale 1 / num_bags),
   smooth, and install it where the key already exists
5. prune functions whose L-inf norm is below ``linfinity_threshold``
6. checkpoint the model to ``model_output``

------------------------------------------------------------
Guarantees
------------------------------------------------------------

- the model's key set is fixed at initialisation; it only shrinks
  (pruning), never grows
- aggregation is order independent
- a failing bag fails the run; there is no partial-iteration recovery
- restart from the last checkpoint by pointing ``init_model`` at it

Non-goals:
- a globally optimal fit
- losses other than logistic / hinge / regression
- online serving
"""

from .pipeline import TrainingPipeline, build_training_pipeline, train

__all__ = ["TrainingPipeline", "build_training_pipeline", "train"]
