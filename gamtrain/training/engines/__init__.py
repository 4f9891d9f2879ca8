"""
Training engines

Each engine owns one piece of training semantics and is pure with
respect to the pipeline: steps call engines, engines never call steps.

- gradient_update_engine : logistic / hinge / regression update rules
- registry               : loss kind -> update rule, label extraction
- dataset_engine         : subsample + repartition into bags
- broadcast              : scoped read-only model broadcast
- bag_engine             : one bag's SGD pass (sgd_partition)
- aggregate_engine       : cross-bag averaging + smoothing
- feature_stats_engine   : uniform min / max / count statistics
- dynamic_bucket_engine  : ND-tree dynamic bucketing
- model_init_engine      : initial model (fresh or extended)
- prune_engine           : small-function pruning, priors
"""
