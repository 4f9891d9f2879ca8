# gamtrain/training/engines/dataset_engine.py
from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence

import numpy as np

from gamtrain.core.feature_vector import FeatureVector


class ExampleDataset:
    """
    ExampleDataset

    Local stand-in for a partitioned distributed collection:
    - sample(fraction)     : Bernoulli sample without replacement
    - repartition(n)       : shuffle, then split into exactly n partitions
    Both draw from the caller's generator so a seeded run is reproducible.
    """

    def __init__(self, examples: Iterable[FeatureVector]):
        self.examples: List[FeatureVector] = list(examples)

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self) -> Iterator[FeatureVector]:
        return iter(self.examples)

    def sample(self, fraction: float, rng: np.random.Generator) -> "ExampleDataset":
        if fraction >= 1.0:
            return ExampleDataset(self.examples)
        mask = rng.random(len(self.examples)) < fraction
        return ExampleDataset(ex for ex, keep in zip(self.examples, mask) if keep)

    def repartition(self, num_partitions: int, rng: np.random.Generator) -> List[List[FeatureVector]]:
        """Partitions differ in size by at most one; some may be empty."""
        if num_partitions <= 0:
            raise ValueError(f"num_partitions must be positive, got {num_partitions}")
        order = rng.permutation(len(self.examples))
        return [
            [self.examples[i] for i in chunk]
            for chunk in np.array_split(order, num_partitions)
        ]


def bag_examples(
    examples: Sequence[FeatureVector],
    subsample: float,
    num_bags: int,
    rng: np.random.Generator,
) -> List[List[FeatureVector]]:
    """One iteration's bags: subsample, then shuffle into ``num_bags`` partitions."""
    return ExampleDataset(examples).sample(subsample, rng).repartition(num_bags, rng)
