# gamtrain/pipeline/parallel/types.py
from enum import Enum


class ParallelKind(str, Enum):
    BAG = "bag"
    FEATURE = "feature"
