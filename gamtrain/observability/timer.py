#!filepath: gamtrain/observability/timer.py
import time
from collections import defaultdict
from typing import Dict


def stage_of(name: str) -> str:
    """'bags@3' -> 'bags'; names without an iteration suffix are their own stage."""
    return name.split("@", 1)[0]


class Timer:
    """
    Wall-clock timer keyed by name.

    Besides the per-name elapsed time, every finished measurement is
    added to ``stage_totals`` under its stage, so ``bags@1`` .. ``bags@N``
    roll up into one ``bags`` total for the run.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._open: Dict[str, float] = {}
        self.stage_totals: Dict[str, float] = defaultdict(float)

    def start(self, name: str) -> None:
        if self.enabled:
            self._open[name] = time.perf_counter()

    def end(self, name: str) -> float:
        began = self._open.pop(name, None) if self.enabled else None
        if began is None:
            return 0.0

        elapsed = time.perf_counter() - began
        self.stage_totals[stage_of(name)] += elapsed
        return elapsed
