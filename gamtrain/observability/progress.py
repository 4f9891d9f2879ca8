#!filepath: gamtrain/observability/progress.py
import time
from typing import Dict

from gamtrain.utils.logger import logs


class ProgressReporter:
    """
    Iteration progress through logs, with elapsed time and a naive ETA
    (mean time per finished unit times the units left).
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._started: Dict[str, float] = {}

    def start(self, task: str, total: int, unit: str = ""):
        if not self.enabled:
            return
        self._started[task] = time.perf_counter()
        logs.info(f"[Progress] {task} START total={total} {unit}".rstrip())

    def update(self, task: str, current: int, total: int, unit: str = ""):
        if not self.enabled:
            return
        began = self._started.get(task)
        elapsed = time.perf_counter() - began if began is not None else 0.0
        eta = elapsed / current * (total - current) if current else 0.0
        logs.info(
            f"[Progress] {task}: {current}/{total} {unit} "
            f"| elapsed={elapsed:.2f}s | ETA={eta:.2f}s"
        )

    def done(self, task: str):
        if not self.enabled:
            return
        began = self._started.pop(task, None)
        took = f" total_time={time.perf_counter() - began:.2f}s" if began is not None else ""
        logs.info(f"[Progress] {task} DONE{took}")
