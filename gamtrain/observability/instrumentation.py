#!filepath: gamtrain/observability/instrumentation.py
from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator

from gamtrain.observability.metrics import MetricRecorder
from gamtrain.observability.progress import ProgressReporter
from gamtrain.observability.timeline_reporter import TimelineReporter
from gamtrain.observability.timer import Timer


@dataclass
class Instrumentation:
    """
    Instrumentation for one training run.

    - timer(name)               : leaf scope, written to the timeline
    - timer(name, record=False) : parent scope (a whole step), bounds the
                                  leaves inside it and records nothing
    - metrics / progress        : forwarded to logs
    Nothing here logs per example; the bag hot loop is never timed.
    """

    enabled: bool = True

    def __post_init__(self):
        self.progress = ProgressReporter(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)
        self._timer = Timer(enabled=self.enabled)
        self.timeline: Dict[str, float] = OrderedDict()

    @property
    def stage_totals(self) -> Dict[str, float]:
        return dict(self._timer.stage_totals)

    @contextmanager
    def _leaf(self, name: str) -> Iterator[None]:
        self._timer.start(name)
        try:
            yield
        finally:
            self.timeline[name] = self._timer.end(name)

    def timer(self, name: str, *, record: bool = True):
        if not self.enabled or not record:
            return _NoOpTimer()
        return self._leaf(name)

    def generate_timeline_report(self, run_id: str):
        if self.enabled:
            TimelineReporter(self.timeline, run_id, self.stage_totals).print()


class NoOpInstrumentation:
    """Used when observability is disabled."""

    def __init__(self):
        self.progress = ProgressReporter(enabled=False)
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = OrderedDict()
        self.stage_totals: Dict[str, float] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def generate_timeline_report(self, run_id: str):
        pass


class _NoOpTimer:
    def __enter__(self):
        return None

    def __exit__(self, exc_type, exc, tb):
        return False
