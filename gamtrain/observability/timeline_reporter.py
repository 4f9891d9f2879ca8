#!filepath: gamtrain/observability/timeline_reporter.py
from typing import Dict, Mapping, Optional

from gamtrain.utils.logger import logs


class TimelineReporter:
    """
    End-of-run timing report: every leaf timer in order, then the
    per-stage totals (bags, aggregate, prune, ...) with their share of
    the measured time.
    """

    def __init__(
        self,
        timeline: Mapping[str, float],
        run_id: str,
        stage_totals: Optional[Mapping[str, float]] = None,
    ):
        self.timeline = timeline
        self.run_id = run_id
        self.stage_totals: Dict[str, float] = dict(stage_totals or {})

    def print(self):
        logs.info(f"[Timeline] ===== Training timeline for {self.run_id} =====")
        for name, sec in self.timeline.items():
            logs.info(f"[Timeline] {name:<30} {sec:>8.3f}s")

        total = sum(self.timeline.values())
        if self.stage_totals:
            logs.info("[Timeline] ----- by stage -----")
            for stage, sec in sorted(self.stage_totals.items(), key=lambda kv: -kv[1]):
                share = sec / total if total > 0 else 0.0
                logs.info(f"[Timeline] {stage:<30} {sec:>8.3f}s {share:>6.1%}")

        logs.info(f"[Timeline] {'Total':<30} {total:>8.3f}s")
