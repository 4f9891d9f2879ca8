# gamtrain/pipeline/step.py
from __future__ import annotations

from typing import Any

from gamtrain.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline Step base class

    Responsibilities:
      1. orchestration only (loop / dispatch / conditional execution)
      2. a step-level wall-time boundary (parent scope)

    Rules:
      - the step itself is not written to the timeline
      - leaf timers live inside the step
      - behaviour never depends on whether instrumentation is enabled
    """

    stage: str = ""

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def timed(self):
        """Step-level parent scope, not recorded."""
        return self.inst.timer(self.step_name, record=False)

    def run(self, ctx: Any) -> Any:
        raise NotImplementedError
