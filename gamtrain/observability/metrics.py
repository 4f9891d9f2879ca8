#!filepath: gamtrain/observability/metrics.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from gamtrain.utils.logger import logs


@dataclass
class MetricRecorder:
    """
    Latest value per metric plus its full history.

    ``history[name]`` holds (iteration, value) pairs; the iteration is None
    for metrics recorded outside the training loop (e.g. at init).
    """

    enabled: bool = True
    metrics: Dict[str, Any] = field(default_factory=dict)
    history: Dict[str, List[Tuple[Optional[int], Any]]] = field(default_factory=dict)

    def record(self, name: str, value: Any, iteration: Optional[int] = None):
        if not self.enabled:
            return
        self.metrics[name] = value
        self.history.setdefault(name, []).append((iteration, value))

        where = f"@{iteration}" if iteration is not None else ""
        logs.info(f"[Metric] {name}{where} = {value}")

    def series(self, name: str) -> List[Any]:
        return [value for _, value in self.history.get(name, [])]
