# gamtrain/training/engines/prune_engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from gamtrain.core.model import AdditiveModel, FeatureKey
from gamtrain.utils.logger import logs


def delete_small_functions(model: AdditiveModel, linfinity_threshold: float) -> List[FeatureKey]:
    """Remove every function whose L-inf norm is below the threshold."""
    to_delete = [
        key for key, func in model.iter_functions()
        if func.linfinity_norm() < linfinity_threshold
    ]

    logs.info(f"[PruneEngine] Deleting {len(to_delete)} small functions")
    for family, name in to_delete:
        model.remove_function(family, name)
    return to_delete


# --------------------------------------------------
# priors
# --------------------------------------------------
class PriorStatus(str, Enum):
    APPLIED = "applied"
    MALFORMED = "malformed"
    MISSING = "missing"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class PriorOutcome:
    spec: str
    status: PriorStatus
    reason: Optional[str] = None


@dataclass
class PriorReport:
    outcomes: List[PriorOutcome] = field(default_factory=list)
    aborted: bool = False

    @property
    def applied(self) -> List[PriorOutcome]:
        return [o for o in self.outcomes if o.status == PriorStatus.APPLIED]

    @property
    def warnings(self) -> List[str]:
        return [
            f"{o.status.value}: {o.spec}" + (f" ({o.reason})" if o.reason else "")
            for o in self.outcomes
            if o.status in (PriorStatus.MALFORMED, PriorStatus.FAILED)
        ]


def _apply_prior(spec: str, model: AdditiveModel) -> PriorOutcome:
    tokens = spec.split(",")
    if len(tokens) != 4:
        logs.error(f"[PruneEngine] Incorrect number of parameters for {spec}")
        return PriorOutcome(spec, PriorStatus.MALFORMED, f"expected 4 tokens, got {len(tokens)}")

    family, name = tokens[0], tokens[1]
    params = [float(tokens[2]), float(tokens[3])]

    func = model.get_function(family, name)
    if func is None:
        return PriorOutcome(spec, PriorStatus.MISSING)

    logs.info(f"[PruneEngine] Setting prior {family}:{name} <- {params[0]} to {params[1]}")
    func.set_priors(params)
    return PriorOutcome(spec, PriorStatus.APPLIED)


def set_prior(priors: Optional[Sequence[str]], model: AdditiveModel) -> PriorReport:
    """
    Seed existing functions from "family,name,p0,p1" specs.

    Best effort: malformed specs are logged and skipped, unknown features
    are skipped, and the first unexpected failure stops the pass (priors
    applied before it stay applied). Never raises.
    """
    report = PriorReport()
    if not priors:
        logs.info("[PruneEngine] No prior given")
        return report

    for i, spec in enumerate(priors):
        try:
            report.outcomes.append(_apply_prior(spec, model))
        except Exception as e:
            logs.info(f"[PruneEngine] No prior given: {type(e).__name__}: {e}")
            report.outcomes.append(PriorOutcome(spec, PriorStatus.FAILED, str(e)))
            report.outcomes.extend(
                PriorOutcome(rest, PriorStatus.SKIPPED) for rest in priors[i + 1:]
            )
            report.aborted = True
            break

    return report
