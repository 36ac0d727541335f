from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .adjustment import apply_corrections
from .averages import current_estimate, polling_averages
from .constants import AVERAGE_HALF_LIFE_DAYS, AVERAGE_STEP_DAYS, LOOKBACK_DAYS
from .house_effects import HouseEffectEstimator, HouseEffects, RollingHouseEffects
from .models import AdjustedObservation, AggregateEstimate, Observation


@dataclass(frozen=True)
class PollAnalysis:
    observations: List[Observation]
    effects: HouseEffects
    adjusted: List[AdjustedObservation]
    current: Optional[AggregateEstimate]
    averages: List[AggregateEstimate] = field(default_factory=list)

    def summary(self) -> Dict[str, object]:
        if not self.observations:
            return {"total_polls": 0, "earliest": None, "latest": None, "pollsters": []}
        return {
            "total_polls": len(self.observations),
            "earliest": min(o.timestamp for o in self.observations),
            "latest": max(o.timestamp for o in self.observations),
            "pollsters": sorted({o.source for o in self.observations}),
        }


def analyze_polls(
    observations: Sequence[Observation],
    estimator: Optional[HouseEffectEstimator] = None,
    lookback_days: float = LOOKBACK_DAYS,
    weighting: str = "none",
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
    step_days: Optional[float] = AVERAGE_STEP_DAYS,
) -> PollAnalysis:
    """
    Full pass: house effects -> corrected polls -> current estimate
    (+ rolling averages when step_days is given).
    """
    polls = sorted(observations, key=lambda o: o.timestamp)
    estimate = estimator or RollingHouseEffects()
    effects = estimate(polls)
    adjusted = apply_corrections(polls, effects)
    current = current_estimate(adjusted, lookback_days=lookback_days, weighting=weighting, half_life=half_life)
    averages = (
        polling_averages(adjusted, time_span_days=lookback_days, step_days=step_days)
        if step_days is not None
        else []
    )
    return PollAnalysis(
        observations=polls,
        effects=effects,
        adjusted=adjusted,
        current=current,
        averages=averages,
    )
