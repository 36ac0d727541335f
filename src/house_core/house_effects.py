from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .benchmark import peer_benchmark, rolling_benchmark, timestamps_ns
from .constants import (
    BENCHMARK_MIN_OBSERVATIONS,
    BENCHMARK_WINDOW_DAYS,
    DECAY_HALF_LIFE_DAYS,
    DECAY_WINDOW_DAYS,
    ESTIMATORS,
    PARTIES,
    Party,
)
from .models import EnhancedHouseEffect, HouseEffect, Observation, days_between

HouseEffects = Dict[str, HouseEffect]
HouseEffectEstimator = Callable[[Sequence[Observation]], HouseEffects]


def latest_timestamp(observations: Sequence[Observation]) -> Optional[pd.Timestamp]:
    if not observations:
        return None
    return max(o.timestamp for o in observations)


def deviations(observation: Observation, reference: Optional[Mapping[Party, float]]) -> Dict[Party, float]:
    if reference is None:
        return {}
    return {
        party: observation.categories[party] - reference[party]
        for party in PARTIES
        if party in observation.categories and party in reference
    }


def _group_by_source(observations: Sequence[Observation], devs: List[Dict[Party, float]]):
    grouped: Dict[str, List[Tuple[Observation, Dict[Party, float]]]] = {}
    for obs, d in zip(observations, devs):
        grouped.setdefault(obs.source, []).append((obs, d))
    return grouped


def estimate_effects(
    observations: Sequence[Observation],
    window_days: float = BENCHMARK_WINDOW_DAYS,
    min_observations: int = BENCHMARK_MIN_OBSERVATIONS,
) -> HouseEffects:
    """
    Per-house bias as the mean deviation from a rolling benchmark.
    - benchmark: +/- window_days around each poll, widened 28/42 days when sparse
    - effect[party] = mean(poll - benchmark) over the house's polls
    - parties without a single deviation are left out
    """
    times = timestamps_ns(observations)
    devs = [
        deviations(obs, rolling_benchmark(obs, observations, times, window_days, min_observations))
        for obs in observations
    ]

    effects: HouseEffects = {}
    for source, rows in sorted(_group_by_source(observations, devs).items()):
        per_category: Dict[Party, float] = {}
        for party in PARTIES:
            vals = [d[party] for _, d in rows if party in d]
            if vals:
                per_category[party] = math.fsum(vals) / len(vals)
        effects[source] = HouseEffect(source=source, per_category=per_category, observation_count=len(rows))
    return effects


def recency_weight(age_days: float, half_life_days: float) -> float:
    """0.5 ** (age / half_life); an infinite half-life disables decay."""
    return 0.5 ** (age_days / half_life_days)


def estimate_decayed_effects(
    observations: Sequence[Observation],
    half_life_days: float = DECAY_HALF_LIFE_DAYS,
    window_days: float = DECAY_WINDOW_DAYS,
    reference_date: Optional[pd.Timestamp] = None,
) -> Dict[str, EnhancedHouseEffect]:
    """
    House effects where recent polls dominate.
    - deviation: poll minus the mean of its peers within +/- window_days
      (the poll itself when it has no peer, i.e. zero deviation)
    - weight: 0.5 ** (age_days / half_life_days), ages measured from one
      shared reference (reference_date, default: latest poll overall)
    - effect[party] = weighted mean of deviations
    """
    if not half_life_days > 0:
        raise ValueError("half_life_days must be > 0 (use inf to disable decay).")
    if window_days < 0:
        raise ValueError("window_days must be >= 0.")
    if not observations:
        return {}

    ref = latest_timestamp(observations) if reference_date is None else pd.Timestamp(reference_date)
    times = timestamps_ns(observations)
    devs = [deviations(obs, peer_benchmark(obs, observations, times, window_days)) for obs in observations]

    effects: Dict[str, EnhancedHouseEffect] = {}
    for source, rows in sorted(_group_by_source(observations, devs).items()):
        ages = [days_between(ref, obs.timestamp) for obs, _ in rows]
        weights = [recency_weight(a, half_life_days) for a in ages]

        per_category: Dict[Party, float] = {}
        for party in PARTIES:
            pairs = [(w, d[party]) for w, (_, d) in zip(weights, rows) if party in d]
            w_sum = math.fsum(w for w, _ in pairs)
            if pairs and w_sum > 0:
                per_category[party] = math.fsum(w * v for w, v in pairs) / w_sum

        total_weight = math.fsum(weights)
        effective_age = math.fsum(w * a for w, a in zip(weights, ages)) / total_weight if total_weight > 0 else 0.0
        effects[source] = EnhancedHouseEffect(
            source=source,
            per_category=per_category,
            observation_count=len(rows),
            effective_age=effective_age,
            total_weight=total_weight,
        )
    return effects


@dataclass(frozen=True)
class RollingHouseEffects:
    window_days: float = BENCHMARK_WINDOW_DAYS
    min_observations: int = BENCHMARK_MIN_OBSERVATIONS

    def __call__(self, observations: Sequence[Observation]) -> HouseEffects:
        return estimate_effects(observations, self.window_days, self.min_observations)


@dataclass(frozen=True)
class DecayedHouseEffects:
    half_life_days: float = DECAY_HALF_LIFE_DAYS
    window_days: float = DECAY_WINDOW_DAYS
    reference_date: Optional[pd.Timestamp] = None

    def __call__(self, observations: Sequence[Observation]) -> HouseEffects:
        return estimate_decayed_effects(observations, self.half_life_days, self.window_days, self.reference_date)


def make_estimator(
    name: str,
    window_days: Optional[float] = None,
    min_observations: int = BENCHMARK_MIN_OBSERVATIONS,
    half_life_days: float = DECAY_HALF_LIFE_DAYS,
    reference_date: Optional[pd.Timestamp] = None,
) -> HouseEffectEstimator:
    if name == "rolling":
        return RollingHouseEffects(
            window_days=BENCHMARK_WINDOW_DAYS if window_days is None else window_days,
            min_observations=min_observations,
        )
    if name == "decayed":
        return DecayedHouseEffects(
            half_life_days=half_life_days,
            window_days=DECAY_WINDOW_DAYS if window_days is None else window_days,
            reference_date=reference_date,
        )
    raise ValueError(f"Unknown estimator {name!r}; expected one of {ESTIMATORS}")


def extreme_effects(effects: Mapping[str, HouseEffect]) -> Tuple[Optional[tuple], Optional[tuple]]:
    """Largest over- and under-estimate across all houses as (source, party, effect)."""
    top: Optional[tuple] = None
    bottom: Optional[tuple] = None
    for source in sorted(effects):
        for party, effect in effects[source].per_category.items():
            if effect > 0 and (top is None or effect > top[2]):
                top = (source, party, effect)
            if effect < 0 and (bottom is None or effect < bottom[2]):
                bottom = (source, party, effect)
    return top, bottom


def house_effects_frame(effects: Mapping[str, HouseEffect]) -> pd.DataFrame:
    rows = []
    for source in sorted(effects):
        he = effects[source]
        for party, effect in he.per_category.items():
            row = {
                "source": source,
                "party": party.value,
                "effect": effect,
                "observation_count": he.observation_count,
            }
            if isinstance(he, EnhancedHouseEffect):
                row["effective_age"] = he.effective_age
                row["total_weight"] = he.total_weight
            rows.append(row)
    if not rows:
        return pd.DataFrame(columns=["source", "party", "effect", "observation_count"])
    return pd.DataFrame(rows)
