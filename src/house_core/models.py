from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

import pandas as pd

from .constants import PARTIES, Party

DAY = pd.Timedelta(days=1)


def normalize_categories(values: Mapping) -> Dict[Party, float]:
    """
    Coerce a party->value mapping onto the closed Party enum, in PARTIES order.
    None/NaN values mean "not measured" and are dropped; anything else that is
    not numeric raises.
    """
    raw = {Party(k): v for k, v in values.items()}
    out: Dict[Party, float] = {}
    for party in PARTIES:
        if party not in raw or raw[party] is None:
            continue
        v = float(raw[party])
        if math.isnan(v):
            continue
        out[party] = v
    return out


def days_between(later: pd.Timestamp, earlier: pd.Timestamp) -> float:
    return float((later - earlier) / DAY)


@dataclass(frozen=True)
class Observation:
    source: str
    timestamp: pd.Timestamp
    categories: Dict[Party, float]

    def __post_init__(self) -> None:
        ts = pd.Timestamp(self.timestamp)
        if pd.isna(ts):
            raise ValueError(f"Observation from {self.source!r} has no valid timestamp")
        object.__setattr__(self, "timestamp", ts)
        object.__setattr__(self, "categories", normalize_categories(self.categories))

    def get(self, party: Party) -> Optional[float]:
        return self.categories.get(party)


@dataclass(frozen=True)
class AdjustedObservation(Observation):
    original_categories: Dict[Party, float] = field(default_factory=dict)
    adjustments: Dict[Party, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "original_categories", normalize_categories(self.original_categories))
        object.__setattr__(self, "adjustments", normalize_categories(self.adjustments))


@dataclass(frozen=True)
class HouseEffect:
    source: str
    per_category: Dict[Party, float]
    observation_count: int

    def get(self, party: Party) -> Optional[float]:
        return self.per_category.get(party)

    def largest(self) -> Optional[Tuple[Party, float]]:
        """Party with the largest absolute bias, or None if nothing was estimated."""
        if not self.per_category:
            return None
        party = max(self.per_category, key=lambda p: abs(self.per_category[p]))
        return party, self.per_category[party]


@dataclass(frozen=True)
class EnhancedHouseEffect(HouseEffect):
    effective_age: float = 0.0
    total_weight: float = 0.0


@dataclass(frozen=True)
class AggregateEstimate:
    as_of: pd.Timestamp
    window_description: str
    observation_count: int
    categories: Dict[Party, float]
    contributing_sources: Tuple[str, ...]
