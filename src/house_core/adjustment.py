from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .constants import PARTIES, Party
from .models import AdjustedObservation, HouseEffect, Observation


def apply_corrections(
    observations: Sequence[Observation],
    effects: Mapping[str, HouseEffect],
) -> List[AdjustedObservation]:
    """
    Subtract each house's estimated bias from its polls.
    Parties without an estimate (or houses without any) pass through unchanged
    with no adjustment entry. Inputs are left untouched.
    """
    out: List[AdjustedObservation] = []
    for obs in observations:
        effect = effects.get(obs.source)
        categories = dict(obs.categories)
        adjustments = {}
        if effect is not None:
            for party in PARTIES:
                bias = effect.per_category.get(party)
                if bias is None or party not in obs.categories:
                    continue
                adjustments[party] = -bias
                categories[party] = obs.categories[party] - bias
        out.append(
            AdjustedObservation(
                source=obs.source,
                timestamp=obs.timestamp,
                categories=categories,
                original_categories=dict(obs.categories),
                adjustments=adjustments,
            )
        )
    return out


def as_unadjusted(observations: Sequence[Observation]) -> List[AdjustedObservation]:
    """Wrap raw polls as adjusted polls with no correction, for raw-vs-adjusted reports."""
    return apply_corrections(observations, {})


@dataclass(frozen=True)
class AdjustmentSummary:
    source: str
    date: pd.Timestamp
    has_adjustments: bool
    adjustment_count: int
    largest_adjustment: Optional[Tuple[Party, float]]


def adjustment_summary(adjusted: AdjustedObservation) -> AdjustmentSummary:
    largest = None
    if adjusted.adjustments:
        party = max(adjusted.adjustments, key=lambda p: abs(adjusted.adjustments[p]))
        largest = (party, adjusted.adjustments[party])
    return AdjustmentSummary(
        source=adjusted.source,
        date=adjusted.timestamp,
        has_adjustments=bool(adjusted.adjustments),
        adjustment_count=len(adjusted.adjustments),
        largest_adjustment=largest,
    )
