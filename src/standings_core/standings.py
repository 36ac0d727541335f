from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from house_core.adjustment import as_unadjusted
from house_core.averages import current_estimate
from house_core.constants import AVERAGE_HALF_LIFE_DAYS, LOOKBACK_DAYS, PARTIES, Party
from house_core.models import Observation

BAR_WIDTH = 50


@dataclass(frozen=True)
class PartyShare:
    party: Party
    percentage: float

    @property
    def display_name(self) -> str:
        return self.party.value


@dataclass(frozen=True)
class Standings:
    date: pd.Timestamp
    lookback_days: float
    weighting: str
    poll_count: int
    houses: Tuple[str, ...]
    shares: List[PartyShare]

    def percentages(self) -> Dict[Party, float]:
        return {s.party: s.percentage for s in self.shares}


def current_standings(
    observations: Sequence[Observation],
    lookback_days: float = LOOKBACK_DAYS,
    weighting: str = "none",
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
    sort_by_percentage: bool = True,
) -> Optional[Standings]:
    est = current_estimate(observations, lookback_days=lookback_days, weighting=weighting, half_life=half_life)
    if est is None:
        return None
    shares = [
        PartyShare(party, est.categories[party])
        for party in PARTIES
        if est.categories.get(party, 0.0) > 0
    ]
    if sort_by_percentage:
        shares = sorted(shares, key=lambda s: s.percentage, reverse=True)
    return Standings(
        date=est.as_of,
        lookback_days=lookback_days,
        weighting=weighting,
        poll_count=est.observation_count,
        houses=est.contributing_sources,
        shares=shares,
    )


def standings_bar_chart(standings: Standings, adjusted: bool = True) -> str:
    if not standings.shares:
        return "No data available"
    max_pct = max(s.percentage for s in standings.shares)
    lines = [
        "Norwegian Election Polling - Current Standings",
        "=" * BAR_WIDTH,
        f"As of: {standings.date:%Y-%m-%d} ({standings.lookback_days:g} days lookback, weighting={standings.weighting})",
        f"Based on: {standings.poll_count} polls from {len(standings.houses)} houses ({', '.join(standings.houses)})",
        f"House effects: {'ADJUSTED' if adjusted else 'RAW'}",
        "",
    ]
    for s in standings.shares:
        bar = "█" * int(round(s.percentage / max_pct * BAR_WIDTH))
        lines.append(f"{s.display_name:<8}{s.percentage:5.1f}% {bar}")
    lines.append("")
    lines.append(f"Total: {sum(s.percentage for s in standings.shares):.1f}%")
    return "\n".join(lines)


def standings_summary(standings: Standings, top: int = 5) -> str:
    parts = ", ".join(f"{s.display_name} {s.percentage:.1f}%" for s in standings.shares[:top])
    return f"Current ({standings.lookback_days:g}d, {standings.poll_count} polls): {parts}"


def adjustment_comparison(
    raw: Sequence[Observation],
    adjusted: Sequence[Observation],
    lookback_days: float = LOOKBACK_DAYS,
    weighting: str = "none",
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
) -> Tuple[Optional[Standings], Optional[Standings], pd.DataFrame]:
    """
    Raw vs house-adjusted standings over the same window.
    differences: party, raw_pct, adjusted_pct, difference (adjusted - raw),
    largest absolute difference first.
    """
    raw_st = current_standings(as_unadjusted(raw), lookback_days, weighting, half_life, sort_by_percentage=False)
    adj_st = current_standings(adjusted, lookback_days, weighting, half_life, sort_by_percentage=False)

    rows = []
    if raw_st is not None and adj_st is not None:
        raw_pct = raw_st.percentages()
        adj_pct = adj_st.percentages()
        for party in PARTIES:
            r = raw_pct.get(party, 0.0)
            a = adj_pct.get(party, 0.0)
            if r > 0 or a > 0:
                rows.append({"party": party.value, "raw_pct": r, "adjusted_pct": a, "difference": a - r})

    diff = pd.DataFrame(rows, columns=["party", "raw_pct", "adjusted_pct", "difference"])
    if not diff.empty:
        diff = diff.reindex(diff["difference"].abs().sort_values(ascending=False).index).reset_index(drop=True)
    return raw_st, adj_st, diff


def weighting_comparison(
    observations: Sequence[Observation],
    periods: Sequence[float] = (7, 14, 60, 120),
    weightings: Sequence[str] = ("none", "exponential", "linear"),
    half_life: float = 5.0,
) -> pd.DataFrame:
    """
    Current estimate per (lookback period, weighting) with the total absolute
    difference against the unweighted estimate of the same period.
    """
    rows = []
    for days in periods:
        baseline = current_estimate(observations, lookback_days=days, weighting="none")
        for weighting in weightings:
            est = current_estimate(observations, lookback_days=days, weighting=weighting, half_life=half_life)
            if est is None:
                continue
            row = {"period_days": days, "weighting": weighting, "n_polls": est.observation_count}
            for party in PARTIES:
                row[party.value] = est.categories.get(party, np.nan)
            if baseline is not None:
                row["diff_vs_none"] = float(
                    sum(abs(est.categories[p] - baseline.categories[p]) for p in est.categories if p in baseline.categories)
                )
            rows.append(row)
    cols = ["period_days", "weighting", "n_polls"] + [p.value for p in PARTIES] + ["diff_vs_none"]
    return pd.DataFrame(rows, columns=cols)
