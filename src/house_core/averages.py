from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .constants import AVERAGE_HALF_LIFE_DAYS, AVERAGE_STEP_DAYS, LOOKBACK_DAYS, PARTIES, WEIGHTINGS, Party
from .models import DAY, AggregateEstimate, Observation


def decay_weights(
    age_days: np.ndarray,
    weighting: str = "none",
    lookback_days: float = LOOKBACK_DAYS,
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
) -> np.ndarray:
    """
    Recency weights for a lookback window:
      none        -> 1
      linear      -> max(0, (L - age) / L)
      exponential -> 0.5 ** (age / half_life)
      quadratic   -> linear ** 2
    """
    age = np.asarray(age_days, dtype=float)
    if weighting == "none":
        return np.ones_like(age)
    if weighting in ("linear", "quadratic"):
        if lookback_days <= 0:
            raise ValueError("lookback_days must be > 0 for linear/quadratic weighting.")
        lin = np.maximum(0.0, (lookback_days - age) / lookback_days)
        return lin if weighting == "linear" else lin**2
    if weighting == "exponential":
        if not half_life > 0:
            raise ValueError("half_life must be > 0.")
        return np.power(0.5, age / half_life)
    raise ValueError(f"Unknown weighting {weighting!r}; expected one of {WEIGHTINGS}")


def decay_weight(
    age_days: float,
    weighting: str = "none",
    lookback_days: float = LOOKBACK_DAYS,
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
) -> float:
    return float(decay_weights(np.array([age_days]), weighting, lookback_days, half_life)[0])


def weighted_category_means(observations: Sequence[Observation], weights: np.ndarray) -> Dict[Party, float]:
    """
    Per party: sum(value * w) / sum(w) over the polls that measured the party.
    A party nobody measured, or whose weights sum to zero, is left out.
    """
    out: Dict[Party, float] = {}
    for party in PARTIES:
        idx = [i for i, o in enumerate(observations) if party in o.categories]
        if not idx:
            continue
        w = weights[idx]
        w_sum = float(np.sum(w))
        if w_sum <= 0:
            continue
        v = np.array([observations[i].categories[party] for i in idx], dtype=float)
        out[party] = float(np.sum(w * v) / w_sum)
    return out


def _window_estimate(
    observations: Sequence[Observation],
    as_of: pd.Timestamp,
    span_days: float,
    description: str,
    weighting: str,
    half_life: float,
) -> Optional[AggregateEstimate]:
    start = as_of - pd.Timedelta(days=span_days)
    selected = [o for o in observations if start <= o.timestamp <= as_of]
    if not selected:
        return None
    ages = np.array([(as_of - o.timestamp) / DAY for o in selected], dtype=float)
    weights = decay_weights(ages, weighting, span_days, half_life)
    return AggregateEstimate(
        as_of=as_of,
        window_description=description,
        observation_count=len(selected),
        categories=weighted_category_means(selected, weights),
        contributing_sources=tuple(sorted({o.source for o in selected})),
    )


def current_estimate(
    observations: Sequence[Observation],
    lookback_days: float = LOOKBACK_DAYS,
    weighting: str = "none",
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
) -> Optional[AggregateEstimate]:
    """Snapshot over the lookback_days ending at the latest poll, or None without polls."""
    if weighting not in WEIGHTINGS:
        raise ValueError(f"Unknown weighting {weighting!r}; expected one of {WEIGHTINGS}")
    if not observations:
        return None
    as_of = max(o.timestamp for o in observations)
    description = f"Current ({lookback_days:g} days)"
    if weighting != "none":
        description = f"Current ({lookback_days:g} days, {weighting} weighting)"
    return _window_estimate(observations, as_of, lookback_days, description, weighting, half_life)


def polling_averages(
    observations: Sequence[Observation],
    time_span_days: float = LOOKBACK_DAYS,
    step_days: float = AVERAGE_STEP_DAYS,
    end_date: Optional[pd.Timestamp] = None,
    weighting: str = "none",
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
) -> List[AggregateEstimate]:
    """
    Rolling series of window averages.
    First window ends time_span_days after the earliest poll; windows advance by
    step_days up to min(end_date, latest poll). Empty windows are skipped.
    """
    if step_days <= 0:
        raise ValueError("step_days must be > 0.")
    if weighting not in WEIGHTINGS:
        raise ValueError(f"Unknown weighting {weighting!r}; expected one of {WEIGHTINGS}")
    if not observations:
        return []

    earliest = min(o.timestamp for o in observations)
    latest = max(o.timestamp for o in observations)
    last = latest if end_date is None else min(pd.Timestamp(end_date), latest)

    out: List[AggregateEstimate] = []
    current = earliest + pd.Timedelta(days=time_span_days)
    step = pd.Timedelta(days=step_days)
    while current <= last:
        est = _window_estimate(
            observations,
            current,
            time_span_days,
            f"{time_span_days:g} days ending {current:%Y-%m-%d}",
            weighting,
            half_life,
        )
        if est is not None:
            out.append(est)
        current = current + step
    return out


def averages_frame(averages: Sequence[AggregateEstimate]) -> pd.DataFrame:
    rows = []
    for a in averages:
        row = {
            "as_of": a.as_of,
            "window": a.window_description,
            "n_polls": a.observation_count,
            "sources": ", ".join(a.contributing_sources),
        }
        for party in PARTIES:
            row[party.value] = a.categories.get(party, np.nan)
        rows.append(row)
    cols = ["as_of", "window", "n_polls", "sources"] + [p.value for p in PARTIES]
    return pd.DataFrame(rows, columns=cols)
