from __future__ import annotations

import math
from typing import Dict, Optional, Sequence

import numpy as np

from .constants import (
    BENCHMARK_MIN_OBSERVATIONS,
    BENCHMARK_WIDENED_WINDOWS,
    BENCHMARK_WINDOW_DAYS,
    PARTIES,
    Party,
)
from .models import DAY, Observation

DAY_NS = DAY.value


def timestamps_ns(observations: Sequence[Observation]) -> np.ndarray:
    return np.array([o.timestamp.value for o in observations], dtype=np.int64)


def window_mask(times_ns: np.ndarray, center_ns: int, window_days: float) -> np.ndarray:
    """Inclusive symmetric window: |t - center| <= window_days."""
    half_width = int(round(window_days * DAY_NS))
    return np.abs(times_ns - center_ns) <= half_width


def category_means(observations: Sequence[Observation]) -> Dict[Party, float]:
    """Per-party mean over the observations that measured that party."""
    out: Dict[Party, float] = {}
    for party in PARTIES:
        vals = [o.categories[party] for o in observations if party in o.categories]
        if vals:
            out[party] = math.fsum(vals) / len(vals)
    return out


def benchmark(
    target: Observation,
    observations: Sequence[Observation],
    window_days: float = BENCHMARK_WINDOW_DAYS,
    min_observations: int = BENCHMARK_MIN_OBSERVATIONS,
) -> Optional[Dict[Party, float]]:
    """
    Time-local consensus around one target observation.
    - all observations within +/- window_days (target included)
    - widen to 28, then 42 days while fewer than min_observations are found
    - None only when even the widest window is empty
    """
    return rolling_benchmark(target, observations, timestamps_ns(observations), window_days, min_observations)


def rolling_benchmark(
    target: Observation,
    observations: Sequence[Observation],
    times_ns: np.ndarray,
    window_days: float = BENCHMARK_WINDOW_DAYS,
    min_observations: int = BENCHMARK_MIN_OBSERVATIONS,
) -> Optional[Dict[Party, float]]:
    if min_observations < 0:
        raise ValueError("min_observations must be >= 0.")
    center = target.timestamp.value

    selected = _select(observations, window_mask(times_ns, center, window_days))
    for wider in BENCHMARK_WIDENED_WINDOWS:
        if len(selected) >= min_observations:
            break
        selected = _select(observations, window_mask(times_ns, center, wider))

    if not selected:
        return None
    return category_means(selected)


def peer_benchmark(
    target: Observation,
    observations: Sequence[Observation],
    times_ns: np.ndarray,
    window_days: float,
) -> Dict[Party, float]:
    """
    Fixed-window consensus over the target's peers (target excluded).
    A party no peer measured takes the target's own value, so the target
    alone is the benchmark when no peer is inside the window.
    """
    mask = window_mask(times_ns, target.timestamp.value, window_days)
    peers = [o for o, keep in zip(observations, mask) if keep and o is not target]
    ref = category_means(peers)
    for party, value in target.categories.items():
        ref.setdefault(party, value)
    return ref


def _select(observations: Sequence[Observation], mask: np.ndarray) -> list:
    return [o for o, keep in zip(observations, mask) if keep]
