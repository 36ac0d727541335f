from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

from house_core.constants import (
    AVERAGE_HALF_LIFE_DAYS,
    DECAY_HALF_LIFE_DAYS,
    ESTIMATORS,
    LOOKBACK_DAYS,
    WEIGHTINGS,
)


@dataclass(frozen=True)
class StandingsConfig:
    lookback_days: float
    weighting: str
    half_life: float
    estimator: str
    decay_half_life: float
    seats: bool
    charts: bool
    bloc_trend: bool
    trend_days: float
    trend_step: float
    polls_csv: Optional[str]
    data_dir: str
    out_dir: str


def parse_args(argv: Optional[Sequence[str]] = None) -> StandingsConfig:
    parser = argparse.ArgumentParser(description="Print house-adjusted standings, seat projection and bloc analysis.")
    parser.add_argument(
        "lookback",
        nargs="?",
        type=float,
        default=LOOKBACK_DAYS,
        help="Lookback period in days (e.g. 7, 14, 30, 60, 120)",
    )
    parser.add_argument("--weighting", choices=WEIGHTINGS, default="none", help="Recency weighting")
    parser.add_argument("--half-life", type=float, default=AVERAGE_HALF_LIFE_DAYS, help="Half-life for exponential weighting")
    parser.add_argument("--estimator", choices=ESTIMATORS, default="rolling", help="House-effect estimator")
    parser.add_argument("--decay-half-life", type=float, default=DECAY_HALF_LIFE_DAYS, help="Half-life for the decayed estimator")
    parser.add_argument("--seats", choices=["on", "off"], default="on", help="Fetch seat projection and bloc analysis")
    parser.add_argument("--charts", choices=["on", "off"], default="on", help="Render PNG charts under --out-dir")
    parser.add_argument(
        "--bloc-trend",
        choices=["on", "off"],
        default="off",
        help="Step bloc seats and shares over time (one seat request per point)",
    )
    parser.add_argument("--trend-days", type=float, default=60, help="Bloc trend timeframe in days")
    parser.add_argument("--trend-step", type=float, default=2, help="Days between bloc trend points")
    parser.add_argument("--polls-csv", default=None, help="Poll export path or filename under --data-dir")
    parser.add_argument("--data-dir", default="data", help="Directory to search for the poll export")
    parser.add_argument("--out-dir", default="outputs", help="Directory for charts")
    ns = parser.parse_args(argv)
    if ns.lookback <= 0:
        parser.error("lookback must be > 0")
    if ns.trend_step <= 0:
        parser.error("--trend-step must be > 0")
    return StandingsConfig(
        lookback_days=ns.lookback,
        weighting=ns.weighting,
        half_life=ns.half_life,
        estimator=ns.estimator,
        decay_half_life=ns.decay_half_life,
        seats=ns.seats == "on",
        charts=ns.charts == "on",
        bloc_trend=ns.bloc_trend == "on",
        trend_days=ns.trend_days,
        trend_step=ns.trend_step,
        polls_csv=ns.polls_csv,
        data_dir=ns.data_dir,
        out_dir=ns.out_dir,
    )
