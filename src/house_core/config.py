from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

from .constants import (
    AVERAGE_HALF_LIFE_DAYS,
    AVERAGE_STEP_DAYS,
    BENCHMARK_MIN_OBSERVATIONS,
    DECAY_HALF_LIFE_DAYS,
    ESTIMATORS,
    LOOKBACK_DAYS,
    WEIGHTINGS,
)


@dataclass(frozen=True)
class HouseEffectsConfig:
    polls_csv: Optional[str]
    data_dir: str
    out_dir: str
    estimator: str
    window_days: Optional[float]
    min_observations: int
    decay_half_life: float
    lookback_days: float
    weighting: str
    half_life: float
    average_step_days: float
    write_outputs: bool


def parse_args(argv: Optional[Sequence[str]] = None) -> HouseEffectsConfig:
    parser = argparse.ArgumentParser(description="Estimate pollster house effects and house-adjusted averages.")
    parser.add_argument("--polls-csv", default=None, help="Poll export path or filename under --data-dir")
    parser.add_argument("--data-dir", default="data", help="Directory to search for the poll export")
    parser.add_argument("--out-dir", default="outputs", help="Directory for CSV/XLSX/JSON outputs")
    parser.add_argument("--estimator", choices=ESTIMATORS, default="rolling", help="House-effect estimator")
    parser.add_argument(
        "--window-days",
        type=float,
        default=None,
        help="Benchmark window in days (default: 14 rolling, 21 decayed)",
    )
    parser.add_argument(
        "--min-obs",
        type=int,
        default=BENCHMARK_MIN_OBSERVATIONS,
        help="Minimum polls in a rolling benchmark window before widening to 28/42 days",
    )
    parser.add_argument(
        "--decay-half-life",
        type=float,
        default=DECAY_HALF_LIFE_DAYS,
        help="Half-life in days for the decayed estimator (inf disables decay)",
    )
    parser.add_argument("--lookback-days", type=float, default=LOOKBACK_DAYS, help="Lookback for the current estimate")
    parser.add_argument("--weighting", choices=WEIGHTINGS, default="none", help="Recency weighting of the current estimate")
    parser.add_argument("--half-life", type=float, default=AVERAGE_HALF_LIFE_DAYS, help="Half-life for exponential weighting")
    parser.add_argument("--step-days", type=float, default=AVERAGE_STEP_DAYS, help="Step between rolling averages")
    parser.add_argument("--dry-run", action="store_true", help="Print results without writing files")
    ns = parser.parse_args(argv)
    return HouseEffectsConfig(
        polls_csv=ns.polls_csv,
        data_dir=ns.data_dir,
        out_dir=ns.out_dir,
        estimator=ns.estimator,
        window_days=ns.window_days,
        min_observations=ns.min_obs,
        decay_half_life=ns.decay_half_life,
        lookback_days=ns.lookback_days,
        weighting=ns.weighting,
        half_life=ns.half_life,
        average_step_days=ns.step_days,
        write_outputs=not ns.dry_run,
    )
