from __future__ import annotations

from pathlib import Path
from typing import Optional

from house_core.analysis import PollAnalysis, analyze_polls
from house_core.house_effects import latest_timestamp, make_estimator
from house_core.runner import format_house_effects, load_inputs

from .charts import draw_bloc_trend_chart, draw_standings_chart, draw_trend_chart
from .config import StandingsConfig
from .seats import (
    BlocTrendPoint,
    SeatAllocator,
    SeatProjection,
    SeatProjectionError,
    bloc_analysis,
    bloc_chart,
    bloc_trend,
    bloc_trend_frame,
    fetch_seat_allocation,
    seat_projection,
    seat_projection_chart,
    seat_service_url,
)
from .standings import Standings, adjustment_comparison, current_standings, standings_bar_chart, standings_summary


def print_comparison(analysis: PollAnalysis, cfg: StandingsConfig) -> None:
    _, _, diff = adjustment_comparison(
        analysis.observations,
        analysis.adjusted,
        lookback_days=cfg.lookback_days,
        weighting=cfg.weighting,
        half_life=cfg.half_life,
    )
    if diff.empty:
        return
    print("House effect impact (adjusted - raw):")
    for _, r in diff.iterrows():
        print(f"  {r['party']:<8} {r['raw_pct']:5.1f}% -> {r['adjusted_pct']:5.1f}% ({r['difference']:+.1f})")


def project_seats(standings: Standings, allocate: SeatAllocator = fetch_seat_allocation) -> Optional[SeatProjection]:
    print(f"Seat service: {seat_service_url(standings)}")
    try:
        projection = seat_projection(standings, allocate)
    except SeatProjectionError as e:
        print(f"Seat projection skipped: {e}")
        return None
    print(seat_projection_chart(projection))
    print()
    print(bloc_chart(bloc_analysis(projection)))
    return projection


def run_bloc_trend(
    analysis: PollAnalysis,
    cfg: StandingsConfig,
    allocate: SeatAllocator = fetch_seat_allocation,
) -> list[BlocTrendPoint]:
    points = bloc_trend(
        analysis.adjusted,
        lookback_days=cfg.lookback_days,
        weighting=cfg.weighting,
        timeframe_days=cfg.trend_days,
        day_step=cfg.trend_step,
        half_life=cfg.half_life,
        allocate=allocate,
    )
    if not points:
        print("No data for this configuration: no bloc trend points (need 3+ polls per window).")
        return points

    first, last = points[0], points[-1]
    print(f"Bloc trend: {len(points)} points, {first.date:%Y-%m-%d} to {last.date:%Y-%m-%d}")
    print(f"  Red-Green: {first.red_seats} -> {last.red_seats} seats ({last.red_seats - first.red_seats:+d})")
    print(f"  Blue:      {first.blue_seats} -> {last.blue_seats} seats ({last.blue_seats - first.blue_seats:+d})")

    out = Path(cfg.out_dir)
    out.mkdir(parents=True, exist_ok=True)
    csv_path = out / "bloc_trend.csv"
    bloc_trend_frame(points).to_csv(csv_path, index=False)
    print("Wrote:", csv_path)
    if cfg.charts:
        for mode in ("seats", "votes"):
            print("Wrote:", draw_bloc_trend_chart(points, out / f"bloc_trend_{mode}.png", mode=mode))
    return points


def run_standings(cfg: StandingsConfig, allocate: SeatAllocator = fetch_seat_allocation) -> Optional[Standings]:
    polls = load_inputs(cfg.polls_csv, cfg.data_dir)
    estimator = make_estimator(
        cfg.estimator,
        half_life_days=cfg.decay_half_life,
        reference_date=latest_timestamp(polls),
    )
    analysis = analyze_polls(
        polls,
        estimator=estimator,
        lookback_days=cfg.lookback_days,
        weighting=cfg.weighting,
        half_life=cfg.half_life,
    )
    print(format_house_effects(analysis.effects))
    print()

    standings = current_standings(
        analysis.adjusted,
        lookback_days=cfg.lookback_days,
        weighting=cfg.weighting,
        half_life=cfg.half_life,
    )
    if standings is None:
        print("No data for this configuration: no polls inside the lookback window.")
        return None

    print(standings_bar_chart(standings))
    print()
    print(standings_summary(standings))
    print()
    print_comparison(analysis, cfg)

    if cfg.seats:
        print()
        project_seats(standings, allocate)

    if cfg.bloc_trend:
        print()
        run_bloc_trend(analysis, cfg, allocate)

    if cfg.charts:
        out = Path(cfg.out_dir)
        print("Wrote:", draw_standings_chart(standings, out / "standings.png"))
        if analysis.averages:
            print("Wrote:", draw_trend_chart(analysis.averages, out / "trend.png"))
    return standings
