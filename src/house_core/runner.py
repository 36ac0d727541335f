from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Optional

import pandas as pd

from .adjustment import adjustment_summary
from .analysis import PollAnalysis, analyze_polls
from .averages import averages_frame
from .config import HouseEffectsConfig
from .constants import PARTIES
from .house_effects import HouseEffect, extreme_effects, house_effects_frame, latest_timestamp, make_estimator
from .models import AggregateEstimate, Observation
from .poll_loading import load_polls, observations_frame, resolve_polls_csv


def format_house_effects(effects: Mapping[str, HouseEffect]) -> str:
    """One block per house; '+' means the house overestimates the party."""
    lines = ["House effects (+ = overestimates, - = underestimates):", ""]
    for source in sorted(effects):
        he = effects[source]
        cells = []
        for party in PARTIES:
            v = he.get(party)
            cells.append(f"{party}: n/a" if v is None else f"{party}: {v:+.1f}")
        lines.append(f"{source} ({he.observation_count} polls):")
        lines.append("  " + ", ".join(cells))
        lines.append("")

    top, bottom = extreme_effects(effects)
    if top is not None:
        lines.append(f"Largest overestimate: {top[0]} overestimates {top[1]} by {top[2]:+.2f} points")
    if bottom is not None:
        lines.append(f"Largest underestimate: {bottom[0]} underestimates {bottom[1]} by {bottom[2]:.2f} points")
    return "\n".join(lines)


def estimate_payload(est: AggregateEstimate) -> dict:
    return {
        "as_of": est.as_of.strftime("%Y-%m-%d"),
        "window": est.window_description,
        "n_polls": est.observation_count,
        "sources": list(est.contributing_sources),
        "parties": {p.value: round(v, 3) for p, v in est.categories.items()},
    }


def write_outputs(out_dir: Path, analysis: PollAnalysis) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    effects_df = house_effects_frame(analysis.effects)
    adjusted_df = observations_frame(analysis.adjusted)
    averages_df = averages_frame(analysis.averages)
    summaries_df = pd.DataFrame([vars(adjustment_summary(a)) for a in analysis.adjusted])

    written = []
    for name, df in [
        ("house_effects.csv", effects_df),
        ("adjusted_polls.csv", adjusted_df),
        ("polling_averages.csv", averages_df),
    ]:
        p = out_dir / name
        df.to_csv(p, index=False)
        written.append(p)

    xlsx = out_dir / "house_effects.xlsx"
    with pd.ExcelWriter(xlsx, engine="openpyxl") as writer:
        effects_df.to_excel(writer, sheet_name="house_effects", index=False)
        adjusted_df.to_excel(writer, sheet_name="adjusted_polls", index=False)
        averages_df.to_excel(writer, sheet_name="polling_averages", index=False)
        if not summaries_df.empty:
            summaries_df["largest_adjustment"] = summaries_df["largest_adjustment"].map(
                lambda x: "" if x is None else f"{x[0]} {x[1]:+.2f}"
            )
            summaries_df.to_excel(writer, sheet_name="adjustments", index=False)
    written.append(xlsx)

    if analysis.current is not None:
        snap = out_dir / "current_estimate.json"
        snap.write_text(json.dumps(estimate_payload(analysis.current), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        written.append(snap)
    return written


def load_inputs(polls_csv: Optional[str], data_dir: str) -> List[Observation]:
    try:
        polls_csv = resolve_polls_csv(polls_csv, data_dir)
    except FileNotFoundError as e:
        raise SystemExit(
            "Input resolution failed. Place the poll export (.csv) under data/ or pass --polls-csv.\n"
            f"Detail: {e}"
        )
    print(f"Using poll export: {polls_csv}")

    try:
        polls = load_polls(polls_csv)
    except ValueError as e:
        raise SystemExit(f"Input data invalid: {e}")
    if not polls:
        raise SystemExit(f"No data for this configuration: {polls_csv} contains no polls.")
    return polls


def run_house_effects(cfg: HouseEffectsConfig) -> PollAnalysis:
    polls = load_inputs(cfg.polls_csv, cfg.data_dir)

    estimator = make_estimator(
        cfg.estimator,
        window_days=cfg.window_days,
        min_observations=cfg.min_observations,
        half_life_days=cfg.decay_half_life,
        reference_date=latest_timestamp(polls),
    )
    analysis = analyze_polls(
        polls,
        estimator=estimator,
        lookback_days=cfg.lookback_days,
        weighting=cfg.weighting,
        half_life=cfg.half_life,
        step_days=cfg.average_step_days,
    )

    summary = analysis.summary()
    print(
        f"Analysed {summary['total_polls']} polls from {len(summary['pollsters'])} houses "
        f"({summary['earliest']:%Y-%m-%d} to {summary['latest']:%Y-%m-%d}), estimator={cfg.estimator}"
    )
    print(format_house_effects(analysis.effects))

    if analysis.current is None:
        print("No data for this configuration: no polls inside the lookback window.")
    else:
        print(json.dumps(estimate_payload(analysis.current), ensure_ascii=False, indent=2))

    if cfg.write_outputs:
        for p in write_outputs(Path(cfg.out_dir), analysis):
            print("Wrote:", p)
    return analysis
