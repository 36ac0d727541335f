from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import pandas as pd

from house_core.averages import averages_frame
from house_core.constants import PARTIES, Party
from house_core.models import AggregateEstimate

from .constants import PARTY_COLORS
from .seats import BlocTrendPoint
from .standings import Standings


def draw_standings_chart(standings: Standings, out_png: Path) -> Path:
    names = [s.display_name for s in standings.shares]
    values = [s.percentage for s in standings.shares]
    colors = [PARTY_COLORS[s.party] for s in standings.shares]

    plt.figure(figsize=(10, 6))
    bars = plt.bar(names, values, color=colors, edgecolor="black", linewidth=0.5)
    for bar, v in zip(bars, values):
        plt.text(bar.get_x() + bar.get_width() / 2, v + 0.3, f"{v:.1f}%", ha="center", va="bottom", fontsize=9)

    plt.title(
        f"Current standings {standings.date:%Y-%m-%d} "
        f"({standings.lookback_days:g} days, {standings.poll_count} polls, weighting={standings.weighting})"
    )
    plt.ylabel("Share (%)")
    plt.grid(axis="y", alpha=0.2)
    plt.ylim(0, (max(values) if values else 1.0) * 1.15)
    plt.tight_layout()
    out_png.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_png, dpi=160)
    plt.close()
    return out_png


def draw_trend_chart(averages: Sequence[AggregateEstimate], out_png: Path) -> Path:
    df = averages_frame(averages)
    if df.empty:
        raise ValueError("No averages to plot.")
    df["as_of"] = pd.to_datetime(df["as_of"])
    df = df.sort_values("as_of")

    plt.figure(figsize=(12, 6))
    for party in PARTIES:
        if party.value not in df.columns:
            continue
        s = pd.to_numeric(df[party.value], errors="coerce")
        if s.notna().sum() == 0:
            continue
        plt.plot(df["as_of"], s, label=party.value, linewidth=2.4, color=PARTY_COLORS[party])

    plt.title("House-adjusted polling average")
    plt.xlabel("Window end")
    plt.ylabel("Share (%)")
    plt.grid(alpha=0.2)
    plt.legend()
    plt.tight_layout()
    out_png.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_png, dpi=160)
    plt.close()
    return out_png


def draw_bloc_trend_chart(points: Sequence[BlocTrendPoint], out_png: Path, mode: str = "seats") -> Path:
    if mode not in ("seats", "votes"):
        raise ValueError(f"Unknown mode {mode!r}; expected 'seats' or 'votes'")
    if not points:
        raise ValueError("No bloc trend points to plot.")

    dates = [p.date for p in points]
    if mode == "seats":
        red = [p.red_seats for p in points]
        blue = [p.blue_seats for p in points]
        majority = points[-1].total_seats // 2 + 1
        ylabel, majority_label = "Seats", f"Majority: {majority} seats"
    else:
        red = [p.red_share for p in points]
        blue = [p.blue_share for p in points]
        majority = 50
        ylabel, majority_label = "Share (%)", "Majority: 50%"

    plt.figure(figsize=(12, 6))
    plt.plot(dates, red, label="Red-Green bloc", linewidth=2.4, color=PARTY_COLORS[Party.Ap])
    plt.fill_between(dates, red, alpha=0.1, color=PARTY_COLORS[Party.Ap])
    plt.plot(dates, blue, label="Blue bloc", linewidth=2.4, color=PARTY_COLORS[Party.Høyre])
    plt.fill_between(dates, blue, alpha=0.1, color=PARTY_COLORS[Party.Høyre])
    plt.axhline(majority, linestyle="--", linewidth=1.2, color="black", alpha=0.6, label=majority_label)

    plt.title(f"Bloc {mode} over time ({len(points)} points, {points[0].lookback_days:g}-day rolling average)")
    plt.xlabel("Date")
    plt.ylabel(ylabel)
    plt.grid(alpha=0.2)
    plt.legend()
    plt.tight_layout()
    out_png.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_png, dpi=160)
    plt.close()
    return out_png
