from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from house_core.adjustment import apply_corrections
from house_core.constants import ESTIMATORS, WEIGHTINGS
from house_core.house_effects import latest_timestamp, make_estimator
from house_core.runner import load_inputs
from standings_core.standings import weighting_comparison


def print_report(table: pd.DataFrame) -> None:
    if table.empty:
        print("No data for this configuration.")
        return
    for days, g in table.groupby("period_days", sort=False):
        print(f"{days:g}-day lookback:")
        for _, r in g.iterrows():
            diff = r.get("diff_vs_none")
            diff_txt = "" if pd.isna(diff) else f" (total diff vs none {diff:.2f})"
            top = r.drop(["period_days", "weighting", "n_polls", "diff_vs_none"]).dropna()
            top = pd.to_numeric(top).sort_values(ascending=False).head(5)
            parties = ", ".join(f"{k} {v:.1f}%" for k, v in top.items())
            print(f"  {r['weighting']:<12} n={int(r['n_polls'])}: {parties}{diff_txt}")
        print()


def main():
    parser = argparse.ArgumentParser(description="Compare recency weighting schemes across lookback periods.")
    parser.add_argument("--polls-csv", default=None, help="Poll export path or filename under --data-dir")
    parser.add_argument("--data-dir", default="data", help="Directory to search for the poll export")
    parser.add_argument("--periods", default="7,14,60,120", help="Comma-separated lookback periods in days")
    parser.add_argument(
        "--weightings",
        default="none,exponential,linear",
        help=f"Comma-separated weightings from {WEIGHTINGS}",
    )
    parser.add_argument("--half-life", type=float, default=5.0, help="Half-life for exponential weighting")
    parser.add_argument("--estimator", choices=ESTIMATORS, default="rolling", help="House-effect estimator")
    parser.add_argument("--raw", action="store_true", help="Compare raw polls instead of house-adjusted polls")
    parser.add_argument("--out", default=None, help="Optional CSV output path")
    args = parser.parse_args()

    periods = [float(x) for x in args.periods.split(",") if x.strip()]
    weightings = [x.strip() for x in args.weightings.split(",") if x.strip()]
    unknown = [w for w in weightings if w not in WEIGHTINGS]
    if unknown:
        raise SystemExit(f"Unknown weighting(s): {unknown}. Expected one of {WEIGHTINGS}")

    polls = load_inputs(args.polls_csv, args.data_dir)
    if not args.raw:
        estimate = make_estimator(args.estimator, reference_date=latest_timestamp(polls))
        polls = apply_corrections(polls, estimate(polls))

    table = weighting_comparison(polls, periods=periods, weightings=weightings, half_life=args.half_life)
    print_report(table)

    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(out, index=False)
        print("Wrote:", out)


if __name__ == "__main__":
    main()
