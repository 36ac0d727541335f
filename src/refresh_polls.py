from __future__ import annotations

import argparse
from pathlib import Path

import requests

from house_core.constants import REFRESH_PERIODS
from house_core.poll_loading import load_polls, poll_export_url, refresh_polls, refresh_window


def main():
    parser = argparse.ArgumentParser(description="Download the latest national poll list from Poll of Polls.")
    parser.add_argument("--period", choices=REFRESH_PERIODS, default="from-april", help="Date range to download")
    parser.add_argument("--start", default=None, help="Start date (YYYY-MM-DD) for --period custom")
    parser.add_argument("--end", default=None, help="End date (YYYY-MM-DD) for --period custom")
    parser.add_argument("--out", default="data/polls.csv", help="Output CSV path")
    args = parser.parse_args()

    try:
        start, end = refresh_window(args.period, start=args.start, end=args.end)
    except ValueError as e:
        raise SystemExit(f"Invalid date range: {e}")
    print(f"Date range: {start:%Y-%m-%d} to {end:%Y-%m-%d} ({args.period})")
    print(f"Fetching: {poll_export_url(start, end)}")

    try:
        out = refresh_polls(start, end, Path(args.out))
    except requests.RequestException as e:
        raise SystemExit(f"Poll download failed.\nDetail: {e}")
    except ValueError as e:
        raise SystemExit(f"Input data invalid: {e}")

    print("Wrote:", out)
    print(f"Total polls: {len(load_polls(out))}")


if __name__ == "__main__":
    main()
