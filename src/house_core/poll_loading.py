from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import requests

from .constants import (
    CSV_DELIMITER,
    DATE_COL,
    EXPORT_PREAMBLE,
    HEADER_MARKER,
    MOJIBAKE_FIXES,
    PARTIES,
    POLL_EXPORT_PARAMS,
    POLL_EXPORT_URL,
    REFRESH_PERIODS,
    USER_AGENT,
    Party,
)
from .models import AdjustedObservation, Observation

DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})-(\d{4})")


def clean_encoding(text: str) -> str:
    for broken, fixed in MOJIBAKE_FIXES.items():
        text = text.replace(broken, fixed)
    return text


def parse_date(s: str) -> pd.Timestamp:
    """Parse 'DD/M-YYYY' such as '22/8-2025'."""
    m = DATE_RE.search(str(s))
    if m is None:
        raise ValueError(f"Unparseable poll date: {s!r}")
    day, month, year = (int(g) for g in m.groups())
    return pd.Timestamp(year=year, month=month, day=day)


def parse_percentage(s: str) -> Optional[float]:
    """
    '26,7 (50)' -> 26.7 (seat count in parentheses ignored).
    Blank cells are missing values; anything else non-numeric raises.
    """
    token = str(s).strip()
    if token == "":
        return None
    token = token.split(" ")[0].replace(",", ".")
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"Non-numeric poll value: {s!r}") from None


def parse_polls(text: str) -> List[Observation]:
    lines = text.splitlines()
    start = next((i for i, line in enumerate(lines) if HEADER_MARKER in line), None)
    if start is None:
        raise ValueError(f"Header row with '{HEADER_MARKER}' not found in poll export")

    df = pd.read_csv(
        io.StringIO("\n".join(lines[start:])),
        sep=CSV_DELIMITER,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in [HEADER_MARKER, DATE_COL] if c not in df.columns]
    if missing:
        raise ValueError(f"Poll export is missing columns: {missing}")
    party_cols = [p for p in PARTIES if p.value in df.columns]

    polls: List[Observation] = []
    for _, row in df.iterrows():
        house = str(row[HEADER_MARKER]).split("/")[0].strip()
        if house == "":
            continue
        categories: Dict[Party, Optional[float]] = {p: parse_percentage(row[p.value]) for p in party_cols}
        polls.append(Observation(source=house, timestamp=parse_date(row[DATE_COL]), categories=categories))

    return sorted(polls, key=lambda o: o.timestamp)


def load_polls(path: Path) -> List[Observation]:
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_polls(clean_encoding(text))


def _normalize_path(data_dir: Path, explicit: Optional[str]) -> Optional[Path]:
    if explicit is None:
        return None
    p = Path(explicit)
    if not p.is_absolute():
        p = data_dir / p
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    return p


def _looks_like_poll_csv(path: Path) -> bool:
    try:
        head = clean_encoding(path.read_text(encoding="utf-8", errors="replace")[:4096])
    except OSError:
        return False
    return HEADER_MARKER in head and CSV_DELIMITER in head


def resolve_polls_csv(polls_csv: Optional[str], data_dir: str) -> Path:
    d = Path(data_dir)
    explicit = _normalize_path(d, polls_csv)
    if explicit is not None:
        return explicit
    if not d.is_dir():
        raise FileNotFoundError(f"Data directory not found: {d}")

    candidates = sorted(d.glob("*.csv"), key=lambda x: x.stat().st_mtime, reverse=True)
    for c in candidates:
        if _looks_like_poll_csv(c):
            return c
    raise FileNotFoundError(f"No poll export (';'-separated with a '{HEADER_MARKER}' header) found in: {d}")


def observations_frame(observations: Sequence[Observation]) -> pd.DataFrame:
    rows = []
    for o in observations:
        row = {"source": o.source, "date": o.timestamp}
        for party in PARTIES:
            row[party.value] = o.categories.get(party, np.nan)
        if isinstance(o, AdjustedObservation):
            for party in PARTIES:
                row[f"raw__{party.value}"] = o.original_categories.get(party, np.nan)
                row[f"adj__{party.value}"] = o.adjustments.get(party, np.nan)
        rows.append(row)
    return pd.DataFrame(rows)


def refresh_window(
    period: str,
    today: Optional[pd.Timestamp] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """(start, end) dates for a named download period."""
    now = pd.Timestamp.today().normalize() if today is None else pd.Timestamp(today).normalize()
    if period == "from-april":
        return pd.Timestamp(now.year, 4, 1), pd.Timestamp(now.year, 12, 31)
    if period == "current-year":
        return pd.Timestamp(now.year, 1, 1), pd.Timestamp(now.year, 12, 31)
    if period == "last-6-months":
        return now - pd.DateOffset(months=6), now
    if period == "election-cycle":
        return pd.Timestamp(2023, 1, 1), pd.Timestamp(2025, 12, 31)
    if period == "custom":
        if not start or not end:
            raise ValueError("A custom period needs both start and end dates.")
        return pd.Timestamp(start), pd.Timestamp(end)
    raise ValueError(f"Unknown period {period!r}; expected one of {REFRESH_PERIODS}")


def poll_export_url(start: pd.Timestamp, end: pd.Timestamp) -> str:
    params = dict(POLL_EXPORT_PARAMS)
    params["start"] = f"{pd.Timestamp(start):%Y-%m-%d}"
    params["slutt"] = f"{pd.Timestamp(end):%Y-%m-%d}"
    return requests.Request("GET", POLL_EXPORT_URL, params=params).prepare().url


def refresh_polls(
    start: pd.Timestamp,
    end: pd.Timestamp,
    out_path: Path,
    session: Optional[requests.Session] = None,
    timeout: float = 30,
) -> Path:
    """
    Download the national poll list, repair its encoding and write it as UTF-8.
    The description line is prepended when missing; a download without a
    header row raises ValueError and leaves out_path untouched.
    """
    if pd.Timestamp(end) < pd.Timestamp(start):
        raise ValueError("end must not be before start.")
    http = session or requests.Session()
    resp = http.get(poll_export_url(start, end), headers={"User-Agent": USER_AGENT}, timeout=timeout)
    resp.raise_for_status()

    text = clean_encoding(resp.content.decode("utf-8", errors="replace"))
    if HEADER_MARKER not in text:
        raise ValueError(f"Downloaded export has no '{HEADER_MARKER}' header row")
    if EXPORT_PREAMBLE.split(".")[0] not in text:
        text = f"{EXPORT_PREAMBLE}\n\n{text}"

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    return out
