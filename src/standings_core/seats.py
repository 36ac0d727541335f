from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import parse_qs, urlparse

import pandas as pd
import requests
from bs4 import BeautifulSoup

from house_core.constants import AVERAGE_HALF_LIFE_DAYS, LOOKBACK_DAYS, USER_AGENT, Party
from house_core.models import Observation

from .constants import (
    BLOC_NAMES,
    MIN_TREND_POLLS,
    PARTY_BLOCS,
    PARTY_PARAMS,
    SEAT_SERVICE_PARAMS,
    SEAT_SERVICE_URL,
    SEAT_THRESHOLD,
    TOTAL_SEATS,
)
from .standings import Standings, current_standings

SeatAllocator = Callable[[Mapping[Party, float]], Dict[Party, int]]


class SeatProjectionError(RuntimeError):
    pass


@dataclass(frozen=True)
class PartySeats:
    party: Party
    percentage: float
    seats: int
    above_threshold: bool


@dataclass(frozen=True)
class SeatProjection:
    date: pd.Timestamp
    lookback_days: float
    poll_count: int
    houses: Tuple[str, ...]
    total_seats: int
    threshold: float
    projections: List[PartySeats]

    @property
    def majority(self) -> int:
        return self.total_seats // 2 + 1

    @property
    def eligible_parties(self) -> int:
        return sum(1 for p in self.projections if p.above_threshold and p.party != Party.Andre)


@dataclass(frozen=True)
class Bloc:
    name: str
    parties: Tuple[Party, ...]
    seats: int
    percentage: float
    has_majority: bool


@dataclass(frozen=True)
class BlocAnalysis:
    date: pd.Timestamp
    lookback_days: float
    poll_count: int
    houses: Tuple[str, ...]
    total_seats: int
    majority: int
    blocs: Dict[str, Bloc]


def _query_url(percentages: Mapping[Party, float]) -> str:
    params = dict(SEAT_SERVICE_PARAMS)
    for party, pct in percentages.items():
        name = PARTY_PARAMS.get(Party(party))
        if name:
            params[name] = f"{pct:.1f}"
    return requests.Request("GET", SEAT_SERVICE_URL, params=params).prepare().url


def seat_service_url(standings: Standings) -> str:
    return _query_url(standings.percentages())


def parse_seat_allocation(html: str) -> Dict[Party, int]:
    """
    Seat counts are only exposed through the query string of the result image
    (image-dev.php?...&Ap=50&H=24...). Empty dict when the image is missing.
    """
    soup = BeautifulSoup(html, "html.parser")
    by_param = {v: k for k, v in PARTY_PARAMS.items()}
    for tag in soup.find_all(True):
        for value in tag.attrs.values():
            if not isinstance(value, str) or "image-dev.php" not in value:
                continue
            qs = parse_qs(urlparse(value).query)
            if not all(param in qs for param in by_param):
                continue
            return {party: int(qs[param][0]) for param, party in by_param.items()}
    return {}


def fetch_seat_allocation(
    percentages: Mapping[Party, float],
    session: Optional[requests.Session] = None,
    timeout: float = 15,
) -> Dict[Party, int]:
    url = _query_url(percentages)
    http = session or requests.Session()
    try:
        resp = http.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise SeatProjectionError(f"Seat service request failed: {e}") from e
    return parse_seat_allocation(resp.text)


def seat_projection(standings: Standings, allocate: SeatAllocator = fetch_seat_allocation) -> SeatProjection:
    allocation = allocate(standings.percentages())
    projections = [
        PartySeats(
            party=s.party,
            percentage=s.percentage,
            seats=allocation.get(s.party, 0),
            above_threshold=s.percentage >= SEAT_THRESHOLD,
        )
        for s in standings.shares
    ]
    return SeatProjection(
        date=standings.date,
        lookback_days=standings.lookback_days,
        poll_count=standings.poll_count,
        houses=standings.houses,
        total_seats=sum(allocation.values()) or TOTAL_SEATS,
        threshold=SEAT_THRESHOLD,
        projections=projections,
    )


def fetch_seat_projection(
    standings: Standings,
    session: Optional[requests.Session] = None,
    timeout: float = 15,
) -> SeatProjection:
    return seat_projection(standings, lambda pct: fetch_seat_allocation(pct, session=session, timeout=timeout))


def bloc_analysis(projection: SeatProjection) -> BlocAnalysis:
    majority = projection.majority
    blocs: Dict[str, Bloc] = {}
    for key, parties in PARTY_BLOCS.items():
        members = [p for p in projection.projections if p.party in parties]
        seats = sum(p.seats for p in members)
        blocs[key] = Bloc(
            name=BLOC_NAMES[key],
            parties=parties,
            seats=seats,
            percentage=sum(p.percentage for p in members),
            has_majority=key != "other" and seats >= majority,
        )
    return BlocAnalysis(
        date=projection.date,
        lookback_days=projection.lookback_days,
        poll_count=projection.poll_count,
        houses=projection.houses,
        total_seats=projection.total_seats,
        majority=majority,
        blocs=blocs,
    )


def seat_projection_chart(projection: SeatProjection, bar_width: int = 50) -> str:
    if not projection.projections:
        return "No data available"
    max_seats = max(p.seats for p in projection.projections)
    lines = [
        "Norwegian Parliament - Seat Projection",
        "=" * 40,
        f"As of: {projection.date:%Y-%m-%d} ({projection.lookback_days:g} days lookback)",
        f"Based on: {projection.poll_count} polls from {len(projection.houses)} houses",
        f"Threshold: {projection.threshold:g}% - Total: {projection.total_seats} seats",
        f"Parties above threshold: {projection.eligible_parties}",
        "",
    ]
    for p in projection.projections:
        bar = "█" * (int(round(p.seats / max_seats * bar_width)) if max_seats > 0 else 0)
        mark = "✓" if p.above_threshold else "✗"
        lines.append(f"{p.party.value:<8}{p.seats:3d} seats ({p.percentage:.1f}%) {mark} {bar}")
    lines.append("")
    lines.append(f"Total: {sum(p.seats for p in projection.projections)} seats")
    lines.append(f"Majority: {projection.majority} seats")
    return "\n".join(lines)


def bloc_chart(analysis: BlocAnalysis, width: int = 60) -> str:
    red, blue, other = analysis.blocs["red"], analysis.blocs["blue"], analysis.blocs["other"]
    red_w = int(round(red.seats / analysis.total_seats * width))
    blue_w = int(round(blue.seats / analysis.total_seats * width))
    other_w = max(0, width - red_w - blue_w)
    lines = [
        "Norwegian Parliament - Bloc Analysis",
        "=" * 38,
        f"As of: {analysis.date:%Y-%m-%d} ({analysis.lookback_days:g} days lookback)",
        f"Based on: {analysis.poll_count} polls from {len(analysis.houses)} houses",
        f"Majority: {analysis.majority} of {analysis.total_seats} seats",
        "",
    ]
    for bloc in (red, blue, other):
        flag = " MAJORITY" if bloc.has_majority else ""
        lines.append(f"{bloc.name + ':':<20} {bloc.seats:3d} seats ({bloc.percentage:.1f}%){flag}")
    lines.append("")
    lines.append("┌" + "─" * width + "┐")
    lines.append("│" + "█" * red_w + "▓" * blue_w + "░" * other_w + "│")
    lines.append("└" + "─" * width + "┘")
    lines.append(f"{red.name}: {red.seats} | {blue.name}: {blue.seats} | {other.name}: {other.seats}")
    return "\n".join(lines)


@dataclass(frozen=True)
class BlocTrendPoint:
    date: pd.Timestamp
    red_seats: int
    blue_seats: int
    other_seats: int
    red_share: float
    blue_share: float
    other_share: float
    total_seats: int
    poll_count: int
    lookback_days: float


def bloc_trend(
    adjusted: Sequence[Observation],
    lookback_days: float = LOOKBACK_DAYS,
    weighting: str = "exponential",
    timeframe_days: float = 90,
    day_step: float = 2,
    half_life: float = AVERAGE_HALF_LIFE_DAYS,
    allocate: SeatAllocator = fetch_seat_allocation,
    min_polls: int = MIN_TREND_POLLS,
) -> List[BlocTrendPoint]:
    """
    Bloc seats and vote shares stepped day by day over the last timeframe_days.
    Each point only sees polls published up to that day; points backed by
    fewer than min_polls polls, or whose seat request fails, are skipped.
    """
    if day_step <= 0:
        raise ValueError("day_step must be > 0.")
    if timeframe_days < 0:
        raise ValueError("timeframe_days must be >= 0.")
    if not adjusted:
        return []

    polls = sorted(adjusted, key=lambda o: o.timestamp)
    start = polls[-1].timestamp - pd.Timedelta(days=timeframe_days)

    out: List[BlocTrendPoint] = []
    offset = 0.0
    while offset <= timeframe_days:
        current = start + pd.Timedelta(days=offset)
        offset += day_step
        seen = [o for o in polls if o.timestamp <= current]
        standings = current_standings(seen, lookback_days, weighting, half_life, sort_by_percentage=False)
        if standings is None or standings.poll_count < min_polls:
            continue
        try:
            projection = seat_projection(standings, allocate)
        except SeatProjectionError as e:
            print(f"Skipped {current:%Y-%m-%d}: {e}")
            continue

        blocs = bloc_analysis(projection).blocs
        red, blue = blocs["red"], blocs["blue"]
        out.append(
            BlocTrendPoint(
                date=current,
                red_seats=red.seats,
                blue_seats=blue.seats,
                other_seats=projection.total_seats - red.seats - blue.seats,
                red_share=red.percentage,
                blue_share=blue.percentage,
                other_share=standings.percentages().get(Party.Andre, 0.0),
                total_seats=projection.total_seats,
                poll_count=standings.poll_count,
                lookback_days=lookback_days,
            )
        )
    return out


def bloc_trend_frame(points: Sequence[BlocTrendPoint]) -> pd.DataFrame:
    cols = [
        "date",
        "red_seats",
        "blue_seats",
        "other_seats",
        "red_share",
        "blue_share",
        "other_share",
        "total_seats",
        "poll_count",
        "lookback_days",
    ]
    return pd.DataFrame([vars(p) for p in points], columns=cols)
