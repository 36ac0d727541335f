from .charts import draw_bloc_trend_chart, draw_standings_chart, draw_trend_chart
from .config import StandingsConfig, parse_args
from .runner import run_standings
from .seats import (
    BlocAnalysis,
    BlocTrendPoint,
    PartySeats,
    SeatProjection,
    SeatProjectionError,
    bloc_analysis,
    bloc_trend,
    fetch_seat_projection,
    parse_seat_allocation,
    seat_projection,
    seat_service_url,
)
from .standings import PartyShare, Standings, adjustment_comparison, current_standings, weighting_comparison

__all__ = [
    "BlocAnalysis",
    "BlocTrendPoint",
    "PartySeats",
    "PartyShare",
    "SeatProjection",
    "SeatProjectionError",
    "Standings",
    "StandingsConfig",
    "adjustment_comparison",
    "bloc_analysis",
    "bloc_trend",
    "current_standings",
    "draw_bloc_trend_chart",
    "draw_standings_chart",
    "draw_trend_chart",
    "fetch_seat_projection",
    "parse_args",
    "parse_seat_allocation",
    "run_standings",
    "seat_projection",
    "seat_service_url",
    "weighting_comparison",
]
