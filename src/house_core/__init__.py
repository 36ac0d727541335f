from .adjustment import adjustment_summary, apply_corrections
from .analysis import PollAnalysis, analyze_polls
from .averages import current_estimate, polling_averages
from .benchmark import benchmark
from .config import HouseEffectsConfig, parse_args
from .constants import PARTIES, Party
from .house_effects import (
    DecayedHouseEffects,
    RollingHouseEffects,
    estimate_decayed_effects,
    estimate_effects,
    latest_timestamp,
    make_estimator,
)
from .models import AdjustedObservation, AggregateEstimate, EnhancedHouseEffect, HouseEffect, Observation
from .poll_loading import load_polls, parse_polls
from .runner import run_house_effects

__all__ = [
    "AdjustedObservation",
    "AggregateEstimate",
    "DecayedHouseEffects",
    "EnhancedHouseEffect",
    "HouseEffect",
    "HouseEffectsConfig",
    "Observation",
    "PARTIES",
    "Party",
    "PollAnalysis",
    "RollingHouseEffects",
    "adjustment_summary",
    "analyze_polls",
    "apply_corrections",
    "benchmark",
    "current_estimate",
    "estimate_decayed_effects",
    "estimate_effects",
    "latest_timestamp",
    "load_polls",
    "make_estimator",
    "parse_args",
    "parse_polls",
    "polling_averages",
    "run_house_effects",
]
