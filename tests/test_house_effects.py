"""Tests for rolling-window house effects."""

import random

import pytest

from house_core.constants import Party
from house_core.house_effects import (
    RollingHouseEffects,
    estimate_effects,
    extreme_effects,
    house_effects_frame,
    make_estimator,
)


@pytest.fixture
def two_houses(make_poll):
    """House A sits 2 points above house B on Ap in every week."""
    return [
        make_poll("A", 0, {"Ap": 32, "SV": 6}),
        make_poll("B", 0, {"Ap": 28}),
        make_poll("A", 7, {"Ap": 32, "SV": 6}),
        make_poll("B", 7, {"Ap": 28}),
    ]


class TestEstimateEffects:
    """Tests for estimate_effects."""

    def test_symmetric_bias(self, two_houses):
        effects = estimate_effects(two_houses, min_observations=1)
        assert effects["A"].get(Party.Ap) == pytest.approx(2.0)
        assert effects["B"].get(Party.Ap) == pytest.approx(-2.0)

    def test_observation_counts(self, two_houses):
        effects = estimate_effects(two_houses, min_observations=1)
        assert effects["A"].observation_count == 2
        assert effects["B"].observation_count == 2

    def test_absent_category_left_out(self, two_houses):
        """B never measured SV, so it gets no SV effect."""
        effects = estimate_effects(two_houses, min_observations=1)
        assert Party.SV not in effects["B"].per_category
        assert effects["A"].get(Party.SV) == pytest.approx(0.0)

    def test_order_independent(self, two_houses, make_poll):
        polls = two_houses + [make_poll("C", 3, {"Ap": 31, "Frp": 20})]
        shuffled = list(polls)
        random.Random(7).shuffle(shuffled)

        a = estimate_effects(polls)
        b = estimate_effects(shuffled)
        assert list(a) == list(b)
        for source in a:
            assert a[source].per_category == pytest.approx(b[source].per_category)
            assert a[source].observation_count == b[source].observation_count

    def test_empty(self):
        assert estimate_effects([]) == {}

    def test_single_house_has_zero_effect(self, make_poll):
        polls = [make_poll("A", 0, {"Ap": 30}), make_poll("A", 3, {"Ap": 34})]
        effects = estimate_effects(polls)
        assert effects["A"].get(Party.Ap) == pytest.approx(0.0)


class TestEstimatorInterface:
    """Tests for the interchangeable estimator callables."""

    def test_rolling_matches_function(self, two_houses):
        est = RollingHouseEffects(min_observations=1)
        assert est(two_houses)["A"].per_category == pytest.approx(
            estimate_effects(two_houses, min_observations=1)["A"].per_category
        )

    def test_make_estimator_defaults(self):
        est = make_estimator("rolling")
        assert isinstance(est, RollingHouseEffects)
        assert est.window_days == 14
        assert est.min_observations == 5

    def test_make_estimator_unknown(self):
        with pytest.raises(ValueError):
            make_estimator("kalman")


class TestReporting:
    """Tests for effect summaries."""

    def test_extremes(self, two_houses):
        effects = estimate_effects(two_houses, min_observations=1)
        top, bottom = extreme_effects(effects)
        assert top[0] == "A" and top[1] == Party.Ap
        assert top[2] == pytest.approx(2.0)
        assert bottom[0] == "B" and bottom[2] == pytest.approx(-2.0)

    def test_largest(self, two_houses):
        effects = estimate_effects(two_houses, min_observations=1)
        party, value = effects["A"].largest()
        assert party == Party.Ap
        assert value == pytest.approx(2.0)

    def test_frame(self, two_houses):
        df = house_effects_frame(estimate_effects(two_houses, min_observations=1))
        assert list(df.columns) == ["source", "party", "effect", "observation_count"]
        assert len(df) == 3


class TestDriftingHouse:
    """A and B agree at Ap=25 on day 0; on day 30 A reports 29 and B stays at 25."""

    @pytest.fixture
    def drift(self, make_poll):
        return [
            make_poll("A", 0, {"Ap": 25}),
            make_poll("B", 0, {"Ap": 25}),
            make_poll("A", 30, {"Ap": 29}),
            make_poll("B", 30, {"Ap": 25}),
        ]

    def test_default_cascade(self, drift):
        """Sparse windows widen to 42 days: every benchmark is the 26.0 mean of all polls."""
        effects = estimate_effects(drift)
        assert effects["A"].get(Party.Ap) > 0
        assert effects["A"].get(Party.Ap) == pytest.approx(1.0)
        assert effects["B"].get(Party.Ap) == pytest.approx(-1.0)

    def test_same_day_windows(self, drift):
        """With both houses inside each 14-day window, A's day-30 lead splits evenly."""
        effects = estimate_effects(drift, min_observations=2)
        assert effects["A"].get(Party.Ap) == pytest.approx(1.0)
        assert effects["B"].get(Party.Ap) == pytest.approx(-1.0)
