"""Tests for house-effect correction."""

import pytest

from house_core.adjustment import adjustment_summary, apply_corrections, as_unadjusted
from house_core.constants import Party
from house_core.models import HouseEffect


@pytest.fixture
def effects():
    return {"A": HouseEffect(source="A", per_category={Party.Ap: 2.0, Party.Frp: -1.5}, observation_count=3)}


class TestApplyCorrections:
    """Tests for apply_corrections."""

    def test_subtracts_bias(self, make_poll, effects):
        poll = make_poll("A", 0, {"Ap": 32, "Frp": 20, "SV": 6})
        (adj,) = apply_corrections([poll], effects)
        assert adj.categories[Party.Ap] == pytest.approx(30.0)
        assert adj.categories[Party.Frp] == pytest.approx(21.5)
        assert adj.adjustments == pytest.approx({Party.Ap: -2.0, Party.Frp: 1.5})

    def test_unestimated_party_passes_through(self, make_poll, effects):
        poll = make_poll("A", 0, {"Ap": 32, "SV": 6})
        (adj,) = apply_corrections([poll], effects)
        assert adj.categories[Party.SV] == 6
        assert Party.SV not in adj.adjustments

    def test_unknown_house_passes_through(self, make_poll, effects):
        poll = make_poll("Z", 0, {"Ap": 25})
        (adj,) = apply_corrections([poll], effects)
        assert adj.categories == {Party.Ap: 25.0}
        assert adj.adjustments == {}

    def test_original_recoverable(self, make_poll, effects):
        poll = make_poll("A", 0, {"Ap": 32, "Frp": 20})
        (adj,) = apply_corrections([poll], effects)
        assert adj.original_categories == poll.categories
        for party, delta in adj.adjustments.items():
            assert adj.categories[party] - delta == pytest.approx(poll.categories[party])

    def test_inputs_untouched(self, make_poll, effects):
        poll = make_poll("A", 0, {"Ap": 32})
        apply_corrections([poll], effects)
        assert poll.categories == {Party.Ap: 32.0}
        assert effects["A"].per_category[Party.Ap] == 2.0

    def test_metadata_kept(self, make_poll, effects):
        poll = make_poll("A", 4, {"Ap": 32})
        (adj,) = apply_corrections([poll], effects)
        assert adj.source == "A"
        assert adj.timestamp == poll.timestamp

    def test_as_unadjusted(self, make_poll):
        poll = make_poll("A", 0, {"Ap": 32})
        (adj,) = as_unadjusted([poll])
        assert adj.categories == poll.categories
        assert adj.adjustments == {}


class TestAdjustmentSummary:
    """Tests for adjustment_summary."""

    def test_largest(self, make_poll, effects):
        poll = make_poll("A", 0, {"Ap": 32, "Frp": 20})
        summary = adjustment_summary(apply_corrections([poll], effects)[0])
        assert summary.has_adjustments
        assert summary.adjustment_count == 2
        assert summary.largest_adjustment[0] == Party.Ap
        assert summary.largest_adjustment[1] == pytest.approx(-2.0)

    def test_no_adjustments(self, make_poll):
        summary = adjustment_summary(as_unadjusted([make_poll("A", 0, {"Ap": 32})])[0])
        assert not summary.has_adjustments
        assert summary.largest_adjustment is None
