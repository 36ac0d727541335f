"""Tests for reading the semicolon-separated poll export."""

import os

import pandas as pd
import pytest
import requests

from house_core.constants import Party
from house_core.poll_loading import (
    clean_encoding,
    load_polls,
    observations_frame,
    parse_date,
    parse_percentage,
    parse_polls,
    poll_export_url,
    refresh_polls,
    refresh_window,
    resolve_polls_csv,
)


class TestParsePolls:
    """Tests for parse_polls."""

    def test_sample_export(self, sample_csv_text):
        polls = parse_polls(sample_csv_text)
        assert len(polls) == 2

        first, second = polls
        assert first.source == "Opinion"
        assert first.timestamp == pd.Timestamp(2025, 8, 20)
        assert first.categories[Party.Ap] == pytest.approx(24.8)
        assert first.categories[Party.Høyre] == pytest.approx(17.9)
        assert first.categories[Party.Andre] == pytest.approx(5.8)
        assert len(first.categories) == 10

        assert second.source == "Verian"
        assert second.categories[Party.Rødt] == pytest.approx(7.3)

    def test_mojibake_header(self, sample_csv_text):
        broken = sample_csv_text.replace("Måling", "M�ling").replace("Høyre", "H�yre")
        polls = parse_polls(clean_encoding(broken))
        assert polls[0].categories[Party.Høyre] == pytest.approx(17.9)

    def test_blank_cell_is_missing(self):
        text = "Måling;Dato;Ap;SV\nNorstat/NRK;3/9-2025;27,0 (49);\n"
        (poll,) = parse_polls(text)
        assert poll.categories == {Party.Ap: 27.0}

    def test_missing_header(self):
        with pytest.raises(ValueError):
            parse_polls("Dato;Ap\n1/1-2025;20\n")

    def test_bad_date(self):
        with pytest.raises(ValueError):
            parse_polls("Måling;Dato;Ap\nNorstat;yesterday;20\n")


class TestFieldParsers:
    """Tests for single-cell parsers."""

    def test_date(self):
        assert parse_date("22/8-2025") == pd.Timestamp(2025, 8, 22)

    def test_percentage_with_seats(self):
        assert parse_percentage("26,7 (50)") == pytest.approx(26.7)

    def test_percentage_blank(self):
        assert parse_percentage("  ") is None

    def test_percentage_garbage(self):
        with pytest.raises(ValueError):
            parse_percentage("n/a")


class TestInputResolution:
    """Tests for locating the poll export on disk."""

    def test_load_file(self, tmp_path, sample_csv_text):
        p = tmp_path / "polls.csv"
        p.write_text(sample_csv_text, encoding="utf-8")
        assert len(load_polls(p)) == 2

    def test_picks_newest_poll_csv(self, tmp_path, sample_csv_text):
        old = tmp_path / "old.csv"
        new = tmp_path / "new.csv"
        other = tmp_path / "other.csv"
        old.write_text(sample_csv_text, encoding="utf-8")
        new.write_text(sample_csv_text, encoding="utf-8")
        other.write_text("a,b\n1,2\n", encoding="utf-8")
        os.utime(old, (1_000_000, 1_000_000))
        os.utime(new, (2_000_000, 2_000_000))
        os.utime(other, (3_000_000, 3_000_000))
        assert resolve_polls_csv(None, str(tmp_path)) == new

    def test_explicit_relative_name(self, tmp_path, sample_csv_text):
        (tmp_path / "polls.csv").write_text(sample_csv_text, encoding="utf-8")
        assert resolve_polls_csv("polls.csv", str(tmp_path)) == tmp_path / "polls.csv"

    def test_explicit_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            resolve_polls_csv("nope.csv", str(tmp_path))

    def test_nothing_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            resolve_polls_csv(None, str(tmp_path))


def test_observations_frame(sample_csv_text):
    df = observations_frame(parse_polls(sample_csv_text))
    assert df["source"].tolist() == ["Opinion", "Verian"]
    assert df.loc[1, "Ap"] == pytest.approx(26.7)


class FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        return self.response


class TestRefreshPolls:
    """Tests for downloading the poll export."""

    @pytest.fixture
    def export_bytes(self, sample_csv_text):
        body = sample_csv_text.split("\n\n", 1)[1]
        return body.encode("latin-1")

    def test_writes_clean_export(self, tmp_path, export_bytes):
        session = FakeSession(FakeResponse(export_bytes))
        out = refresh_polls(pd.Timestamp(2025, 4, 1), pd.Timestamp(2025, 12, 31), tmp_path / "data" / "polls.csv", session=session)

        text = out.read_text(encoding="utf-8")
        assert text.startswith("Oppslutning i prosent.")
        assert "Måling;Dato" in text
        assert "Høyre" in text
        assert len(load_polls(out)) == 2

        url, headers, _ = session.calls[0]
        assert "start=2025-04-01" in url
        assert "slutt=2025-12-31" in url
        assert "User-Agent" in headers

    def test_keeps_existing_preamble(self, tmp_path, sample_csv_text):
        session = FakeSession(FakeResponse(sample_csv_text.encode("utf-8")))
        out = refresh_polls(pd.Timestamp(2025, 1, 1), pd.Timestamp(2025, 2, 1), tmp_path / "polls.csv", session=session)
        assert out.read_text(encoding="utf-8").count("Oppslutning i prosent") == 1

    def test_missing_header_writes_nothing(self, tmp_path):
        session = FakeSession(FakeResponse(b"<html>maintenance</html>"))
        out = tmp_path / "polls.csv"
        with pytest.raises(ValueError):
            refresh_polls(pd.Timestamp(2025, 1, 1), pd.Timestamp(2025, 2, 1), out, session=session)
        assert not out.exists()

    def test_http_error(self, tmp_path):
        session = FakeSession(FakeResponse(b"", status=503))
        with pytest.raises(requests.HTTPError):
            refresh_polls(pd.Timestamp(2025, 1, 1), pd.Timestamp(2025, 2, 1), tmp_path / "polls.csv", session=session)

    def test_reversed_range(self, tmp_path):
        with pytest.raises(ValueError):
            refresh_polls(pd.Timestamp(2025, 2, 1), pd.Timestamp(2025, 1, 1), tmp_path / "polls.csv", session=FakeSession(None))

    def test_export_url(self):
        url = poll_export_url(pd.Timestamp(2023, 1, 1), pd.Timestamp(2025, 12, 31))
        assert url.startswith("https://www.pollofpolls.no/lastned.csv?")
        assert "tabell=liste_galluper" in url
        assert "type=riks" in url


class TestRefreshWindow:
    """Tests for named download periods."""

    TODAY = pd.Timestamp(2025, 9, 15)

    def test_from_april(self):
        assert refresh_window("from-april", today=self.TODAY) == (pd.Timestamp(2025, 4, 1), pd.Timestamp(2025, 12, 31))

    def test_current_year(self):
        assert refresh_window("current-year", today=self.TODAY) == (pd.Timestamp(2025, 1, 1), pd.Timestamp(2025, 12, 31))

    def test_last_six_months(self):
        assert refresh_window("last-6-months", today=self.TODAY) == (pd.Timestamp(2025, 3, 15), self.TODAY)

    def test_custom(self):
        assert refresh_window("custom", start="2024-05-01", end="2024-06-01") == (
            pd.Timestamp(2024, 5, 1),
            pd.Timestamp(2024, 6, 1),
        )

    def test_custom_needs_dates(self):
        with pytest.raises(ValueError):
            refresh_window("custom", start="2024-05-01")

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            refresh_window("forever")
