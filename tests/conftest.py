"""Shared fixtures for poll tests."""

import pandas as pd
import pytest

from house_core.models import Observation

BASE_DATE = pd.Timestamp("2025-01-01")


def day(n: float) -> pd.Timestamp:
    return BASE_DATE + pd.Timedelta(days=n)


@pytest.fixture
def make_poll():
    """Build an Observation from a house, a day offset and a party->value dict."""

    def _make(source, day_offset, categories):
        return Observation(source=source, timestamp=day(day_offset), categories=categories)

    return _make


SAMPLE_CSV = """Oppslutning i prosent. Antall mandater i parentes.

Måling;Dato;Ap;Høyre;Frp;SV;Sp;KrF;Venstre;MDG;Rødt;Andre
Verian/TV2;22/8-2025;26,7 (50);14,9 (24);22,8 (44);5,8 (10);6,0 (10);5,2 (8);3,2 (2);4,8 (8);7,3 (12);3,4 (1)
Opinion/DA;20/8-2025;24,8 (47);17,9 (34);21,5 (41);5,5 (10);6,8 (13);4,5 (8);3,9 (3);3,6 (3);5,6 (10);5,8 (0)
"""


@pytest.fixture
def sample_csv_text():
    return SAMPLE_CSV
