from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple


class Party(str, Enum):
    # Member names equal their values so plain strings hash and compare like members.
    Ap = "Ap"
    Høyre = "Høyre"
    Frp = "Frp"
    SV = "SV"
    Sp = "Sp"
    KrF = "KrF"
    Venstre = "Venstre"
    MDG = "MDG"
    Rødt = "Rødt"
    Andre = "Andre"

    def __str__(self) -> str:
        return self.value


PARTIES: List[Party] = list(Party)

# Rolling benchmark
BENCHMARK_WINDOW_DAYS = 14
BENCHMARK_MIN_OBSERVATIONS = 5
BENCHMARK_WIDENED_WINDOWS: Tuple[int, ...] = (28, 42)

# Time-decayed house effects
DECAY_HALF_LIFE_DAYS = 30.0
DECAY_WINDOW_DAYS = 21.0

# Current estimate
LOOKBACK_DAYS = 14
AVERAGE_HALF_LIFE_DAYS = 7.0
AVERAGE_STEP_DAYS = 7
WEIGHTINGS: List[str] = ["none", "linear", "exponential", "quadratic"]
ESTIMATORS: List[str] = ["rolling", "decayed"]

# Poll export layout
HEADER_MARKER = "Måling"
DATE_COL = "Dato"
CSV_DELIMITER = ";"
MOJIBAKE_FIXES: Dict[str, str] = {
    "M�ling": "Måling",
    "H�yre": "Høyre",
    "R�dt": "Rødt",
}

# Poll export download
USER_AGENT = "Mozilla/5.0 (compatible; house-effects/0.1)"
POLL_EXPORT_URL = "https://www.pollofpolls.no/lastned.csv"
POLL_EXPORT_PARAMS: Dict[str, str] = {"tabell": "liste_galluper", "type": "riks", "kommuneid": "0"}
EXPORT_PREAMBLE = "Oppslutning i prosent. Antall mandater i parentes."
REFRESH_PERIODS: List[str] = ["from-april", "current-year", "last-6-months", "election-cycle", "custom"]
