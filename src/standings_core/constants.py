from __future__ import annotations

from typing import Dict, Tuple

from house_core.constants import Party

SEAT_SERVICE_URL = "https://www.pollofpolls.no/"
SEAT_SERVICE_PARAMS: Dict[str, str] = {
    "cmd": "Mandatfordeling",
    "do": "stalf",
    "nbr": "forh",
    "fylkeid": "0",
    "kommuneid": "1201",
    "L1": "",
    "L2": "",
    "L3": "",
    "mode": "pst",
    "name": "Beregn",
    "INP": "0",
}
PARTY_PARAMS: Dict[Party, str] = {
    Party.Ap: "Ap",
    Party.Høyre: "H",
    Party.Frp: "Frp",
    Party.SV: "SV",
    Party.Sp: "Sp",
    Party.KrF: "KrF",
    Party.Venstre: "V",
    Party.MDG: "MDG",
    Party.Rødt: "R",
    Party.Andre: "A",
}

TOTAL_SEATS = 169
SEAT_THRESHOLD = 4.0
MIN_TREND_POLLS = 3

PARTY_BLOCS: Dict[str, Tuple[Party, ...]] = {
    "red": (Party.Ap, Party.SV, Party.Sp, Party.Rødt, Party.MDG),
    "blue": (Party.Høyre, Party.Frp, Party.KrF, Party.Venstre),
    "other": (),
}
BLOC_NAMES: Dict[str, str] = {
    "red": "Red-Green bloc",
    "blue": "Blue bloc",
    "other": "Other parties",
}

PARTY_COLORS: Dict[Party, str] = {
    Party.Ap: "#E61E2B",
    Party.Høyre: "#0057B7",
    Party.Frp: "#003580",
    Party.SV: "#FF6B35",
    Party.Sp: "#00A64F",
    Party.KrF: "#FFD700",
    Party.Venstre: "#90EE90",
    Party.MDG: "#228B22",
    Party.Rødt: "#8B0000",
    Party.Andre: "#808080",
}

