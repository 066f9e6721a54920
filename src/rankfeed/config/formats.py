"""Format registries for the KeepTradeCut and FantasyCalc sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class KtcFormat:
    key: str
    name: str
    url: str
    cards_url: str
    value_field: str
    is_dynasty: bool

    def page_url(self, page: int) -> str:
        """Return the paginated listing URL used by the card scraper."""

        return self.cards_url.format(page=page)


@dataclass(frozen=True)
class FantasyCalcFormat:
    key: str
    name: str
    endpoint: str


KTC_FORMATS: Tuple[KtcFormat, ...] = (
    KtcFormat(
        key="dynasty_1qb",
        name="Dynasty 1QB",
        url="https://keeptradecut.com/dynasty-rankings?filters=QB|WR|RB|TE|RDP&format=1",
        cards_url="https://keeptradecut.com/dynasty-rankings?page={page}&filters=QB|WR|RB|TE&format=1",
        value_field="oneQBValues",
        is_dynasty=True,
    ),
    KtcFormat(
        key="dynasty_superflex",
        name="Dynasty Superflex",
        url="https://keeptradecut.com/dynasty-rankings?filters=QB|WR|RB|TE|RDP&format=0",
        cards_url="https://keeptradecut.com/dynasty-rankings?page={page}&filters=QB|WR|RB|TE&format=0",
        value_field="superflexValues",
        is_dynasty=True,
    ),
    KtcFormat(
        key="redraft_1qb",
        name="Redraft 1QB",
        url="https://keeptradecut.com/fantasy-rankings?filters=QB|WR|RB|TE&format=1",
        cards_url="https://keeptradecut.com/fantasy-rankings?page={page}&filters=QB|WR|RB|TE&format=1",
        value_field="oneQBValues",
        is_dynasty=False,
    ),
    KtcFormat(
        key="redraft_superflex",
        name="Redraft Superflex",
        url="https://keeptradecut.com/fantasy-rankings?filters=QB|WR|RB|TE&format=2",
        cards_url="https://keeptradecut.com/fantasy-rankings?page={page}&filters=QB|WR|RB|TE&format=2",
        value_field="superflexValues",
        is_dynasty=False,
    ),
)

_FANTASYCALC_BASE = "https://api.fantasycalc.com/values/current"

FANTASYCALC_FORMATS: Tuple[FantasyCalcFormat, ...] = (
    FantasyCalcFormat(
        key="dynasty_1qb",
        name="Dynasty 1QB",
        endpoint=f"{_FANTASYCALC_BASE}?isDynasty=true&numQbs=1&numTeams=12&ppr=1",
    ),
    FantasyCalcFormat(
        key="dynasty_2qb",
        name="Dynasty 2QB/Superflex",
        endpoint=f"{_FANTASYCALC_BASE}?isDynasty=true&numQbs=2&numTeams=12&ppr=1",
    ),
    FantasyCalcFormat(
        key="redraft_1qb",
        name="Redraft 1QB",
        endpoint=f"{_FANTASYCALC_BASE}?isDynasty=false&numQbs=1&numTeams=12&ppr=1",
    ),
    FantasyCalcFormat(
        key="redraft_2qb",
        name="Redraft 2QB/Superflex",
        endpoint=f"{_FANTASYCALC_BASE}?isDynasty=false&numQbs=2&numTeams=12&ppr=1",
    ),
)

_KTC_BY_KEY: Dict[str, KtcFormat] = {fmt.key: fmt for fmt in KTC_FORMATS}
_FANTASYCALC_BY_KEY: Dict[str, FantasyCalcFormat] = {fmt.key: fmt for fmt in FANTASYCALC_FORMATS}


def get_ktc_format(key: str) -> KtcFormat:
    """Fetch a KTC format by key, raising KeyError if missing."""

    normalized = key.lower()
    if normalized not in _KTC_BY_KEY:
        raise KeyError(f"No KTC format configured for key={key!r}")
    return _KTC_BY_KEY[normalized]


def get_fantasycalc_format(key: str) -> FantasyCalcFormat:
    """Fetch a FantasyCalc format by key, raising KeyError if missing."""

    normalized = key.lower()
    if normalized not in _FANTASYCALC_BY_KEY:
        raise KeyError(f"No FantasyCalc format configured for key={key!r}")
    return _FANTASYCALC_BY_KEY[normalized]
