"""Parse player cards from rendered KeepTradeCut ranking pages.

Used when a page does not embed the ``playersArray`` literal. Each listing
page renders one ``<div class="onePlayer">`` block per player::

    <div class="onePlayer">
      <div class="player-name"><p><a href="...">Ja'Marr Chase</a>
        <span class="player-team">CIN</span></p></div>
      <div class="position-team"><p class="position">WR1</p><p>24.6 y.o.</p></div>
      <div class="value"><p>9,999</p></div>
    </div>
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from typing import List, Optional

from rankfeed.ingest.ktc import KTC_POSITIONS
from rankfeed.models import KtcCardPlayer


logger = logging.getLogger(__name__)

_CARD = re.compile(r'<div class="onePlayer">(.*?)(?=<div class="onePlayer">|\Z)', re.S)
_NAME = re.compile(r'<div class="player-name">.*?<a[^>]*>(.*?)</a>', re.S)
_TEAM = re.compile(r'<span class="player-team">\s*([A-Za-z]{2,4})\s*</span>')
_POSITION = re.compile(r'<p class="position">\s*([A-Za-z]+)\d*\s*</p>')
_VALUE = re.compile(r'<div class="value">\s*<p>\s*([\d][\d,. ]*)\s*</p>', re.S)
_AGE = re.compile(r"(\d+(?:\.\d+)?)\s*y\.o\.")
_TAG = re.compile(r"<[^>]+>")
_NON_DIGITS = re.compile(r"\D")

_NO_RESULTS = re.compile(r"no players (?:found|match)", re.I)
_NEXT_PAGE = re.compile(r'class="[^"]*\bnext-page\b|rel="next"')


def has_no_results(html: str) -> bool:
    return bool(_NO_RESULTS.search(html))


def has_next_page(html: str) -> bool:
    return bool(_NEXT_PAGE.search(html))


def _clean_text(fragment: str) -> str:
    return html_lib.unescape(_TAG.sub("", fragment)).strip()


def _parse_value(card: str) -> int:
    match = _VALUE.search(card)
    if not match:
        return 0
    digits = _NON_DIGITS.sub("", match.group(1))
    return int(digits) if digits else 0


def _parse_age(card: str) -> Optional[float]:
    match = _AGE.search(card)
    return float(match.group(1)) if match else None


def parse_player_cards(html: str, *, start_rank: int = 1) -> List[KtcCardPlayer]:
    """Return the cards on one page ranked consecutively from ``start_rank``.

    Cards without a name, or with a position other than QB/RB/WR/TE, are
    skipped before ranks are assigned.
    """

    players: List[KtcCardPlayer] = []
    for card_match in _CARD.finditer(html):
        card = card_match.group(1)
        name_match = _NAME.search(card)
        name = _clean_text(name_match.group(1)) if name_match else ""
        if not name:
            logger.debug("Skipping KTC card without a name")
            continue
        position_match = _POSITION.search(card)
        position = position_match.group(1).upper() if position_match else ""
        if position not in KTC_POSITIONS:
            logger.debug("Skipping KTC card %s with position %r", name, position)
            continue
        team_match = _TEAM.search(card)
        players.append(
            KtcCardPlayer(
                rank=start_rank + len(players),
                name=name,
                position=position,
                team=team_match.group(1).upper() if team_match else "FA",
                value=_parse_value(card),
                age=_parse_age(card),
            )
        )
    return players
