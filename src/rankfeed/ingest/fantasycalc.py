"""Flatten FantasyCalc ``values/current`` responses into player records."""

from __future__ import annotations

import logging
from typing import Any, List

from pydantic import ValidationError

from rankfeed.models import FantasyCalcPlayer


logger = logging.getLogger(__name__)

FANTASYCALC_POSITIONS = frozenset({"QB", "RB", "WR", "TE"})


class InvalidResponseError(ValueError):
    """Raised when a source responds with a payload of the wrong shape."""


def _default(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value


def _overall_rank(value: Any, index: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return index + 1
    return value


def parse_fantasycalc_response(payload: Any) -> List[FantasyCalcPlayer]:
    """Return players sorted by FantasyCalc's overall rank.

    Rank gaps left by dropped entries are kept as received.
    """

    if not isinstance(payload, list):
        raise InvalidResponseError("Invalid API response: expected array")

    players: List[FantasyCalcPlayer] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, dict):
            continue
        player = item.get("player")
        if not isinstance(player, dict):
            continue
        name = player.get("name")
        raw_position = player.get("position")
        if not name or not raw_position:
            continue
        position = str(raw_position).upper()
        if position not in FANTASYCALC_POSITIONS:
            logger.debug("Skipping FantasyCalc entry %s with position %s", name, position)
            continue
        team = player.get("maybeTeam")
        sleeper_id = player.get("sleeperId")
        try:
            record = FantasyCalcPlayer(
                rank=_overall_rank(item.get("overallRank"), idx),
                name=name,
                position=position,
                team=str(team).upper() if team else "FA",
                value=_default(item.get("value"), 0),
                position_rank=_default(item.get("positionRank"), 0),
                sleeper_id=None if sleeper_id is None else str(sleeper_id),
                trend_30_day=item.get("trend30Day"),
                redraft_value=item.get("redraftValue"),
                tier=item.get("maybeTier"),
                is_starter=bool(item.get("starter", False)),
            )
        except ValidationError as exc:
            logger.debug("Skipping malformed FantasyCalc entry %s: %s", name, exc)
            continue
        players.append(record)

    players.sort(key=lambda record: record.rank)
    return players
