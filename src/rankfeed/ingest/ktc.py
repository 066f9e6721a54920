"""Extract and normalize the player array embedded in KeepTradeCut pages."""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, List, Sequence

from pydantic import ValidationError

from rankfeed.config import KtcFormat
from rankfeed.models import KtcPlayer


logger = logging.getLogger(__name__)

KTC_POSITIONS = frozenset({"QB", "RB", "WR", "TE"})
DEFAULT_ARRAY_VARIABLE = "playersArray"


class ExtractionError(ValueError):
    """Raised when expected data cannot be located or decoded in a page."""


def locate_players_array(html: str, variable: str = DEFAULT_ARRAY_VARIABLE) -> str:
    """Return the text of the array literal assigned to ``var <variable>``.

    Brackets inside single- or double-quoted strings are ignored; a quote
    preceded by a backslash does not close its string.
    """

    start_match = re.search(rf"var\s+{re.escape(variable)}\s*=\s*\[", html)
    if not start_match:
        raise ExtractionError(f"Could not find {variable} in HTML")

    start = start_match.end() - 1
    depth = 0
    string_char: str | None = None
    end = None
    for idx in range(start, len(html)):
        char = html[idx]
        prev_char = html[idx - 1] if idx > 0 else ""
        if string_char is None and char in ("\"", "'"):
            string_char = char
        elif string_char is not None and char == string_char and prev_char != "\\":
            string_char = None

        if string_char is None:
            if char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    end = idx
                    break

    if end is None:
        raise ExtractionError(f"Failed to find matching closing bracket for {variable}")
    return html[start : end + 1]


def extract_players_array(html: str, variable: str = DEFAULT_ARRAY_VARIABLE) -> List[Any]:
    text = locate_players_array(html, variable)
    try:
        entries = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse %s: %s", variable, exc)
        raise ExtractionError(f"Failed to parse {variable}: {exc}") from exc
    if not isinstance(entries, list):
        raise ExtractionError(f"{variable} is not a JSON array")
    return entries


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _upper(value: Any) -> str:
    return value.upper() if isinstance(value, str) else ""


def normalize_ktc_players(entries: Sequence[Any], fmt: KtcFormat) -> List[KtcPlayer]:
    """Map raw KTC entries to records ranked 1..N by their source rank."""

    parsed: List[tuple[Any, dict]] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        position = _upper(entry.get("position"))
        if position not in KTC_POSITIONS:
            continue
        values = entry.get(fmt.value_field)
        if not isinstance(values, dict) or not _is_number(values.get("value")):
            continue
        name = entry.get("playerName")
        if not isinstance(name, str) or not name.strip():
            logger.debug("Skipping KTC entry without a name: %r", entry.get("playerID"))
            continue
        team = _upper(entry.get("team")) or "FA"
        fields = {
            "player_id": entry.get("playerID"),
            "name": name.strip(),
            "position": position,
            "team": team,
            "value": values["value"],
            "position_rank": values.get("positionalRank"),
            "age": entry.get("age"),
            "kept": 0 if values.get("kept") is None else values["kept"],
            "traded": 0 if values.get("traded") is None else values["traded"],
            "cut": 0 if values.get("cut") is None else values["cut"],
            "overall_tier": values.get("overallTier"),
            "position_tier": values.get("positionalTier"),
        }
        parsed.append((values.get("rank"), fields))

    # Stable sort; entries without a usable rank go last.
    parsed.sort(key=lambda item: float(item[0]) if _is_number(item[0]) else math.inf)
    players: List[KtcPlayer] = []
    for _, fields in parsed:
        try:
            players.append(KtcPlayer(rank=len(players) + 1, **fields))
        except ValidationError as exc:
            logger.debug("Skipping malformed KTC entry %s: %s", fields["name"], exc)
    return players
