"""Normalize Underdog ADP CSV exports into ranked player records."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from rankfeed.ingest.csv_line import parse_csv_line
from rankfeed.models import RankingsResult, UnderdogPlayer


logger = logging.getLogger(__name__)

PICKS_PER_ROUND = 12
UNDERDOG_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DST", "DEF", "FLEX")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_NON_LETTERS = re.compile(r"[^A-Z]")


@dataclass(frozen=True)
class UnderdogColumns:
    """Column indices used by the adaptive layout."""

    rank: int = 0
    first_name: int = 1
    last_name: int = 2
    adp: int = 3
    position: int = 4
    team: int = 5

    @classmethod
    def detect(cls, header: Sequence[str]) -> "UnderdogColumns":
        """Locate columns by substring match on the lower-cased header row.

        A column that is not found, or that resolves to the rank column,
        keeps its default index.
        """

        lowered = [cell.strip().lower() for cell in header]
        defaults = cls()

        def find(needles: Sequence[str]) -> Optional[int]:
            for needle in needles:
                for idx, cell in enumerate(lowered):
                    if needle in cell:
                        return idx
            return None

        rank = find(("rank",))
        if rank is None:
            rank = defaults.rank

        def resolve(needles: Sequence[str], default: int) -> int:
            idx = find(needles)
            if idx is None or idx == rank:
                return default
            return idx

        return cls(
            rank=rank,
            first_name=resolve(("first",), defaults.first_name),
            last_name=resolve(("last",), defaults.last_name),
            adp=resolve(("adp",), defaults.adp),
            position=resolve(("position", "pos"), defaults.position),
            team=resolve(("team",), defaults.team),
        )


def _parse_rank(raw: str) -> Optional[int]:
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    value = int(match.group(1))
    return value if value > 0 else None


def convert_adp(raw: str) -> Optional[Union[int, float]]:
    """Convert an ADP cell to an overall pick number.

    ``round.pick`` values use a 12-pick round: ``"2.3"`` is pick 15. Anything
    else is read as a plain number. Returns None when neither applies.
    """

    text = raw.strip()
    if not text:
        return None
    if "." in text:
        round_text, _, pick_text = text.partition(".")
        try:
            return (int(round_text) - 1) * PICKS_PER_ROUND + int(pick_text)
        except ValueError:
            return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    return int(value) if value.is_integer() else value


def _cell(fields: Sequence[str], index: int) -> str:
    return fields[index].strip() if 0 <= index < len(fields) else ""


def _split_lines(csv_text: str) -> List[str]:
    text = csv_text.strip()
    if not text:
        return []
    return [line.strip() for line in text.split("\n")]


def _fixed_rows(lines: Sequence[str]) -> List[UnderdogPlayer]:
    players: List[UnderdogPlayer] = []
    for line_index, line in enumerate(lines[1:], start=1):
        if not line:
            continue
        fields = parse_csv_line(line)
        if len(fields) < 4:
            logger.debug("Skipping Underdog line %d: %d fields", line_index, len(fields))
            continue
        name = fields[1]
        if not name:
            continue
        rank = _parse_rank(fields[0]) or line_index
        players.append(
            UnderdogPlayer(
                rank=rank,
                name=name,
                position=fields[2],
                team=fields[3] or "N/A",
                adp=rank,
                original_rank=line_index,
            )
        )
    return players


def _adaptive_rows(lines: Sequence[str]) -> List[UnderdogPlayer]:
    columns = UnderdogColumns.detect(parse_csv_line(lines[0]))
    logger.debug("Underdog columns detected: %s", columns)
    players: List[UnderdogPlayer] = []
    for line_index, line in enumerate(lines[1:], start=1):
        if not line:
            continue
        fields = parse_csv_line(line)
        if len(fields) < 4:
            logger.debug("Skipping Underdog line %d: %d fields", line_index, len(fields))
            continue
        name_parts = [_cell(fields, columns.first_name), _cell(fields, columns.last_name)]
        name = " ".join(part for part in name_parts if part)
        if not name:
            continue
        raw_position = _cell(fields, columns.position).upper()
        if not any(token in raw_position for token in UNDERDOG_POSITIONS):
            logger.debug("Skipping Underdog line %d: position %r", line_index, raw_position)
            continue
        rank = _parse_rank(_cell(fields, columns.rank)) or line_index
        adp = convert_adp(_cell(fields, columns.adp))
        players.append(
            UnderdogPlayer(
                rank=rank,
                name=name,
                position=_NON_LETTERS.sub("", raw_position),
                team=_cell(fields, columns.team) or "N/A",
                adp=rank if adp is None else adp,
                original_rank=line_index,
            )
        )
    return players


def parse_underdog_csv(
    csv_text: str,
    *,
    layout: str = "adaptive",
    slate: Optional[str] = None,
) -> RankingsResult:
    """Parse an Underdog rankings export into a normalized result."""

    lines = _split_lines(csv_text)
    if layout == "fixed":
        players = _fixed_rows(lines) if lines else []
    elif layout == "adaptive":
        players = _adaptive_rows(lines) if lines else []
    else:
        raise ValueError(f"Unknown Underdog layout {layout!r}")
    if not players:
        logger.warning("Underdog CSV produced no players (%d lines)", len(lines))
    return RankingsResult.build("underdog", players, slate=slate)
