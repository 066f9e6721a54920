"""CSV renderings of normalized rankings."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Any, Callable, Mapping, Sequence, Tuple

from rankfeed.models import (
    FantasyCalcPlayer,
    KtcCardPlayer,
    KtcPlayer,
    PlayerEntry,
    RankingsResult,
    UnderdogPlayer,
)


class CsvExportError(RuntimeError):
    """Raised when a result mixes player types that share no CSV layout."""


Row = Callable[[Any], Sequence[Any]]

_LAYOUTS: Mapping[type, Tuple[Tuple[str, ...], Row]] = {
    UnderdogPlayer: (
        ("Rank", "Player", "Position", "Team", "Extra", "ADP", "Final"),
        lambda p: (p.rank, p.name, p.position, p.team, None, p.adp, None),
    ),
    KtcPlayer: (
        ("Rank", "Player", "Position", "Team", "Value", "PositionRank", "Age", "Kept", "Traded", "Cut"),
        lambda p: (p.rank, p.name, p.position, p.team, p.value, p.position_rank, p.age, p.kept, p.traded, p.cut),
    ),
    KtcCardPlayer: (
        ("Rank", "Player", "Position", "Team", "Value", "Age"),
        lambda p: (p.rank, p.name, p.position, p.team, p.value, p.age),
    ),
    FantasyCalcPlayer: (
        (
            "Rank",
            "Player",
            "Position",
            "Team",
            "Value",
            "PositionRank",
            "Trend30Day",
            "RedraftValue",
            "Tier",
        ),
        lambda p: (
            p.rank,
            p.name,
            p.position,
            p.team,
            p.value,
            p.position_rank,
            p.trend_30_day,
            p.redraft_value,
            p.tier,
        ),
    ),
}

# Layout used for an empty result, where no player type can be inspected.
_SOURCE_DEFAULTS = {
    "underdog": UnderdogPlayer,
    "ktc": KtcPlayer,
    "fantasycalc": FantasyCalcPlayer,
}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _layout_for(result: RankingsResult) -> Tuple[Tuple[str, ...], Row]:
    kinds = {type(player) for player in result.players}
    if not kinds:
        return _LAYOUTS[_SOURCE_DEFAULTS[result.source]]
    if len(kinds) > 1:
        names = ", ".join(sorted(kind.__name__ for kind in kinds))
        raise CsvExportError(f"Cannot render mixed player types as CSV: {names}")
    return _LAYOUTS[kinds.pop()]


def render_rankings_csv(result: RankingsResult) -> str:
    """Render ``result`` as a header row plus one row per player."""

    header, row = _layout_for(result)
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    player: PlayerEntry
    for player in result.players:
        writer.writerow([_cell(value) for value in row(player)])
    return buffer.getvalue()


__all__ = [
    "CsvExportError",
    "render_rankings_csv",
]
