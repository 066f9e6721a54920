"""Normalized player records shared across ingestion and persistence layers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


Source = Literal["underdog", "ktc", "fantasycalc"]


class PlayerRecord(BaseModel):
    """Fields every source emits; JSON keys are camelCase."""

    rank: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    position: str
    team: str

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class UnderdogPlayer(PlayerRecord):
    adp: Union[int, float]
    original_rank: int = Field(..., ge=1)


class KtcPlayer(PlayerRecord):
    player_id: Optional[Union[int, str]] = None
    value: Union[int, float]
    position_rank: Optional[int] = None
    age: Optional[float] = None
    kept: int = 0
    traded: int = 0
    cut: int = 0
    overall_tier: Optional[int] = None
    position_tier: Optional[int] = None


class KtcCardPlayer(PlayerRecord):
    """Player parsed from a rendered KTC listing card."""

    value: int = 0
    age: Optional[float] = None


class FantasyCalcPlayer(PlayerRecord):
    value: Union[int, float] = 0
    position_rank: int = 0
    sleeper_id: Optional[str] = None
    trend_30_day: Optional[Union[int, float]] = Field(default=None, alias="trend30Day")
    redraft_value: Optional[Union[int, float]] = None
    tier: Optional[int] = None
    is_starter: bool = False


PlayerEntry = Union[UnderdogPlayer, KtcPlayer, KtcCardPlayer, FantasyCalcPlayer]

_OPTIONAL_HEADER_FIELDS = ("format", "format_name", "slate")


class RankingsResult(BaseModel):
    """One normalized snapshot of a source (and format, where the source has one)."""

    last_updated: datetime
    source: Source
    format: Optional[str] = None
    format_name: Optional[str] = None
    slate: Optional[str] = None
    total_players: int = Field(..., ge=0)
    players: List[PlayerEntry]

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def _check_total(self) -> "RankingsResult":
        if self.total_players != len(self.players):
            raise ValueError(
                f"total_players={self.total_players} does not match {len(self.players)} players"
            )
        return self

    @classmethod
    def build(
        cls,
        source: Source,
        players: Sequence[PlayerEntry],
        *,
        format: Optional[str] = None,
        format_name: Optional[str] = None,
        slate: Optional[str] = None,
        last_updated: Optional[datetime] = None,
    ) -> "RankingsResult":
        return cls(
            last_updated=last_updated or datetime.now(timezone.utc),
            source=source,
            format=format,
            format_name=format_name,
            slate=slate,
            total_players=len(players),
            players=list(players),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON document written to the processed snapshot files."""

        exclude = {name for name in _OPTIONAL_HEADER_FIELDS if getattr(self, name) is None}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
