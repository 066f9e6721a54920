from .player import (
    FantasyCalcPlayer,
    KtcCardPlayer,
    KtcPlayer,
    PlayerEntry,
    PlayerRecord,
    RankingsResult,
    Source,
    UnderdogPlayer,
)

__all__ = [
    "FantasyCalcPlayer",
    "KtcCardPlayer",
    "KtcPlayer",
    "PlayerEntry",
    "PlayerRecord",
    "RankingsResult",
    "Source",
    "UnderdogPlayer",
]
