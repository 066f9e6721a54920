"""Configuration helpers for source formats."""

from .formats import (
    FANTASYCALC_FORMATS,
    KTC_FORMATS,
    FantasyCalcFormat,
    KtcFormat,
    get_fantasycalc_format,
    get_ktc_format,
)

__all__ = [
    "FANTASYCALC_FORMATS",
    "KTC_FORMATS",
    "FantasyCalcFormat",
    "KtcFormat",
    "get_fantasycalc_format",
    "get_ktc_format",
]
