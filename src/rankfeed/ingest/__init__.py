"""Input adapters that normalize raw ranking payloads."""

from .csv_line import parse_csv_line
from .fantasycalc import InvalidResponseError, parse_fantasycalc_response
from .ktc import (
    ExtractionError,
    extract_players_array,
    locate_players_array,
    normalize_ktc_players,
)
from .ktc_cards import has_next_page, has_no_results, parse_player_cards
from .underdog import UnderdogColumns, convert_adp, parse_underdog_csv

__all__ = [
    "ExtractionError",
    "InvalidResponseError",
    "UnderdogColumns",
    "convert_adp",
    "extract_players_array",
    "has_next_page",
    "has_no_results",
    "locate_players_array",
    "normalize_ktc_players",
    "parse_csv_line",
    "parse_fantasycalc_response",
    "parse_player_cards",
    "parse_underdog_csv",
]
