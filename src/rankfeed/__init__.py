"""Fantasy-football ranking snapshots for Underdog, KeepTradeCut and FantasyCalc."""

__version__ = "0.1.0"
