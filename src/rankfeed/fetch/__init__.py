"""Network side of the pipeline: HTTP helpers, KTC strategies and run orchestration."""

from .client import FetchError, build_client, fetch_json, fetch_text
from .ktc import (
    CardScraperStrategy,
    EmbeddedArrayStrategy,
    FallbackStrategy,
    KtcCollection,
    KtcStrategy,
    build_strategy,
)
from .service import (
    SOURCE_CHOICES,
    FormatOutcome,
    SourceSummary,
    fetch_fantasycalc,
    fetch_ktc,
    fetch_underdog,
    run_sources,
)

__all__ = [
    "CardScraperStrategy",
    "EmbeddedArrayStrategy",
    "FallbackStrategy",
    "FetchError",
    "FormatOutcome",
    "KtcCollection",
    "KtcStrategy",
    "SOURCE_CHOICES",
    "SourceSummary",
    "build_client",
    "build_strategy",
    "fetch_fantasycalc",
    "fetch_json",
    "fetch_ktc",
    "fetch_text",
    "fetch_underdog",
    "run_sources",
]
