"""Fetch, normalize and persist rankings for each source."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from rankfeed.config import FANTASYCALC_FORMATS, KTC_FORMATS, FantasyCalcFormat, KtcFormat
from rankfeed.config_loader import Settings
from rankfeed.fetch.client import ACCEPT_CSV, FetchError, build_client, fetch_json, fetch_text
from rankfeed.fetch.ktc import KtcStrategy, build_strategy
from rankfeed.ingest import ExtractionError, InvalidResponseError, parse_fantasycalc_response, parse_underdog_csv
from rankfeed.models import RankingsResult
from rankfeed.persistence import CsvExportError, SnapshotStore


logger = logging.getLogger(__name__)

SOURCES = ("underdog", "ktc", "fantasycalc")
SOURCE_CHOICES = SOURCES + ("all",)

# Failures confined to one format; anything else (OSError included) propagates.
FORMAT_ERRORS = (FetchError, ExtractionError, InvalidResponseError, ValidationError, CsvExportError)


@dataclass
class FormatOutcome:
    key: str
    name: str
    success: bool
    players: int = 0
    error: Optional[str] = None


@dataclass
class SourceSummary:
    """Per-format outcomes for one source.

    ``strict`` sources (Underdog) have a single format whose failure fails
    the whole run.
    """

    source: str
    outcomes: List[FormatOutcome] = field(default_factory=list)
    strict: bool = False

    @property
    def failed(self) -> List[FormatOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def fatal(self) -> bool:
        return self.strict and bool(self.failed)


async def fetch_underdog(
    client: httpx.AsyncClient,
    store: SnapshotStore,
    *,
    csv_url: str,
    layout: str = "adaptive",
    slate: Optional[str] = None,
) -> SourceSummary:
    logger.info("Fetching Underdog rankings...")
    summary = SourceSummary(source="underdog", strict=True)
    try:
        csv_text = await fetch_text(client, csv_url, accept=ACCEPT_CSV)
        result = parse_underdog_csv(csv_text, layout=layout, slate=slate)
        logger.info("Parsed %d players", result.total_players)
        store.save(result, csv_text, raw_suffix="csv")
    except FORMAT_ERRORS as exc:
        logger.error("Error fetching Underdog rankings: %s", exc)
        summary.outcomes.append(FormatOutcome(key="underdog", name="Underdog", success=False, error=str(exc)))
        return summary
    logger.info("Underdog rankings fetch completed successfully!")
    summary.outcomes.append(
        FormatOutcome(key="underdog", name="Underdog", success=True, players=result.total_players)
    )
    return summary


async def fetch_ktc_format(
    client: httpx.AsyncClient,
    store: SnapshotStore,
    fmt: KtcFormat,
    strategy: KtcStrategy,
) -> RankingsResult:
    logger.info("Fetching %s rankings...", fmt.name)
    collection = await strategy.collect(client, fmt)
    result = RankingsResult.build(
        "ktc",
        collection.players,
        format=fmt.key,
        format_name=fmt.name,
    )
    logger.info("  Parsed %d valid players (%s strategy)", result.total_players, collection.strategy)
    store.save(result, collection.raw)
    return result


async def fetch_ktc(
    client: httpx.AsyncClient,
    store: SnapshotStore,
    *,
    strategy: KtcStrategy,
    formats: Iterable[KtcFormat] = KTC_FORMATS,
) -> SourceSummary:
    logger.info("=== Fetching Keep Trade Cut Rankings ===")
    summary = SourceSummary(source="ktc")
    for fmt in formats:
        try:
            result = await fetch_ktc_format(client, store, fmt, strategy)
        except FORMAT_ERRORS as exc:
            logger.error("Failed to fetch %s: %s", fmt.name, exc)
            summary.outcomes.append(FormatOutcome(key=fmt.key, name=fmt.name, success=False, error=str(exc)))
            continue
        summary.outcomes.append(
            FormatOutcome(key=fmt.key, name=fmt.name, success=True, players=result.total_players)
        )
    return summary


async def fetch_fantasycalc_format(
    client: httpx.AsyncClient,
    store: SnapshotStore,
    fmt: FantasyCalcFormat,
) -> RankingsResult:
    logger.info("Fetching %s rankings...", fmt.name)
    payload = await fetch_json(client, fmt.endpoint)
    players = parse_fantasycalc_response(payload)
    result = RankingsResult.build(
        "fantasycalc",
        players,
        format=fmt.key,
        format_name=fmt.name,
    )
    logger.info("  Parsed %d players", result.total_players)
    store.save(result, payload)
    return result


async def fetch_fantasycalc(
    client: httpx.AsyncClient,
    store: SnapshotStore,
    *,
    formats: Iterable[FantasyCalcFormat] = FANTASYCALC_FORMATS,
) -> SourceSummary:
    logger.info("=== Fetching Fantasy Calc Rankings ===")
    summary = SourceSummary(source="fantasycalc")
    for fmt in formats:
        try:
            result = await fetch_fantasycalc_format(client, store, fmt)
        except FORMAT_ERRORS as exc:
            logger.error("Failed to fetch %s: %s", fmt.name, exc)
            summary.outcomes.append(FormatOutcome(key=fmt.key, name=fmt.name, success=False, error=str(exc)))
            continue
        summary.outcomes.append(
            FormatOutcome(key=fmt.key, name=fmt.name, success=True, players=result.total_players)
        )
    return summary


def _selected(source: str) -> Sequence[str]:
    key = source.lower()
    if key == "all":
        return SOURCES
    if key not in SOURCES:
        raise ValueError(f"Unknown source {source!r}; expected one of {', '.join(SOURCE_CHOICES)}")
    return (key,)


async def run_sources(
    settings: Settings,
    source: str = "all",
    *,
    client: httpx.AsyncClient | None = None,
    ktc_formats: Iterable[KtcFormat] = KTC_FORMATS,
    fantasycalc_formats: Iterable[FantasyCalcFormat] = FANTASYCALC_FORMATS,
) -> List[SourceSummary]:
    """Run the selected sources one after another.

    Raises ConfigurationError before any request when Underdog is selected
    without a CSV URL.
    """

    selected = _selected(source)
    if "underdog" in selected:
        settings.require_underdog_url()
    store = SnapshotStore(settings.data_dir, history_limit=settings.history_limit)

    owns_client = client is None
    http = client or build_client(timeout=settings.http_timeout)
    summaries: List[SourceSummary] = []
    try:
        for name in selected:
            if name == "underdog":
                summaries.append(
                    await fetch_underdog(
                        http,
                        store,
                        csv_url=settings.require_underdog_url(),
                        layout=settings.underdog_layout,
                        slate=settings.underdog_slate,
                    )
                )
            elif name == "ktc":
                strategy = build_strategy(settings.ktc_strategy, page_delay=settings.page_delay)
                summaries.append(await fetch_ktc(http, store, strategy=strategy, formats=ktc_formats))
            else:
                summaries.append(await fetch_fantasycalc(http, store, formats=fantasycalc_formats))
    finally:
        if owns_client:
            await http.aclose()
    return summaries
