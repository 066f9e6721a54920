"""Extraction strategies for KeepTradeCut ranking pages."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Protocol, Sequence, Union

import httpx

from rankfeed.config import KtcFormat
from rankfeed.fetch.client import ACCEPT_HTML, FetchError, fetch_text
from rankfeed.ingest.ktc import (
    DEFAULT_ARRAY_VARIABLE,
    ExtractionError,
    extract_players_array,
    normalize_ktc_players,
)
from rankfeed.ingest.ktc_cards import has_next_page, has_no_results, parse_player_cards
from rankfeed.models import KtcCardPlayer, KtcPlayer


logger = logging.getLogger(__name__)

MAX_PAGES = 50


@dataclass(frozen=True)
class KtcCollection:
    raw: Any
    players: Sequence[Union[KtcPlayer, KtcCardPlayer]]
    strategy: str


class KtcStrategy(Protocol):
    name: str

    async def collect(self, client: httpx.AsyncClient, fmt: KtcFormat) -> KtcCollection:
        ...


class EmbeddedArrayStrategy:
    """Read the ``playersArray`` literal embedded in the rankings page."""

    name = "array"

    def __init__(self, variable: str = DEFAULT_ARRAY_VARIABLE):
        self.variable = variable

    async def collect(self, client: httpx.AsyncClient, fmt: KtcFormat) -> KtcCollection:
        html = await fetch_text(client, fmt.url, accept=ACCEPT_HTML)
        entries = extract_players_array(html, self.variable)
        logger.info("  Found %d raw player entries", len(entries))
        players = normalize_ktc_players(entries, fmt)
        return KtcCollection(raw=entries, players=players, strategy=self.name)


class CardScraperStrategy:
    """Walk the paginated listing pages and parse each player card."""

    name = "cards"

    def __init__(
        self,
        *,
        page_delay: float = 1.0,
        max_pages: int = MAX_PAGES,
        start_page: int = 0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.page_delay = max(0.0, page_delay)
        self.max_pages = max(1, min(max_pages, MAX_PAGES))
        self.start_page = start_page
        self._sleep = sleep

    async def collect(self, client: httpx.AsyncClient, fmt: KtcFormat) -> KtcCollection:
        players: List[KtcCardPlayer] = []
        for offset in range(self.max_pages):
            page = self.start_page + offset
            if offset and self.page_delay:
                await self._sleep(self.page_delay)
            try:
                html = await fetch_text(client, fmt.page_url(page), accept=ACCEPT_HTML)
            except FetchError as exc:
                logger.error("  Page %d failed for %s: %s", page, fmt.name, exc)
                break
            if has_no_results(html):
                logger.info("  Page %d reported no results", page)
                break
            found = parse_player_cards(html, start_rank=len(players) + 1)
            players.extend(found)
            logger.info("  Page %d: %d players (%d total)", page, len(found), len(players))
            if not found or not has_next_page(html):
                break
        else:
            logger.warning("  Stopped %s after %d pages", fmt.name, self.max_pages)

        if not players:
            raise ExtractionError(f"No player cards found for {fmt.name}")
        raw = [player.model_dump(mode="json", by_alias=True) for player in players]
        return KtcCollection(raw=raw, players=players, strategy=self.name)


class FallbackStrategy:
    """Use ``primary`` and switch to ``secondary`` when extraction fails."""

    name = "auto"

    def __init__(self, primary: KtcStrategy, secondary: KtcStrategy):
        self.primary = primary
        self.secondary = secondary

    async def collect(self, client: httpx.AsyncClient, fmt: KtcFormat) -> KtcCollection:
        try:
            return await self.primary.collect(client, fmt)
        except ExtractionError as exc:
            logger.warning("  %s strategy failed (%s); trying %s", self.primary.name, exc, self.secondary.name)
        return await self.secondary.collect(client, fmt)


def build_strategy(name: str, *, page_delay: float = 1.0) -> KtcStrategy:
    """Resolve a configured strategy name (array, cards, auto)."""

    key = name.lower()
    if key == "array":
        return EmbeddedArrayStrategy()
    if key == "cards":
        return CardScraperStrategy(page_delay=page_delay)
    if key == "auto":
        return FallbackStrategy(EmbeddedArrayStrategy(), CardScraperStrategy(page_delay=page_delay))
    raise ValueError(f"Unknown KTC strategy {name!r}")
