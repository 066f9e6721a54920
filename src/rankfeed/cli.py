"""Command-line interface for fetching ranking snapshots."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

from rankfeed.config import get_fantasycalc_format, get_ktc_format
from rankfeed.config_loader import KTC_STRATEGIES, UNDERDOG_LAYOUTS, ConfigurationError, Settings
from rankfeed.fetch import SOURCE_CHOICES, SourceSummary, run_sources


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch fantasy rankings and write CDN snapshots")
    parser.add_argument(
        "source",
        nargs="?",
        default="all",
        choices=SOURCE_CHOICES,
        help="Source to fetch (default: all)",
    )
    parser.add_argument("--data-dir", type=Path, default=None, help="Root of the data/ tree")
    parser.add_argument("--config", type=Path, default=None, help="JSON settings file")
    parser.add_argument(
        "--ktc-strategy",
        choices=KTC_STRATEGIES,
        default=None,
        help="KTC extraction: embedded array, listing cards, or array with card fallback",
    )
    parser.add_argument(
        "--underdog-layout",
        choices=UNDERDOG_LAYOUTS,
        default=None,
        help="Underdog CSV layout (fixed column order or header detection)",
    )
    parser.add_argument(
        "--page-delay",
        type=float,
        default=None,
        help="Seconds to wait between KTC listing pages",
    )
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        default=[],
        help="Limit ktc or fantasycalc to a format key (repeatable, e.g. dynasty_1qb)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _resolve_formats(source: str, keys: Sequence[str]) -> Dict[str, Any]:
    if not keys:
        return {}
    try:
        if source == "ktc":
            return {"ktc_formats": tuple(get_ktc_format(key) for key in keys)}
        if source == "fantasycalc":
            return {"fantasycalc_formats": tuple(get_fantasycalc_format(key) for key in keys)}
    except KeyError as exc:
        raise ConfigurationError(exc.args[0]) from exc
    raise ConfigurationError("--format requires the ktc or fantasycalc source")


def _print_summary(summary: SourceSummary) -> None:
    print(f"=== {summary.source} results ===")
    for outcome in summary.outcomes:
        status = "✓" if outcome.success else "✗"
        details = f"{outcome.players} players" if outcome.success else outcome.error
        print(f"  {status} {outcome.name}: {details}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
        if args.config:
            settings = Settings.load(args.config, base=settings)
        settings = settings.with_overrides(
            data_dir=args.data_dir,
            ktc_strategy=args.ktc_strategy,
            underdog_layout=args.underdog_layout,
            page_delay=args.page_delay,
        )
        format_overrides = _resolve_formats(args.source, args.formats)
        summaries = asyncio.run(run_sources(settings, args.source, **format_overrides))
    except ConfigurationError as exc:
        print(f"ERROR: {exc}")
        return 1

    for summary in summaries:
        _print_summary(summary)
    return 1 if any(summary.fatal for summary in summaries) else 0


if __name__ == "__main__":
    raise SystemExit(main())
