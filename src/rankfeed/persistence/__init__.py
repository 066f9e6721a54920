"""Persistence layer for raw and normalized ranking snapshots.

Layout under the store root::

    raw/<source>[/<format>]/<source>-<token>.<suffix>
    processed/<source>/rankings[-<format>]-latest.json
    processed/<source>/rankings[-<format>]-latest.csv
    processed/<source>/rankings[-<format>]-<token>.json

``<token>`` is an ISO-8601 UTC instant with ``:`` and ``.`` replaced by
``-``. It has a fixed width, so sorting file names sorts them by time.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from rankfeed.models import RankingsResult

from .export import CsvExportError, render_rankings_csv


logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10

_UNSAFE_TOKEN_CHARS = re.compile(r"[:.]")


def snapshot_token(moment: datetime) -> str:
    """Return a filesystem-safe, lexicographically sortable timestamp."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat(timespec="microseconds")
    return _UNSAFE_TOKEN_CHARS.sub("-", iso.replace("+00:00", "Z"))


@dataclass
class SnapshotPaths:
    raw: Path
    latest_json: Path
    latest_csv: Path
    history: Path
    pruned: List[Path] = field(default_factory=list)


class SnapshotStore:
    """File-tree store keyed by source and optional format."""

    def __init__(self, root: Path | str, *, history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self.root = Path(root)
        self.history_limit = history_limit

    def raw_dir(self, source: str, format: Optional[str] = None) -> Path:
        path = self.root / "raw" / source
        return path / format if format else path

    def processed_dir(self, source: str) -> Path:
        return self.root / "processed" / source

    @staticmethod
    def _stem(format: Optional[str]) -> str:
        return f"rankings-{format}" if format else "rankings"

    def latest_json_path(self, source: str, format: Optional[str] = None) -> Path:
        return self.processed_dir(source) / f"{self._stem(format)}-latest.json"

    def latest_csv_path(self, source: str, format: Optional[str] = None) -> Path:
        return self.processed_dir(source) / f"{self._stem(format)}-latest.csv"

    def history_files(self, source: str, format: Optional[str] = None) -> List[Path]:
        """Return timestamped snapshots for the key, oldest first."""

        directory = self.processed_dir(source)
        if not directory.exists():
            return []
        prefix = f"{self._stem(format)}-20"
        return sorted(
            (path for path in directory.iterdir() if path.name.startswith(prefix) and path.suffix == ".json"),
            key=lambda path: path.name,
        )

    def load_latest(self, source: str, format: Optional[str] = None) -> Optional[dict]:
        path = self.latest_json_path(source, format)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def save(
        self,
        result: RankingsResult,
        raw: Any,
        *,
        raw_suffix: str = "json",
        now: Optional[datetime] = None,
    ) -> SnapshotPaths:
        """Persist ``raw`` and ``result`` and prune history for the key.

        ``raw`` is written verbatim when it is ``str`` or ``bytes`` and as
        indented JSON otherwise.
        """

        source = result.source
        format = result.format
        token = snapshot_token(now or datetime.now(timezone.utc))

        raw_dir = self.raw_dir(source, format)
        processed_dir = self.processed_dir(source)
        for directory in (raw_dir, processed_dir):
            directory.mkdir(parents=True, exist_ok=True)

        # Render first; latest files stay untouched if rendering fails.
        payload = json.dumps(result.to_payload(), indent=2)
        csv_text = render_rankings_csv(result)

        raw_path = raw_dir / f"{source}-{token}.{raw_suffix}"
        if isinstance(raw, bytes):
            raw_path.write_bytes(raw)
        elif isinstance(raw, str):
            raw_path.write_text(raw, encoding="utf-8")
        else:
            raw_path.write_text(json.dumps(raw, indent=2), encoding="utf-8")
        logger.info("  Saved raw snapshot to %s", raw_path)

        latest_json = self.latest_json_path(source, format)
        _atomic_write(latest_json, payload)
        logger.info("  Saved JSON to %s", latest_json)

        history = processed_dir / f"{self._stem(format)}-{token}.json"
        history.write_text(payload, encoding="utf-8")

        latest_csv = self.latest_csv_path(source, format)
        _atomic_write(latest_csv, csv_text)
        logger.info("  Saved CSV to %s", latest_csv)

        pruned = self.prune(source, format)
        return SnapshotPaths(
            raw=raw_path,
            latest_json=latest_json,
            latest_csv=latest_csv,
            history=history,
            pruned=pruned,
        )

    def prune(self, source: str, format: Optional[str] = None) -> List[Path]:
        """Delete all but the newest ``history_limit`` snapshots, oldest first."""

        files = self.history_files(source, format)
        stale = files[: max(0, len(files) - self.history_limit)]
        for path in stale:
            path.unlink()
            logger.info("  Cleaned up old file: %s", path.name)
        return stale


def _atomic_write(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


__all__ = [
    "CsvExportError",
    "DEFAULT_HISTORY_LIMIT",
    "SnapshotPaths",
    "SnapshotStore",
    "render_rankings_csv",
    "snapshot_token",
]
