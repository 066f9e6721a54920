"""Load run settings from the environment or a JSON file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Mapping, Optional


logger = logging.getLogger(__name__)

UNDERDOG_URL_ENV = "UNDERDOG_CSV_URL"
_DATA_DIR_ENV = "RANKFEED_DATA_DIR"
_UNDERDOG_LAYOUT_ENV = "RANKFEED_UNDERDOG_LAYOUT"
_UNDERDOG_SLATE_ENV = "RANKFEED_UNDERDOG_SLATE"
_KTC_STRATEGY_ENV = "RANKFEED_KTC_STRATEGY"
_PAGE_DELAY_ENV = "RANKFEED_PAGE_DELAY"
_HTTP_TIMEOUT_ENV = "RANKFEED_HTTP_TIMEOUT"
_HISTORY_LIMIT_ENV = "RANKFEED_HISTORY_LIMIT"

UNDERDOG_LAYOUTS = ("fixed", "adaptive")
KTC_STRATEGIES = ("array", "cards", "auto")

DEFAULT_SLATE = "NFL 2026 Pre-Draft Best Ball"


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or invalid."""


def _env_float(environ: Mapping[str, str], name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(environ: Mapping[str, str], name: str, default: int, *, min_value: int | None = None) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _number(value: Any, cast: Callable[[Any], Any], name: str) -> Any:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def _choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    normalized = value.strip().lower() if isinstance(value, str) else None
    if normalized not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return normalized


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    underdog_csv_url: Optional[str] = None
    underdog_layout: str = "adaptive"
    underdog_slate: str = DEFAULT_SLATE
    ktc_strategy: str = "array"
    page_delay: float = 1.0
    http_timeout: float = 30.0
    history_limit: int = 10

    def __post_init__(self) -> None:
        if not isinstance(self.data_dir, (str, os.PathLike)):
            raise ConfigurationError(f"data_dir must be a path, got {self.data_dir!r}")
        object.__setattr__(self, "data_dir", Path(self.data_dir))
        object.__setattr__(
            self, "underdog_layout", _choice(self.underdog_layout, UNDERDOG_LAYOUTS, "underdog_layout")
        )
        object.__setattr__(self, "ktc_strategy", _choice(self.ktc_strategy, KTC_STRATEGIES, "ktc_strategy"))
        object.__setattr__(self, "page_delay", _number(self.page_delay, float, "page_delay"))
        object.__setattr__(self, "http_timeout", _number(self.http_timeout, float, "http_timeout"))
        object.__setattr__(self, "history_limit", _number(self.history_limit, int, "history_limit"))
        if self.page_delay < 0:
            raise ConfigurationError("page_delay must not be negative")
        if self.http_timeout <= 0:
            raise ConfigurationError("http_timeout must be positive")
        if self.history_limit < 1:
            raise ConfigurationError("history_limit must be at least 1")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            data_dir=Path(env.get(_DATA_DIR_ENV) or "data"),
            underdog_csv_url=env.get(UNDERDOG_URL_ENV) or None,
            underdog_layout=env.get(_UNDERDOG_LAYOUT_ENV) or "adaptive",
            underdog_slate=env.get(_UNDERDOG_SLATE_ENV) or DEFAULT_SLATE,
            ktc_strategy=env.get(_KTC_STRATEGY_ENV) or "array",
            page_delay=_env_float(env, _PAGE_DELAY_ENV, 1.0, clamp_min=0.0),
            http_timeout=_env_float(env, _HTTP_TIMEOUT_ENV, 30.0, clamp_min=1.0),
            history_limit=_env_int(env, _HISTORY_LIMIT_ENV, 10, min_value=1),
        )

    @classmethod
    def load(cls, path: Path, *, base: "Settings" | None = None) -> "Settings":
        """Overlay settings stored in a JSON file on top of ``base``."""

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Could not read settings file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a JSON object")
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown settings in {path}: {', '.join(unknown)}")
        return (base or cls()).with_overrides(**data)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""

        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        return replace(self, **updates)

    def require_underdog_url(self) -> str:
        if not self.underdog_csv_url:
            raise ConfigurationError(
                f"{UNDERDOG_URL_ENV} is not set; expected the Underdog CSV download URL "
                "(https://app.underdogfantasy.com/rankings/download/[SLATE_ID]/[USER_ID]/[SESSION_ID]?[PARAMS])"
            )
        return self.underdog_csv_url
