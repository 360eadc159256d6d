"""Environment and CLI runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from tradedash.market.history import TIMEFRAME_WINDOWS

BACKENDS = {"rest", "demo"}


def parse_optional_positive_int(value: str | None, *, field_name: str) -> int | None:
    """Parse optional positive integer values from env strings."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    parsed = parse_int(text, 0, field_name=field_name)
    if parsed <= 0:
        raise ValueError(f"{field_name} must be positive")
    return parsed


def parse_int(value: str | None, default: int, *, field_name: str) -> int:
    """Parse integer env strings, naming the field on failure."""
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an integer") from exc


def parse_float(value: str | None, default: float, *, field_name: str) -> float:
    """Parse float env strings, naming the field on failure."""
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{field_name} must be a number") from exc


def normalize_backend(value: str | None, default: str = "rest") -> str:
    candidate = (value or default).strip().lower()
    if candidate in {"fake", "sample"}:
        return "demo"
    return candidate


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    api_base_url: str = "http://localhost:8080/api/market"
    user_id: str = "user123"
    backend: str = "rest"
    refresh_interval_seconds: float = 5.0
    request_timeout_seconds: float = 10.0
    http_max_retries: int = 1
    initial_investment: float = 10_000.0
    recent_orders_limit: int = 5
    price_timeframe: str = "1H"
    events_dir: str = "runs"
    log_level: str = "INFO"
    max_ticks: int | None = None
    demo_seed: int | None = None

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables."""
        load_dotenv()
        raw = cls(
            api_base_url=str(
                os.getenv("API_BASE_URL", "http://localhost:8080/api/market")
            ).strip(),
            user_id=str(os.getenv("USER_ID", "user123")).strip(),
            backend=normalize_backend(os.getenv("BACKEND"), default="rest"),
            refresh_interval_seconds=parse_float(
                os.getenv("REFRESH_INTERVAL_SECONDS"),
                5.0,
                field_name="refresh_interval_seconds",
            ),
            request_timeout_seconds=parse_float(
                os.getenv("REQUEST_TIMEOUT_SECONDS"),
                10.0,
                field_name="request_timeout_seconds",
            ),
            http_max_retries=parse_int(
                os.getenv("HTTP_MAX_RETRIES"), 1, field_name="http_max_retries"
            ),
            initial_investment=parse_float(
                os.getenv("INITIAL_INVESTMENT"),
                10_000.0,
                field_name="initial_investment",
            ),
            recent_orders_limit=parse_int(
                os.getenv("RECENT_ORDERS_LIMIT"), 5, field_name="recent_orders_limit"
            ),
            price_timeframe=str(os.getenv("PRICE_TIMEFRAME", "1H")).strip().upper(),
            events_dir=str(os.getenv("EVENTS_DIR", "runs")).strip(),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
            max_ticks=parse_optional_positive_int(os.getenv("MAX_TICKS"), field_name="max_ticks"),
            demo_seed=(
                parse_int(os.getenv("DEMO_SEED"), 0, field_name="demo_seed")
                if os.getenv("DEMO_SEED", "").strip()
                else None
            ),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        overrides = dict(kwargs)
        backend_override = overrides.get("backend")
        if isinstance(backend_override, str):
            overrides["backend"] = normalize_backend(backend_override, default=self.backend)
        updated = replace(self, **overrides)
        return updated.validate()

    def tick_limit(self) -> int | None:
        """Return finite refresh tick count, or None for continuous polling."""
        return self.max_ticks

    def validate(self) -> Self:
        """Validate settings fields."""
        if not self.api_base_url:
            raise ValueError("api_base_url must not be empty")
        if not self.user_id:
            raise ValueError("user_id must not be empty")
        if self.backend not in BACKENDS:
            raise ValueError("backend must be one of demo, rest")
        if self.refresh_interval_seconds <= 0:
            raise ValueError("refresh_interval_seconds must be positive")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.http_max_retries <= 0:
            raise ValueError("http_max_retries must be positive")
        if self.initial_investment <= 0:
            raise ValueError("initial_investment must be positive")
        if self.recent_orders_limit <= 0:
            raise ValueError("recent_orders_limit must be positive")
        if self.price_timeframe not in TIMEFRAME_WINDOWS:
            raise ValueError("price_timeframe must be one of 1H, 1D, ALL")
        if self.max_ticks is not None and self.max_ticks <= 0:
            raise ValueError("max_ticks must be positive")
        return self
