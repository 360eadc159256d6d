"""Price history frames for the price chart."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

import pandas as pd

from tradedash.domain.models import PricePoint

TIMEFRAME_WINDOWS: dict[str, timedelta | None] = {
    "1H": timedelta(hours=1),
    "1D": timedelta(days=1),
    "ALL": None,
}


def normalize_timeframe(value: str | None, default: str = "1H") -> str:
    """Map user timeframe strings onto the supported chart windows."""
    candidate = (value or default).strip().upper()
    aliases = {"1HOUR": "1H", "HOUR": "1H", "1DAY": "1D", "DAY": "1D", "MAX": "ALL"}
    candidate = aliases.get(candidate, candidate)
    if candidate not in TIMEFRAME_WINDOWS:
        supported = ", ".join(TIMEFRAME_WINDOWS)
        raise ValueError(f"timeframe must be one of {supported}")
    return candidate


def history_to_frame(points: Iterable[PricePoint]) -> pd.DataFrame:
    """Convert history samples to a UTC-indexed frame with a ``price`` column."""
    rows = [{"timestamp": point.timestamp, "price": point.price} for point in points]
    if not rows:
        empty = pd.DataFrame({"price": pd.Series(dtype="float64")})
        empty.index = pd.DatetimeIndex([], tz="UTC", name="timestamp")
        return empty
    frame = pd.DataFrame(rows)
    frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True, errors="coerce")
    frame["price"] = pd.to_numeric(frame["price"], errors="coerce")
    frame = frame.dropna().set_index("timestamp").sort_index()
    return frame[["price"]]


def filter_timeframe(
    frame: pd.DataFrame,
    timeframe: str,
    now: datetime | None = None,
) -> pd.DataFrame:
    """Keep samples inside the trailing window of ``timeframe``."""
    window = TIMEFRAME_WINDOWS[normalize_timeframe(timeframe)]
    if window is None or frame.empty:
        return frame.copy()
    reference = now or datetime.now(tz=UTC)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)
    cutoff = pd.Timestamp(reference - window)
    return frame.loc[frame.index >= cutoff].copy()
