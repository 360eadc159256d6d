from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tradedash.domain.models import PricePoint, PriceQuote
from tradedash.market.history import filter_timeframe, history_to_frame, normalize_timeframe
from tradedash.market.summary import format_large_number, format_percent, format_price, total_volume

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _points() -> list[PricePoint]:
    return [
        PricePoint(timestamp=NOW - timedelta(days=2), price=90.0),
        PricePoint(timestamp=NOW - timedelta(hours=5), price=95.0),
        PricePoint(timestamp=NOW - timedelta(minutes=10), price=100.0),
    ]


def test_history_frame_is_time_indexed() -> None:
    frame = history_to_frame(reversed(_points()))

    assert list(frame.columns) == ["price"]
    assert frame.index.name == "timestamp"
    assert list(frame["price"]) == [90.0, 95.0, 100.0]


def test_filter_timeframe_windows() -> None:
    frame = history_to_frame(_points())

    assert list(filter_timeframe(frame, "1H", now=NOW)["price"]) == [100.0]
    assert list(filter_timeframe(frame, "1D", now=NOW)["price"]) == [95.0, 100.0]
    assert len(filter_timeframe(frame, "ALL", now=NOW)) == 3


def test_empty_history_stays_empty() -> None:
    frame = history_to_frame([])

    assert frame.empty
    assert filter_timeframe(frame, "1H", now=NOW).empty


def test_normalize_timeframe() -> None:
    assert normalize_timeframe(None) == "1H"
    assert normalize_timeframe("day") == "1D"
    assert normalize_timeframe("all") == "ALL"
    with pytest.raises(ValueError, match="timeframe"):
        normalize_timeframe("1W")


def test_market_summary_formatting() -> None:
    snapshot = {
        "AAPL": PriceQuote(symbol="AAPL", price=1.0, volume=1_000_000),
        "MSFT": PriceQuote(symbol="MSFT", price=1.0, volume=500_000),
    }

    assert total_volume(snapshot) == 1_500_000
    assert format_large_number(1_500_000) == "1.5M"
    assert format_large_number(2_000_000_000) == "2.0B"
    assert format_large_number(1_200) == "1.2K"
    assert format_large_number(999) == "999"
    assert format_price(1234.561) == "$1,234.56"
    assert format_percent(-1.234, signed=True) == "-1.23%"
    assert format_percent(2.5, signed=True) == "+2.50%"
