from __future__ import annotations

import math
from datetime import UTC, datetime

from tradedash.domain.models import Order, OrderSide, OrderStatus, OrderType, PriceQuote
from tradedash.tables.sort_filter import (
    ColumnKind,
    SortDirection,
    TableSorter,
    filter_any_cell,
    filter_by_status,
    filter_rows,
    market_rows,
    order_rows,
    parse_decimal,
    sort_key,
)


def _rows() -> list[dict[str, object]]:
    return [
        {"symbol": "BTC", "price": "$100.00"},
        {"symbol": "ETH", "price": "$50.00"},
        {"symbol": "AAPL", "price": "$10.00"},
    ]


def _symbols(rows: list) -> list[str]:
    return [row["symbol"] for row in rows]


def test_price_sort_toggles_between_calls() -> None:
    sorter = TableSorter()

    first = sorter.sort(_rows(), "price", ColumnKind.NUMERIC_PRICE)
    second = sorter.sort(_rows(), "price", ColumnKind.NUMERIC_PRICE)
    third = sorter.sort(second.rows, "price", "numeric_price")

    assert _symbols(first.rows) == ["AAPL", "ETH", "BTC"]
    assert first.direction is SortDirection.ASC
    assert _symbols(second.rows) == ["BTC", "ETH", "AAPL"]
    assert second.direction is SortDirection.DESC
    assert _symbols(third.rows) == ["AAPL", "ETH", "BTC"]


def test_already_ascending_rows_flip_to_descending() -> None:
    sorter = TableSorter()
    rows = [{"symbol": "A"}, {"symbol": "B"}, {"symbol": "C"}]

    result = sorter.sort(rows, "symbol", ColumnKind.TEXT)

    assert _symbols(result.rows) == ["C", "B", "A"]
    assert result.direction is SortDirection.DESC
    assert sorter.direction_of("symbol") is SortDirection.DESC


def test_columns_keep_independent_state() -> None:
    sorter = TableSorter()
    sorter.sort(_rows(), "price", ColumnKind.NUMERIC_PRICE)

    result = sorter.sort(_rows(), "symbol", ColumnKind.TEXT)

    assert _symbols(result.rows) == ["AAPL", "BTC", "ETH"]
    assert sorter.direction_of("price") is SortDirection.ASC
    sorter.reset()
    assert sorter.direction_of("price") is None


def test_signed_percentage_orders_losses_below_gains() -> None:
    rows = [
        {"symbol": "A", "change": "2.50%", "loss": False},
        {"symbol": "B", "change": "4.00%", "loss": True},
        {"symbol": "C", "change": "1.00%", "loss": False},
        {"symbol": "D", "change": "1.00%", "change_class": "text-danger"},
    ]

    result = TableSorter().sort(rows, "change", ColumnKind.SIGNED_PERCENTAGE)

    assert _symbols(result.rows) == ["B", "D", "C", "A"]


def test_unparsable_cells_sort_first_ascending() -> None:
    rows = [{"symbol": "X", "price": "10"}, {"symbol": "Y", "price": "n/a"}]

    result = TableSorter().sort(rows, "price", ColumnKind.NUMERIC_PRICE)

    assert _symbols(result.rows) == ["Y", "X"]


def test_parse_decimal_handles_display_formats() -> None:
    assert parse_decimal("$1,234.50") == 1234.5
    assert parse_decimal("-3.2%") == -3.2
    assert parse_decimal(7) == 7.0
    assert parse_decimal(None) == -math.inf
    assert parse_decimal(float("nan")) == -math.inf
    assert sort_key({"symbol": "aapl"}, "symbol", ColumnKind.TEXT) == "aapl"


def test_filter_rows_by_symbol_substring() -> None:
    rows = _rows()

    assert _symbols(filter_rows(rows, "th")) == ["ETH"]
    assert _symbols(filter_rows(rows, "  ")) == ["BTC", "ETH", "AAPL"]


def test_filter_any_cell_skips_excluded_columns() -> None:
    rows = [
        {"symbol": "AAPL", "status": "OPEN", "action": "cancel"},
        {"symbol": "MSFT", "status": "FILLED", "action": ""},
    ]

    assert _symbols(filter_any_cell(rows, "filled")) == ["MSFT"]
    assert filter_any_cell(rows, "cancel", exclude=("action",)) == []


def test_filter_by_status_all_keeps_everything() -> None:
    rows = [{"status": "OPEN"}, {"status": "FILLED"}]

    assert filter_by_status(rows, "all") == rows
    assert filter_by_status(rows, "OPEN") == [{"status": "OPEN"}]


def test_market_rows_are_sorted_by_symbol_with_change_magnitude() -> None:
    snapshot = {
        "MSFT": PriceQuote(symbol="MSFT", price=300.0, volume=10.0),
        "AAPL": PriceQuote(symbol="AAPL", price=150.0, volume=5.0),
    }

    rows = market_rows(snapshot, {"AAPL": -1.25})

    assert _symbols(rows) == ["AAPL", "MSFT"]
    assert rows[0]["change"] == 1.25
    assert rows[0]["loss"] is True
    assert rows[1]["change"] is None


def test_order_rows_mark_only_open_orders_cancellable() -> None:
    created = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    orders = [
        Order("o-1", "AAPL", OrderSide.BUY, OrderType.LIMIT, 1.0, 140.0, OrderStatus.OPEN, created),
        Order("o-2", "MSFT", OrderSide.SELL, OrderType.MARKET, 2.0, 300.0, OrderStatus.FILLED),
    ]

    rows = order_rows(orders)

    assert rows[0]["action"] == "cancel"
    assert rows[0]["date"].startswith("2024-05-01 12:30")
    assert rows[1]["action"] == ""
    assert rows[1]["date"] == ""
