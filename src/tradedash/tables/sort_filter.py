"""Generic ordering and filtering over displayed table rows.

Rows are plain mappings from column name to cell value, as handed to the
rendering layer.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from tradedash.domain.models import MarketSnapshot, Order, PriceDirection

Row = Mapping[str, Any]

ALL_STATUSES = "all"
LOSS_TAGS = {"text-danger", "loss", PriceDirection.DOWN.value}


class ColumnKind(StrEnum):
    """How cell values compare."""

    TEXT = "text"
    NUMERIC_PRICE = "numeric_price"
    SIGNED_PERCENTAGE = "signed_percentage"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortResult:
    """Ordered rows plus the direction the sorter settled on."""

    rows: list[Row]
    direction: SortDirection
    column: str
    swaps: int = 0


def parse_decimal(value: Any) -> float:
    """Parse a price cell such as ``1234.5`` or ``"$1,234.50"``."""
    if isinstance(value, bool):
        return -math.inf
    if isinstance(value, (int, float)):
        number = float(value)
        return number if not math.isnan(number) else -math.inf
    text = str(value if value is not None else "").strip()
    text = text.replace("$", "").replace(",", "").replace("%", "").strip()
    try:
        number = float(text)
    except ValueError:
        return -math.inf
    return number if not math.isnan(number) else -math.inf


def is_loss_row(row: Row) -> bool:
    """True when the row is rendered with the negative/danger indicator."""
    if row.get("loss"):
        return True
    tag = row.get("change_class") or row.get("change_direction")
    return str(tag or "").strip().lower() in LOSS_TAGS


def sort_key(row: Row, column: str, kind: ColumnKind) -> Any:
    cell = row.get(column)
    if kind is ColumnKind.NUMERIC_PRICE:
        return parse_decimal(cell)
    if kind is ColumnKind.SIGNED_PERCENTAGE:
        magnitude = abs(parse_decimal(cell))
        if math.isinf(magnitude):
            return -math.inf
        return -magnitude if is_loss_row(row) else magnitude
    return str(cell if cell is not None else "").lower()


def bubble_sort(
    rows: Sequence[Row],
    key: Callable[[Row], Any],
    direction: SortDirection,
) -> tuple[list[Row], int]:
    """Adjacent-swap passes until a pass makes no swap; returns rows and swap count."""
    ordered = list(rows)
    keys = [key(row) for row in ordered]
    swaps = 0
    swapped = True
    while swapped:
        swapped = False
        for index in range(len(ordered) - 1):
            left, right = keys[index], keys[index + 1]
            out_of_order = left > right if direction is SortDirection.ASC else left < right
            if out_of_order:
                ordered[index], ordered[index + 1] = ordered[index + 1], ordered[index]
                keys[index], keys[index + 1] = right, left
                swaps += 1
                swapped = True
    return ordered, swaps


@dataclass
class _ColumnState:
    last_input: list[Row] = field(default_factory=list)
    last_output: list[Row] = field(default_factory=list)
    direction: SortDirection | None = None


class TableSorter:
    """Click-to-sort state for one table.

    Each call sorts ascending; when the rows were already ascending (zero
    swaps) the call flips to descending instead. Repeating a call on the same
    column with unchanged rows continues from the previously displayed order,
    so consecutive calls alternate ascending and descending.
    """

    def __init__(self) -> None:
        self._states: dict[str, _ColumnState] = {}

    def sort(self, rows: Iterable[Row], column: str, kind: ColumnKind | str) -> SortResult:
        column_kind = ColumnKind(kind)
        incoming = list(rows)
        state = self._states.setdefault(column, _ColumnState())
        if state.direction is not None and incoming in (state.last_input, state.last_output):
            working = state.last_output
        else:
            working = incoming

        def key(row: Row) -> Any:
            return sort_key(row, column, column_kind)

        ordered, swaps = bubble_sort(working, key, SortDirection.ASC)
        direction = SortDirection.ASC
        if swaps == 0:
            direction = SortDirection.DESC
            ordered, swaps = bubble_sort(working, key, SortDirection.DESC)

        state.last_input = incoming
        state.last_output = ordered
        state.direction = direction
        return SortResult(rows=ordered, direction=direction, column=column, swaps=swaps)

    def direction_of(self, column: str) -> SortDirection | None:
        state = self._states.get(column)
        return state.direction if state else None

    def reset(self) -> None:
        self._states.clear()


def filter_rows(rows: Iterable[Row], text: str | None, key: str = "symbol") -> list[Row]:
    """Case-insensitive substring match on one column; empty text keeps all rows."""
    needle = (text or "").strip().upper()
    if not needle:
        return list(rows)
    return [row for row in rows if needle in str(row.get(key, "")).upper()]


def filter_any_cell(
    rows: Iterable[Row],
    text: str | None,
    exclude: Iterable[str] = (),
) -> list[Row]:
    """Match ``text`` against every visible cell of a row."""
    needle = (text or "").strip().upper()
    if not needle:
        return list(rows)
    hidden = set(exclude)
    matched: list[Row] = []
    for row in rows:
        for column, cell in row.items():
            if column in hidden:
                continue
            if needle in str(cell if cell is not None else "").upper():
                matched.append(row)
                break
    return matched


def filter_by_status(rows: Iterable[Row], status: str, key: str = "status") -> list[Row]:
    """Exact match on an enum column; ``"all"`` disables filtering."""
    if status == ALL_STATUSES:
        return list(rows)
    return [row for row in rows if str(row.get(key, "")) == status]


def market_rows(
    snapshot: MarketSnapshot,
    changes: Mapping[str, float] | None = None,
) -> list[dict[str, Any]]:
    """Market table rows sorted by symbol.

    ``change`` holds the magnitude of the percent change and ``loss`` marks
    negative moves, mirroring how the table renders them.
    """
    rows: list[dict[str, Any]] = []
    for symbol in sorted(snapshot):
        quote = snapshot[symbol]
        row: dict[str, Any] = {
            "symbol": symbol,
            "price": float(quote.price),
            "volume": float(quote.volume),
            "change": None,
            "loss": False,
        }
        if changes is not None and symbol in changes:
            change_pct = float(changes[symbol])
            row["change"] = abs(change_pct)
            row["loss"] = change_pct < 0
        rows.append(row)
    return rows


def order_rows(orders: Iterable[Order]) -> list[dict[str, Any]]:
    """Order history rows; ``action`` is the non-searchable cancel column."""
    rows: list[dict[str, Any]] = []
    for order in orders:
        rows.append(
            {
                "date": order.created_at.isoformat(sep=" ") if order.created_at else "",
                "symbol": order.symbol,
                "type": order.order_type.value,
                "side": order.side.value,
                "quantity": order.quantity,
                "price": order.price,
                "status": order.status.value,
                "order_id": order.order_id,
                "action": "cancel" if order.is_cancellable else "",
            }
        )
    return rows
