"""Table sort and filter engine."""

from .sort_filter import (
    ALL_STATUSES,
    ColumnKind,
    SortDirection,
    SortResult,
    TableSorter,
    bubble_sort,
    filter_any_cell,
    filter_by_status,
    filter_rows,
    market_rows,
    order_rows,
    parse_decimal,
)

__all__ = [
    "ALL_STATUSES",
    "ColumnKind",
    "SortDirection",
    "SortResult",
    "TableSorter",
    "bubble_sort",
    "filter_any_cell",
    "filter_by_status",
    "filter_rows",
    "market_rows",
    "order_rows",
    "parse_decimal",
]
