"""Market snapshot state, price history, and table summaries."""

from .history import filter_timeframe, history_to_frame, normalize_timeframe
from .snapshot_store import MarketSnapshotStore, diff_snapshots
from .summary import format_large_number, format_percent, format_price, total_volume

__all__ = [
    "MarketSnapshotStore",
    "diff_snapshots",
    "filter_timeframe",
    "format_large_number",
    "format_percent",
    "format_price",
    "history_to_frame",
    "normalize_timeframe",
    "total_volume",
]
