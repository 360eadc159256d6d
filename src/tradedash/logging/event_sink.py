"""Session event stream on disk and its HTML report."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from tradedash.domain.events import DashboardEvent

ACTIVITY_EVENTS = ("order_submit", "order_update", "order_cancel", "cash")


class JsonlEventSink:
    """Appends one JSON object per line to the session's ``events.jsonl``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.written = 0

    def emit(self, event: DashboardEvent) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(f"{event.to_json()}\n")
        self.written += 1


class NullEventSink:
    """Sink for one-shot commands that keep no session file."""

    def emit(self, event: DashboardEvent) -> None:
        _ = event


def load_events(path: str | Path, event_types: Iterable[str] | None = None) -> list[dict[str, Any]]:
    """Read session records, optionally keeping only some event types."""
    source = Path(path)
    if not source.exists():
        return []
    wanted = set(event_types) if event_types is not None else None
    records: list[dict[str, Any]] = []
    for line in source.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        record = json.loads(line)
        if wanted is None or record.get("event_type") in wanted:
            records.append(record)
    return records


def _events_frame(records: list[dict[str, Any]]) -> pd.DataFrame:
    frame = pd.json_normalize(records, sep="_")
    if "ts" in frame:
        frame["ts"] = pd.to_datetime(frame["ts"], utc=True, errors="coerce")
    return frame


def _price_figure(frame: pd.DataFrame) -> go.Figure | None:
    if "payload_new_price" not in frame:
        return None
    ticks = frame[frame["event_type"] == "price_tick"].dropna(subset=["payload_new_price"])
    if ticks.empty:
        return None
    return px.line(
        ticks.sort_values("ts"),
        x="ts",
        y="payload_new_price",
        color="payload_symbol",
        markers=True,
        title="Price Ticks",
        labels={"payload_new_price": "price", "payload_symbol": "symbol", "ts": ""},
    )


def _activity_figure(frame: pd.DataFrame) -> go.Figure | None:
    activity = frame[frame["event_type"].isin(ACTIVITY_EVENTS)]
    if activity.empty:
        return None
    columns = [
        column
        for column in ("payload_symbol", "payload_side", "payload_quantity", "payload_price",
                       "payload_action", "payload_amount", "payload_success", "payload_message")
        if column in activity
    ]
    header = ["time", "event", *(column.removeprefix("payload_") for column in columns)]
    cells = [
        activity["ts"].dt.strftime("%H:%M:%S").fillna(""),
        activity["event_type"],
        *(activity[column].astype(object).where(activity[column].notna(), "") for column in columns),
    ]
    figure = go.Figure(go.Table(header={"values": header}, cells={"values": cells}))
    figure.update_layout(title="Orders and Cash")
    return figure


def generate_plotly_report(events_jsonl_path: str, output_html_path: str) -> None:
    """Write price ticks, order and cash activity, and event counts as one HTML page."""
    records = load_events(events_jsonl_path)
    output = Path(output_html_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    figures: list[go.Figure] = []
    if records:
        frame = _events_frame(records)
        for figure in (_price_figure(frame), _activity_figure(frame)):
            if figure is not None:
                figures.append(figure)
        counts = frame["event_type"].value_counts().rename_axis("event_type").reset_index()
    else:
        counts = pd.DataFrame({"event_type": ["none"], "count": [0]})
    figures.append(px.bar(counts, x="event_type", y="count", title="Session Event Counts"))

    body = "".join(
        figure.to_html(full_html=False, include_plotlyjs="cdn" if index == 0 else False)
        for index, figure in enumerate(figures)
    )
    output.write_text(
        "<html><head><meta charset='utf-8'><title>tradedash session report</title></head>"
        f"<body>{body}</body></html>",
        encoding="utf-8",
    )
