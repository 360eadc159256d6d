from __future__ import annotations

from pathlib import Path

from tradedash.domain.events import DashboardEvent
from tradedash.logging.event_sink import JsonlEventSink, generate_plotly_report, load_events


def test_events_round_trip_through_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "session" / "events.jsonl"
    sink = JsonlEventSink(str(path))

    sink.emit(DashboardEvent("s-1", "user123", "session_started", {"backend": "demo"}))
    sink.emit(
        DashboardEvent(
            "s-1",
            "user123",
            "price_tick",
            {"symbol": "AAPL", "old_price": 1.0, "new_price": 2.0, "direction": "up"},
        )
    )

    records = load_events(path)

    assert [record["event_type"] for record in records] == ["session_started", "price_tick"]
    assert records[1]["payload"]["new_price"] == 2.0
    assert records[0]["session_id"] == "s-1"


def test_report_renders_price_ticks(tmp_path: Path) -> None:
    events_path = tmp_path / "events.jsonl"
    report_path = tmp_path / "report.html"
    sink = JsonlEventSink(str(events_path))
    for price in (1.0, 2.0):
        sink.emit(
            DashboardEvent(
                "s-1",
                "user123",
                "price_tick",
                {"symbol": "AAPL", "old_price": price - 1, "new_price": price, "direction": "up"},
            )
        )

    generate_plotly_report(str(events_path), str(report_path))

    html = report_path.read_text(encoding="utf-8")
    assert "Price Ticks" in html
    assert "Session Event Counts" in html


def test_report_without_events_still_writes_file(tmp_path: Path) -> None:
    report_path = tmp_path / "out" / "report.html"

    generate_plotly_report(str(tmp_path / "missing.jsonl"), str(report_path))

    assert report_path.exists()
    assert load_events(tmp_path / "missing.jsonl") == []


def test_load_events_filters_by_type(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    sink = JsonlEventSink(path)
    sink.emit(DashboardEvent("s-1", "user123", "cash", {"action": "deposit", "amount": 10.0}))
    sink.emit(DashboardEvent("s-1", "user123", "refresh_failed", {"message": "timeout"}))

    records = load_events(path, event_types=["cash"])

    assert sink.written == 2
    assert len(records) == 1
    event = DashboardEvent.from_record(records[0])
    assert event.payload == {"action": "deposit", "amount": 10.0}
    assert event.session_id == "s-1"


def test_report_includes_order_and_cash_activity(tmp_path: Path) -> None:
    events_path = tmp_path / "events.jsonl"
    report_path = tmp_path / "report.html"
    sink = JsonlEventSink(events_path)
    sink.emit(
        DashboardEvent(
            "s-1",
            "user123",
            "order_submit",
            {"symbol": "AAPL", "side": "BUY", "quantity": 1.0, "price": 100.0, "type": "MARKET"},
        )
    )
    sink.emit(DashboardEvent("s-1", "user123", "cash", {"action": "withdraw", "amount": 5.0}))

    generate_plotly_report(str(events_path), str(report_path))

    html = report_path.read_text(encoding="utf-8")
    assert "Orders and Cash" in html
    assert "Price Ticks" not in html
