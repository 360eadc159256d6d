"""Logging helpers."""

from .event_sink import JsonlEventSink, NullEventSink, generate_plotly_report, load_events
from .logger import DashboardLogger

__all__ = [
    "DashboardLogger",
    "JsonlEventSink",
    "NullEventSink",
    "generate_plotly_report",
    "load_events",
]
