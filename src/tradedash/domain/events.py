"""Structured dashboard session events."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Self


def _utc_now() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass(frozen=True)
class DashboardEvent:
    """One line of a session's ``events.jsonl``.

    ``event_type`` is one of ``session_started``, ``price_tick``,
    ``refresh_failed``, ``order_submit``, ``order_update``, ``order_cancel``,
    ``cash`` or ``error``.
    """

    session_id: str
    user_id: str
    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    ts: str = field(default_factory=_utc_now)

    def to_record(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_record(), sort_keys=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Self:
        return cls(
            session_id=str(record.get("session_id", "")),
            user_id=str(record.get("user_id", "")),
            event_type=str(record.get("event_type", "")),
            payload=dict(record.get("payload") or {}),
            ts=str(record.get("ts") or _utc_now()),
        )
