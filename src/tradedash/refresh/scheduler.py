"""Periodic market snapshot polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from tradedash.backends.base import MarketBackend
from tradedash.domain.events import DashboardEvent
from tradedash.domain.models import MarketSnapshot, PriceDelta
from tradedash.errors import DashboardError
from tradedash.logging.event_sink import JsonlEventSink, NullEventSink
from tradedash.logging.logger import DashboardLogger
from tradedash.market.snapshot_store import MarketSnapshotStore

logger = logging.getLogger(__name__)

SnapshotFetcher = Callable[[], Awaitable[MarketSnapshot]]
DeltaListener = Callable[[list[PriceDelta]], None]


class RefreshState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"


def backend_fetcher(backend: MarketBackend) -> SnapshotFetcher:
    """Run the blocking backend call off the event loop."""

    async def fetch() -> MarketSnapshot:
        return await asyncio.to_thread(backend.fetch_prices)

    return fetch


class RefreshScheduler:
    """Polls for snapshots and reports price moves.

    A tick that fires while a fetch is still outstanding is a no-op, so a slow
    backend never accumulates concurrent requests. Failed fetches leave the
    store untouched; the next tick tries again.
    """

    def __init__(
        self,
        store: MarketSnapshotStore,
        fetch: SnapshotFetcher,
        interval_seconds: float = 5.0,
        human_logger: DashboardLogger | None = None,
        event_sink: JsonlEventSink | NullEventSink | None = None,
        session_id: str = "",
        user_id: str = "",
        is_active: Callable[[], bool] | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.store = store
        self.fetch = fetch
        self.interval_seconds = float(interval_seconds)
        self.human_logger = human_logger
        self.event_sink = event_sink or NullEventSink()
        self.session_id = session_id
        self.user_id = user_id
        self.is_active = is_active or (lambda: True)
        self.state = RefreshState.IDLE
        self.skipped_ticks = 0
        self.failed_ticks = 0
        self._listeners: list[DeltaListener] = []
        self._stopped = False
        self._tasks: set[asyncio.Task[list[PriceDelta] | None]] = set()

    def subscribe(self, listener: DeltaListener) -> None:
        self._listeners.append(listener)

    async def tick(self) -> list[PriceDelta] | None:
        """Fetch once and apply the snapshot; ``None`` means nothing was applied."""
        if not self.is_active():
            logger.debug("refresh tick skipped: view inactive")
            return None
        if self.state is RefreshState.FETCHING:
            self.skipped_ticks += 1
            logger.debug("refresh tick skipped: fetch outstanding")
            return None

        self.state = RefreshState.FETCHING
        try:
            snapshot = await self.fetch()
        except (DashboardError, OSError) as exc:
            self.failed_ticks += 1
            self._report_failure(str(exc))
            return None
        finally:
            self.state = RefreshState.IDLE

        deltas = self.store.replace(snapshot)
        self._publish(deltas)
        return deltas

    async def run(self, max_ticks: int | None = None) -> None:
        """Fire ``tick`` every interval until stopped or ``max_ticks`` fired."""
        self._stopped = False
        fired = 0
        try:
            while not self._stopped:
                task = asyncio.create_task(self.tick())
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
                fired += 1
                if max_ticks is not None and fired >= max_ticks:
                    break
                await asyncio.sleep(self.interval_seconds)
            if self._tasks:
                await asyncio.gather(*self._tasks)
        finally:
            for task in list(self._tasks):
                task.cancel()

    def stop(self) -> None:
        self._stopped = True

    def _publish(self, deltas: list[PriceDelta]) -> None:
        if self.human_logger is not None:
            self.human_logger.prices_refreshed(len(self.store.current), deltas)
        for delta in deltas:
            self.event_sink.emit(
                DashboardEvent(
                    session_id=self.session_id,
                    user_id=self.user_id,
                    event_type="price_tick",
                    payload={
                        "symbol": delta.symbol,
                        "old_price": delta.old_price,
                        "new_price": delta.new_price,
                        "direction": delta.direction.value,
                    },
                )
            )
        for listener in self._listeners:
            listener(deltas)

    def _report_failure(self, message: str) -> None:
        if self.human_logger is not None:
            self.human_logger.refresh_failed(message)
        else:
            logger.warning("refresh failed: %s", message)
        self.event_sink.emit(
            DashboardEvent(
                session_id=self.session_id,
                user_id=self.user_id,
                event_type="refresh_failed",
                payload={"message": message},
            )
        )
