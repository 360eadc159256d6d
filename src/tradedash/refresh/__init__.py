"""Market refresh polling."""

from .scheduler import RefreshScheduler, RefreshState, backend_fetcher

__all__ = ["RefreshScheduler", "RefreshState", "backend_fetcher"]
