"""Backend implementations."""

from .base import MarketBackend
from .demo import DemoMarketBackend
from .rest_client import RestMarketBackend

__all__ = ["DemoMarketBackend", "MarketBackend", "RestMarketBackend"]
