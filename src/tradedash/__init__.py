"""Client-side computation layer for a trading and portfolio dashboard."""

__version__ = "0.1.0"
