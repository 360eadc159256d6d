"""Custom exceptions for clearer error handling across the dashboard."""

from __future__ import annotations

from enum import StrEnum


class DashboardError(Exception):
    """Base exception for all dashboard errors."""


class ConfigError(DashboardError):
    """Raised when environment configuration is invalid or missing."""


class ValidationCode(StrEnum):
    """User-correctable input problems."""

    INVALID_QUANTITY = "InvalidQuantity"
    INVALID_LIMIT_PRICE = "InvalidLimitPrice"
    INVALID_AMOUNT = "InvalidAmount"
    INVALID_SIDE = "InvalidSide"
    INVALID_ORDER_TYPE = "InvalidOrderType"


class ValidationError(DashboardError):
    """Raised before any network call when user input is not submittable."""

    def __init__(self, code: ValidationCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class RemoteError(DashboardError):
    """Raised when the backend rejects a request or the transport fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
