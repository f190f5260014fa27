"""Order domain exceptions.

Raised by the validator and the Service Layer.  Each carries its HTTP
status and a caller-safe message; the core exception handler renders
them, the views never build error responses themselves.
"""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import PersistenceError, ServiceError

__all__ = [
    "InvalidAddress",
    "InvalidAmount",
    "InvalidCoordinate",
    "InvalidId",
    "InvalidOrderType",
    "InvalidStatus",
    "MissingFields",
    "OrderNotFound",
    "OrderValidationError",
    "PersistenceError",
]


class OrderValidationError(ServiceError):
    """Malformed caller input, detected before touching the store."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class MissingFields(OrderValidationError):
    """One or more required creation fields are absent."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Missing required fields: {', '.join(fields)}")


class InvalidCoordinate(OrderValidationError):
    """A latitude or longitude is non-numeric or out of range."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class InvalidAmount(OrderValidationError):
    default_message = "Amount must be a positive number"


class InvalidOrderType(OrderValidationError):
    """orderType is not one of the supported types."""


class InvalidStatus(OrderValidationError):
    """status filter is not one of the lifecycle statuses."""


class InvalidAddress(OrderValidationError):
    """An address is not a string."""


class InvalidId(OrderValidationError):
    default_message = "Invalid order ID"


class OrderNotFound(ServiceError):
    """The order does not exist or belongs to another user."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Order not found"
