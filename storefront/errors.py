"""Exception types raised by the storefront client."""

from __future__ import annotations

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for all storefront errors."""


class ApiError(StorefrontError):
    """The REST API could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class NotFoundError(StorefrontError):
    """A record with the requested id does not exist in the local store."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class EmptyCartError(StorefrontError):
    """Checkout was attempted with no items in the cart."""

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class CheckoutValidationError(StorefrontError):
    """Checkout form values are missing required fields."""

    def __init__(self, errors: Dict[str, Dict[str, str]]) -> None:
        fields = ", ".join(f"{section}.{name}" for section, messages in errors.items() for name in messages)
        super().__init__(f"Checkout form is incomplete: {fields}")
        self.errors = errors
