"""
Error taxonomy for the order service.

ValidationError and PersistenceError are terminal for a submission and map to
HTTP 400 / 500. NotificationError never leaves the fan-out layer.
"""

from typing import Iterable, List


class OrderDeskError(Exception):
    """Base class for all service errors."""


class ConfigurationError(OrderDeskError):
    """Settings are present but unusable (e.g. malformed credentials JSON)."""


class ValidationError(OrderDeskError):
    """Client input defect. Never retried."""

    message = "Invalid submission."

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class MissingRequiredField(ValidationError):
    """One or more of the required contact fields is missing or empty."""

    message = "Missing required fields or products."

    def __init__(self, fields: Iterable[str]):
        self.fields: List[str] = list(fields)
        super().__init__()

    def __str__(self) -> str:
        return f"{self.message} Missing: {', '.join(self.fields)}"


class NoProductsSelected(ValidationError):
    """The products list is absent, not a list, or empty."""

    message = "Missing required fields or products."


class PersistenceError(OrderDeskError):
    """Storage unavailable or the write failed."""


class NotificationError(OrderDeskError):
    """Ledger or mail side effect failed."""
