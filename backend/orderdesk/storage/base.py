"""
Abstract Storage interface for orderdesk.

Defines the contract for order persistence and the per-product sales
aggregation. Implementations can be in-memory or database-backed.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from orderdesk.domain import Order, ProductTotal, ValidatedSubmission


class Storage(ABC):
    """Abstract base class for storage implementations."""

    @abstractmethod
    def save_order(self, submission: ValidatedSubmission) -> Order:
        """
        Persist a validated submission.

        Assigns the order id and creation timestamp (SAST).
        Raises PersistenceError if the storage layer is unavailable or the
        write fails; nothing is persisted in that case.
        """
        ...

    @abstractmethod
    def get_order(self, order_id: str) -> Optional[Order]:
        """Get a single order by id. Returns None if not found."""
        ...

    @abstractmethod
    def count_orders(self) -> int:
        """Number of persisted orders."""
        ...

    @abstractmethod
    def product_totals(self) -> List[ProductTotal]:
        """
        Aggregate all persisted line items by product name.

        Returns (product, total_quantity, occurrences) sorted by product name
        ascending. Calling it twice without intervening writes yields the
        same result.
        """
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the backend is reachable."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove all orders."""
        ...

    def close(self) -> None:
        """Release connections. No-op by default."""
        return None
