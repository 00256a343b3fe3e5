"""
In-memory storage implementation for orderdesk.

Used by the test-suite and for throwaway local runs (STORAGE_BACKEND=inmemory).
"""

import threading
from collections import defaultdict
from typing import Dict, List, Optional
from uuid import uuid4

from orderdesk.domain import Order, ProductTotal, ValidatedSubmission
from orderdesk.utils.time_utils import now_sast_naive
from .base import Storage


class InMemoryStorage(Storage):
    """In-memory storage using a dict keyed by order id."""

    def __init__(self):
        """Initialize with empty storage."""
        self._orders: Dict[str, Order] = {}
        self._lock = threading.Lock()

    def save_order(self, submission: ValidatedSubmission) -> Order:
        """Store a new order and return it."""
        order = Order(
            id=str(uuid4()),
            name=submission.name,
            sender_number=submission.sender_number,
            receiver_name=submission.receiver_name,
            receiver_number=submission.receiver_number,
            pep_code=submission.pep_code or "",
            created_at=now_sast_naive(),
            products=list(submission.products),
        )
        with self._lock:
            self._orders[order.id] = order
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get a single order by id."""
        return self._orders.get(order_id)

    def count_orders(self) -> int:
        return len(self._orders)

    def product_totals(self) -> List[ProductTotal]:
        """Fold line items of every order into per-product totals."""
        quantities: Dict[str, int] = defaultdict(int)
        occurrences: Dict[str, int] = defaultdict(int)
        with self._lock:
            orders = list(self._orders.values())
        for order in orders:
            for item in order.products:
                quantities[item.name] += item.quantity
                occurrences[item.name] += 1
        return [
            ProductTotal(name, quantities[name], occurrences[name])
            for name in sorted(quantities)
        ]

    def ping(self) -> bool:
        return True

    def clear(self) -> None:
        """Clear all state."""
        with self._lock:
            self._orders.clear()
