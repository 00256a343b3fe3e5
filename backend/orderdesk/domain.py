"""
Domain objects shared by the validator, the storage backends and the
notification sinks. Storage implementations convert to and from these.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, NamedTuple


@dataclass(frozen=True)
class LineItem:
    """One product entry in an order. Frozen once derived."""

    name: str
    quantity: int
    category: str

    def encoded(self) -> str:
        """Display form used in the ledger, e.g. "DONSA (x2)"."""
        return f"{self.name} (x{self.quantity})"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity, "category": self.category}


@dataclass
class ValidatedSubmission:
    """Client submission that passed validation, ready for storage."""

    name: str
    sender_number: str
    receiver_name: str
    receiver_number: str
    products: List[LineItem]
    pep_code: str = ""


@dataclass
class Order:
    """A persisted order. `id` and `created_at` are assigned by storage."""

    id: str
    name: str
    sender_number: str
    receiver_name: str
    receiver_number: str
    pep_code: str
    created_at: datetime
    products: List[LineItem] = field(default_factory=list)

    def products_summary(self) -> str:
        """Comma-joined "name (xqty)" text written to the ledger."""
        return ", ".join(item.encoded() for item in self.products)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sender_number": self.sender_number,
            "receiver_name": self.receiver_name,
            "receiver_number": self.receiver_number,
            "pep_code": self.pep_code,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "products": [item.to_dict() for item in self.products],
        }


class ProductTotal(NamedTuple):
    """Per-product sales aggregate (derived, never stored)."""

    product: str
    total_quantity: int
    occurrences: int
