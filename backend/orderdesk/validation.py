"""
Submission validation and product string parsing.

Product strings come from the storefront form as "<name> (x<quantity>)".
Parsing never rejects a submission: malformed entries degrade to quantity 1
and, usually, the "Unknown" category.
"""

import re
from typing import Any, List, Mapping, Optional

from orderdesk.categories import classify
from orderdesk.domain import LineItem, ValidatedSubmission
from orderdesk.errors import MissingRequiredField, NoProductsSelected

REQUIRED_FIELDS = ("name", "sender_number", "receiver_name", "receiver_number")

QUANTITY_MARKER = " (x"
_QUANTITY_PATTERN = re.compile(r"\(x(\d+)\)")
# Largest quantity the orders table can hold (signed 32-bit INTEGER).
MAX_QUANTITY = 2**31 - 1


def _clean(value: Any) -> Optional[str]:
    """Coerce a form value to a stripped string; None/blank -> None."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, dict)):
        return None
    text = str(value).strip()
    return text or None


def parse_product(encoded: Any) -> LineItem:
    """
    Parse one encoded product string into a LineItem.

    Example:
      "DONSA (x2)"        -> LineItem("DONSA", 2, "Ezasekamelweni")
      "UNKNOWNTHING"      -> LineItem("UNKNOWNTHING", 1, "Unknown")
      "MV (xabc)"         -> LineItem("MV", 1, "Ezasekamelweni")
      "MV (x99999999999)" -> LineItem("MV", 1, "Ezasekamelweni")
    """
    text = "" if encoded is None else str(encoded)
    name = text.split(QUANTITY_MARKER, 1)[0]

    quantity = 1
    match = _QUANTITY_PATTERN.search(text)
    if match:
        quantity = int(match.group(1))
        if not 0 < quantity <= MAX_QUANTITY:
            quantity = 1

    return LineItem(name=name, quantity=quantity, category=classify(name))


def parse_products(encoded_products: List[Any]) -> List[LineItem]:
    return [parse_product(p) for p in encoded_products]


def validate_submission(raw: Mapping[str, Any]) -> ValidatedSubmission:
    """
    Check a raw submission and build a ValidatedSubmission.

    Raises MissingRequiredField before NoProductsSelected, so a request that
    is missing both reports the contact fields first.
    """
    if not isinstance(raw, Mapping):
        raise MissingRequiredField(REQUIRED_FIELDS)

    cleaned = {field: _clean(raw.get(field)) for field in REQUIRED_FIELDS}
    missing = [field for field, value in cleaned.items() if value is None]
    if missing:
        raise MissingRequiredField(missing)

    products = raw.get("products")
    if not isinstance(products, (list, tuple)) or len(products) == 0:
        raise NoProductsSelected()

    return ValidatedSubmission(
        name=cleaned["name"],
        sender_number=cleaned["sender_number"],
        receiver_name=cleaned["receiver_name"],
        receiver_number=cleaned["receiver_number"],
        pep_code=_clean(raw.get("pep_code")) or "",
        products=parse_products(list(products)),
    )
