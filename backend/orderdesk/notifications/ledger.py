"""
Google Sheets ledger.

Each saved order is appended as one row to the "Orders" sheet; the
"ProductsSummary" sheet is then rewritten wholesale from product totals.
"""

import logging
import re
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional

from orderdesk.domain import Order, ProductTotal
from orderdesk.errors import NotificationError
from orderdesk.utils.time_utils import format_sast

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

ORDERS_RANGE = "Orders!A:H"
ORDERS_PRODUCTS_RANGE = "Orders!G2:G"
SUMMARY_CLEAR_RANGE = "ProductsSummary!A:C"
SUMMARY_RANGE = "ProductsSummary!A1:C"
SUMMARY_HEADER = ["Product Name", "Quantity Ordered", "Items Sold"]

_ENTRY_PATTERN = re.compile(r"^(?P<name>.+) \(x(?P<qty>\d+)\)$")


def order_row(order: Order) -> List[Any]:
    """Ledger row: id, contact fields, pep code, product text, timestamp."""
    return [
        order.id,
        order.name,
        order.sender_number,
        order.receiver_name,
        order.receiver_number,
        order.pep_code or "",
        order.products_summary(),
        format_sast(order.created_at),
    ]


def summary_rows(totals: Iterable[ProductTotal]) -> List[List[Any]]:
    """Header plus one [product, total_quantity, occurrences] row per product."""
    return [SUMMARY_HEADER] + [[t.product, t.total_quantity, t.occurrences] for t in totals]


def totals_from_product_cells(cells: Iterable[Any]) -> List[ProductTotal]:
    """
    Rebuild product totals from the ledger's product text column.

    Each cell looks like "DONSA (x2), MV (x1)". Entries that do not match
    "<name> (x<qty>)" are skipped.
    """
    quantities: Dict[str, int] = defaultdict(int)
    occurrences: Dict[str, int] = defaultdict(int)
    for cell in cells:
        if not isinstance(cell, str) or not cell.strip():
            continue
        for entry in cell.split(", "):
            match = _ENTRY_PATTERN.match(entry.strip())
            if not match:
                continue
            name = match.group("name")
            quantities[name] += int(match.group("qty"))
            occurrences[name] += 1
    return [ProductTotal(name, quantities[name], occurrences[name]) for name in sorted(quantities)]


def build_sheets_service(credentials_info: Dict[str, Any]):
    """Build a Sheets v4 service from service-account info."""
    from google.oauth2 import service_account
    from googleapiclient.discovery import build

    creds = service_account.Credentials.from_service_account_info(credentials_info, scopes=SCOPES)
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


class SheetsLedger:
    """Append-and-summarize client for one spreadsheet."""

    def __init__(self, service, spreadsheet_id: str, summary_source: str = "store"):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.summary_source = summary_source

    @classmethod
    def from_credentials(cls, credentials_info: Dict[str, Any], spreadsheet_id: str,
                         summary_source: str = "store") -> "SheetsLedger":
        return cls(build_sheets_service(credentials_info), spreadsheet_id, summary_source)

    def _values(self):
        return self._service.spreadsheets().values()

    def append_order(self, order: Order) -> None:
        self._values().append(
            spreadsheetId=self.spreadsheet_id,
            range=ORDERS_RANGE,
            valueInputOption="RAW",
            body={"values": [order_row(order)]},
        ).execute()
        logger.info("Order appended to ledger", extra={"order_id": order.id})

    def totals_from_ledger(self) -> List[ProductTotal]:
        """Legacy summary source: re-parse the product column of every row."""
        result = self._values().get(
            spreadsheetId=self.spreadsheet_id,
            range=ORDERS_PRODUCTS_RANGE,
        ).execute()
        cells = [row[0] for row in result.get("values", []) if row]
        return totals_from_product_cells(cells)

    def refresh_summary(self, totals: List[ProductTotal]) -> None:
        """Clear the summary region and write it again from `totals`."""
        self._values().clear(
            spreadsheetId=self.spreadsheet_id,
            range=SUMMARY_CLEAR_RANGE,
            body={},
        ).execute()
        self._values().update(
            spreadsheetId=self.spreadsheet_id,
            range=SUMMARY_RANGE,
            valueInputOption="RAW",
            body={"values": summary_rows(totals)},
        ).execute()
        logger.info("Product summary updated", extra={"products": len(totals)})

    def record_order(self, order: Order, totals_provider: Optional[Callable[[], List[ProductTotal]]] = None) -> bool:
        """
        Append the order row, then refresh the summary.

        `totals_provider` supplies totals from the authoritative store; it is
        ignored when the ledger is configured to re-derive its own summary.

        Raises:
            NotificationError: any Sheets API or totals failure.
        """
        try:
            self.append_order(order)
            if self.summary_source == "ledger" or totals_provider is None:
                totals = self.totals_from_ledger()
            else:
                totals = totals_provider()
            self.refresh_summary(totals)
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"Google Sheets update failed: {e}") from e
        return True


def create_ledger(settings) -> Optional[SheetsLedger]:
    """
    Build the ledger from settings, or return None when it is not configured.

    Missing or malformed credentials disable the feature; in production this
    is logged as a warning.
    """
    notice = logger.warning if settings.is_production else logger.info
    try:
        info = settings.load_google_credentials()
    except Exception as e:
        logger.error("Google credentials error, ledger disabled: %s", e)
        return None

    if info is None:
        notice("Google Sheets credentials not configured, ledger disabled")
        return None
    if not settings.google_sheet_id:
        notice("GOOGLE_SHEET_ID not set, ledger disabled")
        return None

    try:
        ledger = SheetsLedger.from_credentials(info, settings.google_sheet_id, settings.ledger_summary_source)
    except Exception as e:
        logger.error("Google Sheets API initialization failed, ledger disabled: %s", e)
        return None
    logger.info("Google Sheets API initialized")
    return ledger
