"""
Tests for the Google Sheets ledger. The Sheets service is a MagicMock.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from orderdesk.domain import LineItem, Order, ProductTotal
from orderdesk.errors import NotificationError, PersistenceError
from orderdesk.notifications.ledger import (
    ORDERS_PRODUCTS_RANGE,
    ORDERS_RANGE,
    SUMMARY_CLEAR_RANGE,
    SUMMARY_HEADER,
    SUMMARY_RANGE,
    SheetsLedger,
    order_row,
    summary_rows,
    totals_from_product_cells,
)


@pytest.fixture
def order():
    return Order(
        id="0b6f3c1e-1111-2222-3333-444455556666",
        name="Jane",
        sender_number="0820000000",
        receiver_name="Thandi",
        receiver_number="0831111111",
        pep_code="",
        created_at=datetime(2025, 3, 14, 9, 5, 33),
        products=[
            LineItem("DONSA", 2, "Ezasekamelweni"),
            LineItem("UNKNOWNTHING", 1, "Unknown"),
        ],
    )


@pytest.fixture
def service():
    return MagicMock()


def _values(service):
    return service.spreadsheets.return_value.values.return_value


class TestRows:

    def test_order_row(self, order):
        assert order_row(order) == [
            "0b6f3c1e-1111-2222-3333-444455556666",
            "Jane",
            "0820000000",
            "Thandi",
            "0831111111",
            "",
            "DONSA (x2), UNKNOWNTHING (x1)",
            "2025/03/14, 09:05:33",
        ]

    def test_summary_rows(self):
        rows = summary_rows([ProductTotal("DONSA", 5, 2), ProductTotal("MV", 1, 1)])
        assert rows == [
            ["Product Name", "Quantity Ordered", "Items Sold"],
            ["DONSA", 5, 2],
            ["MV", 1, 1],
        ]

    def test_summary_rows_empty(self):
        assert summary_rows([]) == [SUMMARY_HEADER]


class TestTotalsFromProductCells:
    """Legacy strategy: re-parse the ledger's product text column."""

    def test_parses_cells(self):
        cells = ["DONSA (x2), MV (x1)", "MV (x3)", "MBIZA EMHLOPHE (ISIWASHO) (x1)"]
        assert totals_from_product_cells(cells) == [
            ProductTotal("DONSA", 2, 1),
            ProductTotal("MBIZA EMHLOPHE (ISIWASHO)", 1, 1),
            ProductTotal("MV", 4, 2),
        ]

    def test_skips_unparseable_entries(self):
        cells = ["garbage", "DONSA (x2), broken (xq)", "", None, 17, "MV (x1)"]
        assert totals_from_product_cells(cells) == [
            ProductTotal("DONSA", 2, 1),
            ProductTotal("MV", 1, 1),
        ]

    def test_empty(self):
        assert totals_from_product_cells([]) == []


class TestSheetsLedger:

    def test_append_order(self, service, order):
        ledger = SheetsLedger(service, "sheet-123")
        ledger.append_order(order)

        _values(service).append.assert_called_once_with(
            spreadsheetId="sheet-123",
            range=ORDERS_RANGE,
            valueInputOption="RAW",
            body={"values": [order_row(order)]},
        )
        _values(service).append.return_value.execute.assert_called_once()

    def test_refresh_summary_clears_then_updates(self, service):
        ledger = SheetsLedger(service, "sheet-123")
        totals = [ProductTotal("DONSA", 2, 1)]
        ledger.refresh_summary(totals)

        _values(service).clear.assert_called_once_with(
            spreadsheetId="sheet-123", range=SUMMARY_CLEAR_RANGE, body={}
        )
        _values(service).update.assert_called_once_with(
            spreadsheetId="sheet-123",
            range=SUMMARY_RANGE,
            valueInputOption="RAW",
            body={"values": summary_rows(totals)},
        )

    def test_record_order_uses_store_totals(self, service, order):
        ledger = SheetsLedger(service, "sheet-123", summary_source="store")
        provider = MagicMock(return_value=[ProductTotal("DONSA", 7, 3)])

        assert ledger.record_order(order, provider) is True

        provider.assert_called_once_with()
        _values(service).get.assert_not_called()
        body = _values(service).update.call_args.kwargs["body"]
        assert body["values"][1] == ["DONSA", 7, 3]

    def test_record_order_rederives_from_ledger(self, service, order):
        _values(service).get.return_value.execute.return_value = {
            "values": [["DONSA (x2), UNKNOWNTHING (x1)"], [], ["DONSA (x1)"], ["not parseable"]]
        }
        ledger = SheetsLedger(service, "sheet-123", summary_source="ledger")
        provider = MagicMock()

        ledger.record_order(order, provider)

        provider.assert_not_called()
        _values(service).get.assert_called_once_with(spreadsheetId="sheet-123", range=ORDERS_PRODUCTS_RANGE)
        body = _values(service).update.call_args.kwargs["body"]
        assert body["values"] == [
            SUMMARY_HEADER,
            ["DONSA", 3, 2],
            ["UNKNOWNTHING", 1, 1],
        ]

    def test_record_order_without_provider_reads_ledger(self, service, order):
        _values(service).get.return_value.execute.return_value = {}
        SheetsLedger(service, "sheet-123").record_order(order)
        _values(service).get.assert_called_once()

    def test_api_failure_becomes_notification_error(self, service, order):
        _values(service).append.return_value.execute.side_effect = RuntimeError("HTTP 503")
        ledger = SheetsLedger(service, "sheet-123")

        with pytest.raises(NotificationError, match="HTTP 503"):
            ledger.record_order(order, lambda: [])
        _values(service).update.assert_not_called()

    def test_totals_failure_becomes_notification_error(self, service, order):
        def broken_totals():
            raise PersistenceError("db down")

        ledger = SheetsLedger(service, "sheet-123")
        with pytest.raises(NotificationError):
            ledger.record_order(order, broken_totals)
        # The order row was still appended
        _values(service).append.assert_called_once()
