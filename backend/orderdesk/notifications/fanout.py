"""
Post-persistence notification fan-out.

The ledger branch and the email branch run concurrently, each inside its own
failure boundary. Neither branch can fail the submission: errors are logged
with the order id and reflected only in the returned FanoutOutcome.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from orderdesk.domain import Order, ProductTotal

logger = logging.getLogger(__name__)


@dataclass
class FanoutOutcome:
    ledger_configured: bool = False
    ledger_updated: bool = False
    email_sent: bool = False

    @property
    def all_succeeded(self) -> bool:
        return (self.ledger_updated or not self.ledger_configured) and self.email_sent


class NotificationFanout:
    """Runs ledger append/summarize and the operator email for an order."""

    def __init__(self, mailer=None, ledger=None,
                 totals_provider: Optional[Callable[[], List[ProductTotal]]] = None):
        self.mailer = mailer
        self.ledger = ledger
        self.totals_provider = totals_provider

    @property
    def ledger_enabled(self) -> bool:
        return self.ledger is not None

    async def _ledger_branch(self, order: Order) -> bool:
        if self.ledger is None:
            logger.debug("Ledger not configured, skipping", extra={"order_id": order.id})
            return False
        try:
            await asyncio.to_thread(self.ledger.record_order, order, self.totals_provider)
            return True
        except Exception as e:
            logger.error("Google Sheets error: %s", e, extra={"order_id": order.id})
            return False

    async def _email_branch(self, order: Order) -> bool:
        if self.mailer is None:
            logger.warning("Mailer not configured, skipping email", extra={"order_id": order.id})
            return False
        try:
            await asyncio.to_thread(self.mailer.send_order_notification, order)
            return True
        except Exception as e:
            logger.error("Email error: %s", e, extra={"order_id": order.id})
            return False

    async def dispatch(self, order: Order) -> FanoutOutcome:
        """Run both branches to completion and report what happened."""
        ledger_updated, email_sent = await asyncio.gather(
            self._ledger_branch(order),
            self._email_branch(order),
        )
        return FanoutOutcome(
            ledger_configured=self.ledger_enabled,
            ledger_updated=ledger_updated,
            email_sent=email_sent,
        )
