"""Notification sinks (ledger, email) and the fan-out that drives them."""

from .fanout import FanoutOutcome, NotificationFanout
from .ledger import SheetsLedger, create_ledger
from .mailer import Mailer, render_order_email

__all__ = [
    "FanoutOutcome",
    "NotificationFanout",
    "SheetsLedger",
    "create_ledger",
    "Mailer",
    "render_order_email",
]
