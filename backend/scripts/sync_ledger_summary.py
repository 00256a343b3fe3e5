"""Rewrite the ledger's ProductsSummary sheet from the order database.

CLI usage:
    python -m scripts.sync_ledger_summary --db sqlite:///orders.db
    python -m scripts.sync_ledger_summary --from-ledger   # re-derive from Orders sheet

Useful after a failed summary refresh: the per-order fan-out only refreshes
the summary when a new order arrives.
"""

import argparse
import logging
import sys
from typing import Dict, Optional

from orderdesk.config import Settings
from orderdesk.logging_config import configure_logging
from orderdesk.notifications.ledger import SheetsLedger, create_ledger
from orderdesk.storage import SQLAlchemyStorage, Storage

logger = logging.getLogger(__name__)


def sync_summary(ledger: SheetsLedger, storage: Optional[Storage] = None, from_ledger: bool = False) -> Dict[str, int]:
    """Compute product totals and rewrite the summary region."""
    if from_ledger or storage is None:
        totals = ledger.totals_from_ledger()
    else:
        totals = storage.product_totals()
    ledger.refresh_summary(totals)
    return {"products": len(totals), "quantity": sum(t.total_quantity for t in totals)}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Rebuild the ledger product summary")
    parser.add_argument("--db", default=None, help="Database URL (defaults to DATABASE_URL)")
    parser.add_argument("--from-ledger", action="store_true",
                        help="Re-derive totals from the Orders sheet instead of the database")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level, None)

    ledger = create_ledger(settings)
    if ledger is None:
        logger.error("Ledger is not configured; nothing to sync")
        return 1

    storage = None
    if not args.from_ledger:
        storage = SQLAlchemyStorage(args.db or settings.database_url, use_alembic=settings.use_alembic)
    try:
        stats = sync_summary(ledger, storage, from_ledger=args.from_ledger)
    finally:
        if storage is not None:
            storage.close()
    logger.info("Summary synced: %s products, %s units", stats["products"], stats["quantity"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
