"""
SQLAlchemy storage implementation for orderdesk.

Persists orders and their line items through the models in orderdesk.db.models
and computes product totals with a GROUP BY query.
"""

import logging
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import create_engine, select, delete, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session, selectinload

from orderdesk.db import init_db
from orderdesk.db.models import Base, OrderModel, LineItemModel
from orderdesk.domain import LineItem, Order, ProductTotal, ValidatedSubmission
from orderdesk.errors import PersistenceError
from orderdesk.storage.base import Storage
from orderdesk.utils.time_utils import now_sast_naive

logger = logging.getLogger(__name__)


def _to_domain(row: OrderModel) -> Order:
    return Order(
        id=row.id,
        name=row.name,
        sender_number=row.sender_number,
        receiver_name=row.receiver_name,
        receiver_number=row.receiver_number,
        pep_code=row.pep_code or "",
        created_at=row.created_at,
        products=[
            LineItem(name=item.name, quantity=item.quantity, category=item.category)
            for item in row.products
        ],
    )


class SQLAlchemyStorage(Storage):
    """SQLAlchemy-backed storage with explicit transaction blocks."""

    def __init__(self, database_url: str = "sqlite:///orders.db", use_alembic: bool = False):
        """
        Initialize SQLAlchemy storage.

        Args:
            database_url: SQLAlchemy database URL (default: sqlite:///orders.db)
            use_alembic: run Alembic migrations instead of create_all

        Raises:
            RuntimeError: if the schema cannot be created (storage unreachable).
        """
        self.database_url = database_url

        # future=True: SQLAlchemy 2.0 style execution
        # pool_pre_ping=True: verify connections before use (detect stale connections)
        self.engine = create_engine(
            self.database_url,
            connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
            echo=False,
            future=True,
            pool_pre_ping=True,
        )

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        init_db(self.engine, use_alembic=use_alembic, base=Base)
        logger.info("Database initialized", extra={"database_url": self.engine.url.render_as_string(hide_password=True)})

    def _get_session(self) -> Session:
        """Get a new database session (caller must close)."""
        return self.SessionLocal()

    def save_order(self, submission: ValidatedSubmission) -> Order:
        """Insert the order and its line items in one transaction."""
        row = OrderModel(
            id=str(uuid4()),
            name=submission.name,
            sender_number=submission.sender_number,
            receiver_name=submission.receiver_name,
            receiver_number=submission.receiver_number,
            pep_code=submission.pep_code or "",
            created_at=now_sast_naive(),
            products=[
                LineItemModel(
                    position=position,
                    name=item.name,
                    quantity=item.quantity,
                    category=item.category,
                )
                for position, item in enumerate(submission.products)
            ],
        )
        session = self._get_session()
        try:
            with session.begin():
                session.add(row)
            return _to_domain(row)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save order: {e}") from e
        finally:
            session.close()

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get a single order by id."""
        session = self._get_session()
        try:
            stmt = (
                select(OrderModel)
                .where(OrderModel.id == order_id)
                .options(selectinload(OrderModel.products))
            )
            row = session.execute(stmt).scalar_one_or_none()
            return _to_domain(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load order {order_id}: {e}") from e
        finally:
            session.close()

    def count_orders(self) -> int:
        session = self._get_session()
        try:
            return session.execute(select(func.count(OrderModel.id))).scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count orders: {e}") from e
        finally:
            session.close()

    def product_totals(self) -> List[ProductTotal]:
        """Group line items by product name, summing quantity and counting rows."""
        session = self._get_session()
        try:
            stmt = (
                select(
                    LineItemModel.name,
                    func.sum(LineItemModel.quantity),
                    func.count(LineItemModel.id),
                )
                .group_by(LineItemModel.name)
                .order_by(LineItemModel.name.asc())
            )
            return [
                ProductTotal(name, int(total or 0), int(count or 0))
                for name, total, count in session.execute(stmt).all()
            ]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to aggregate product totals: {e}") from e
        finally:
            session.close()

    def ping(self) -> bool:
        """Run SELECT 1 against the database."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database ping failed: %s", e)
            return False

    def clear(self) -> None:
        """Delete all orders and line items."""
        session = self._get_session()
        try:
            with session.begin():
                session.execute(delete(LineItemModel))
                session.execute(delete(OrderModel))
        finally:
            session.close()

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
