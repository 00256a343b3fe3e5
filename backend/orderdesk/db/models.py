"""
Relational models for persisted orders.

These models are the single source of the schema and are used by Alembic for
migration generation. Storage adapters convert them to domain objects.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

from orderdesk.utils.time_utils import now_sast_naive

Base = declarative_base()


class OrderModel(Base):
    """A storefront order with contact details."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)  # UUID string
    name = Column(String(255), nullable=False)
    sender_number = Column(String(64), nullable=False)
    receiver_name = Column(String(255), nullable=False)
    receiver_number = Column(String(64), nullable=False)
    pep_code = Column(String(64), nullable=False, default="")
    created_at = Column(DateTime, default=now_sast_naive, nullable=False)  # SAST local time

    __table_args__ = (
        Index("idx_orders_created", "created_at"),
    )

    # Relationships
    products = relationship(
        "LineItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="LineItemModel.position",
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, name={self.name}, created_at={self.created_at})>"


class LineItemModel(Base):
    """Product line inside an order."""

    __tablename__ = "order_line_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # Submission order
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    category = Column(String(100), nullable=False)

    __table_args__ = (
        Index("idx_line_items_order", "order_id"),
        Index("idx_line_items_name", "name"),
    )

    order = relationship("OrderModel", back_populates="products")

    def __repr__(self):
        return f"<LineItemModel(name={self.name}, quantity={self.quantity}, category={self.category})>"
