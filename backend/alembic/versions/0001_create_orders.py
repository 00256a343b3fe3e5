"""create orders and order_line_items

Revision ID: 0001_create_orders
Revises:
Create Date: 2025-03-01 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_create_orders"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sender_number", sa.String(length=64), nullable=False),
        sa.Column("receiver_name", sa.String(length=255), nullable=False),
        sa.Column("receiver_number", sa.String(length=64), nullable=False),
        sa.Column("pep_code", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_orders_created", "orders", ["created_at"])

    op.create_table(
        "order_line_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.String(length=36), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("category", sa.String(length=100), nullable=False),
    )
    op.create_index("idx_line_items_order", "order_line_items", ["order_id"])
    op.create_index("idx_line_items_name", "order_line_items", ["name"])


def downgrade() -> None:
    op.drop_index("idx_line_items_name", table_name="order_line_items")
    op.drop_index("idx_line_items_order", table_name="order_line_items")
    op.drop_table("order_line_items")
    op.drop_index("idx_orders_created", table_name="orders")
    op.drop_table("orders")
