"""
Test suite for database initialization and migrations.

Verifies that init_db works correctly with both Alembic and create_all modes,
and that the resulting schema is what the storage layer expects.
"""

import pytest
from sqlalchemy import create_engine, inspect, text

from orderdesk.db import init_db


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'orders.db'}", future=True)
    yield engine
    engine.dispose()


class TestInitDBCreateAll:
    """init_db with use_alembic=False."""

    def test_creates_order_tables(self, engine):
        init_db(engine, use_alembic=False)

        tables = set(inspect(engine).get_table_names())
        assert {"orders", "order_line_items"} <= tables
        assert "alembic_version" not in tables

    def test_idempotent(self, engine):
        init_db(engine, use_alembic=False)
        init_db(engine, use_alembic=False)
        assert "orders" in inspect(engine).get_table_names()

    def test_line_item_columns(self, engine):
        init_db(engine, use_alembic=False)
        columns = {c["name"] for c in inspect(engine).get_columns("order_line_items")}
        assert columns == {"id", "order_id", "position", "name", "quantity", "category"}


class TestInitDBAlembic:
    """init_db with use_alembic=True runs the migration scripts to head."""

    def test_upgrade_to_head(self, engine):
        init_db(engine, use_alembic=True)

        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        assert {"orders", "order_line_items", "alembic_version"} <= tables

        with engine.connect() as conn:
            version = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
        assert version == "0001_create_orders"

    def test_indexes_created(self, engine):
        init_db(engine, use_alembic=True)

        inspector = inspect(engine)
        order_indexes = {i["name"] for i in inspector.get_indexes("orders")}
        item_indexes = {i["name"] for i in inspector.get_indexes("order_line_items")}
        assert "idx_orders_created" in order_indexes
        assert {"idx_line_items_order", "idx_line_items_name"} <= item_indexes

    def test_upgrade_twice_is_noop(self, engine):
        init_db(engine, use_alembic=True)
        init_db(engine, use_alembic=True)
        with engine.connect() as conn:
            rows = conn.execute(text("SELECT COUNT(*) FROM alembic_version")).scalar()
        assert rows == 1

    def test_storage_works_on_migrated_schema(self, tmp_path):
        from orderdesk.domain import LineItem, ValidatedSubmission
        from orderdesk.storage import SQLAlchemyStorage

        storage = SQLAlchemyStorage(f"sqlite:///{tmp_path / 'migrated.db'}", use_alembic=True)
        try:
            order = storage.save_order(ValidatedSubmission(
                name="Jane", sender_number="1", receiver_name="T", receiver_number="2",
                products=[LineItem("DONSA", 2, "Ezasekamelweni")],
            ))
            assert storage.get_order(order.id).products == [LineItem("DONSA", 2, "Ezasekamelweni")]
        finally:
            storage.close()
