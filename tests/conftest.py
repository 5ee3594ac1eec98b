"""
Shared fixtures: an in-memory catalog gateway and a small shop catalog.

The shop catalog has two schemas (public, sales), three tables, one view,
a composite primary key, a unique constraint, two foreign keys (one across
schemas) and two indexes (one of them on an expression).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from catalog_graph.gateway import CatalogGateway, TransactionInfo
from catalog_graph.metadata.postgresql import POSTGRESQL

QUERY_NAMES = [
    "databases",
    "creation_date_privilege",
    "creation_date",
    "schemas",
    "tables",
    "views",
    "columns",
    "primary_keys",
    "unique_constraints",
    "foreign_keys",
    "indexes",
]


class FakeGateway(CatalogGateway):
    """Answers each dialect query with canned rows, keyed by query name."""

    def __init__(self, rows: Dict[str, List[Dict[str, Any]]], dialect=POSTGRESQL,
                 transaction: Optional[TransactionInfo] = None):
        queries = {name: getattr(dialect, f"{name}_query") for name in QUERY_NAMES}
        self._by_sql = {sql: rows.get(name, []) for name, sql in queries.items() if sql}
        self._names = {sql: name for name, sql in queries.items() if sql}
        self.transaction = transaction
        self.executed: List[str] = []

    def execute(self, sql: str) -> List[Dict[str, Any]]:
        if sql not in self._by_sql:
            raise AssertionError(f"Unexpected query: {sql[:60]}")
        self.executed.append(self._names[sql])
        return [dict(row) for row in self._by_sql[sql]]

    def is_in_transaction(self) -> bool:
        return self.transaction is not None

    def current_transaction(self) -> Optional[TransactionInfo]:
        return self.transaction


def _column(schema, table, name, position, data_type, nullable="YES", **extra):
    row = {
        "database_name": "shop",
        "schema_name": schema,
        "table_name": table,
        "column_name": name,
        "ordinal_position": position,
        "default_value": None,
        "is_nullable": nullable,
        "data_type": data_type,
        "character_maximum_length": None,
        "numeric_precision": None,
        "numeric_scale": None,
        "is_identity": "NO",
        "identity_start": None,
        "identity_increment": None,
        "last_identity": None,
        "is_generated": "NEVER",
    }
    row.update(extra)
    return row


def _key(schema, table, constraint, column, position):
    return {
        "table_schema": schema,
        "table_name": table,
        "constraint_schema": schema,
        "constraint_name": constraint,
        "column_name": column,
        "ordinal_position": position,
    }


def _foreign_key(schema, table, constraint, column, position, target_schema,
                 target_table, target_column, update_rule="NO ACTION", delete_rule="NO ACTION"):
    row = _key(schema, table, constraint, column, position)
    row.update({
        "foreign_table_schema": target_schema,
        "foreign_table_name": target_table,
        "foreign_column_name": target_column,
        "match_option": "NONE",
        "update_rule": update_rule,
        "delete_rule": delete_rule,
    })
    return row


def _index(schema, table, index, column, position, is_functional=False, is_partial=False):
    return {
        "table_schema": schema,
        "table_name": table,
        "index_name": index,
        "column_name": column,
        "ordinal_position": position,
        "is_unique": False,
        "is_primary": False,
        "is_functional": is_functional,
        "is_partial": is_partial,
    }


@pytest.fixture
def catalog_rows() -> Dict[str, List[Dict[str, Any]]]:
    """Catalog rows for the shop database, in query order."""
    return {
        "databases": [
            {
                "database_id": 13757,
                "database_name": "postgres",
                "collation_name": "en_US.UTF-8",
                "current_database": "shop",
            },
            {
                "database_id": 16384,
                "database_name": "shop",
                "collation_name": "en_US.UTF-8",
                "current_database": "shop",
            },
        ],
        "creation_date_privilege": [{"allowed": True}],
        "creation_date": [{"database_id": 16384, "creation_date": datetime(2024, 3, 5, 14, 30, 0)}],
        "schemas": [
            {"schema_id": 2200, "schema_name": "public"},
            {"schema_id": 16390, "schema_name": "sales"},
        ],
        "tables": [
            {"object_id": 16400, "object_name": "customers", "schema_id": 2200, "object_kind": "r"},
            {"object_id": 16410, "object_name": "orders", "schema_id": 2200, "object_kind": "r"},
            {"object_id": 16420, "object_name": "order_lines", "schema_id": 16390, "object_kind": "r"},
        ],
        "views": [
            {
                "object_id": 16430,
                "object_name": "open_orders",
                "schema_id": 2200,
                "object_kind": "v",
                "definition": " SELECT orders.id FROM orders WHERE orders.closed_at IS NULL;",
            },
        ],
        "columns": [
            _column("public", "customers", "id", 1, "integer", nullable="NO",
                    numeric_precision=32, numeric_scale=0, is_identity="YES",
                    identity_start="1", identity_increment="1",
                    last_identity="2147483647"),
            _column("public", "customers", "email", 2, "character varying",
                    nullable="NO", character_maximum_length=255),
            _column("public", "open_orders", "id", 1, "bigint", numeric_precision=64),
            _column("public", "orders", "id", 1, "bigint", nullable="NO",
                    numeric_precision=64, numeric_scale=0,
                    default_value="nextval('orders_id_seq'::regclass)"),
            _column("public", "orders", "customer_id", 2, "integer", nullable="NO"),
            _column("public", "orders", "created_at", 3, "timestamp without time zone",
                    numeric_precision=6),
            _column("public", "orders", "tags", 4, "text[]"),
            _column("sales", "order_lines", "order_id", 1, "bigint", nullable="NO"),
            _column("sales", "order_lines", "line_no", 2, "smallint", nullable="NO"),
            _column("sales", "order_lines", "amount", 3, "numeric",
                    numeric_precision=10, numeric_scale=2),
        ],
        "primary_keys": [
            _key("public", "customers", "customers_pkey", "id", 1),
            _key("public", "orders", "orders_pkey", "id", 1),
            _key("sales", "order_lines", "order_lines_pkey", "order_id", 1),
            _key("sales", "order_lines", "order_lines_pkey", "line_no", 2),
        ],
        "unique_constraints": [
            _key("public", "customers", "customers_email_key", "email", 1),
        ],
        "foreign_keys": [
            _foreign_key("public", "orders", "orders_customer_id_fkey", "customer_id", 1,
                         "public", "customers", "id", delete_rule="CASCADE"),
            _foreign_key("sales", "order_lines", "order_lines_order_id_fkey", "order_id", 1,
                         "public", "orders", "id", update_rule="RESTRICT"),
        ],
        "indexes": [
            _index("public", "customers", "customers_lower_email_idx",
                   "lower((email)::text)", 1, is_functional=True),
            _index("public", "orders", "orders_customer_created_idx", "customer_id", 1),
            _index("public", "orders", "orders_customer_created_idx", "created_at", 2),
        ],
    }


@pytest.fixture
def gateway(catalog_rows) -> FakeGateway:
    return FakeGateway(catalog_rows)


@pytest.fixture
def gateway_factory():
    """Build a FakeGateway from (possibly modified) catalog rows."""
    def factory(rows, **kwargs) -> FakeGateway:
        return FakeGateway(rows, **kwargs)
    return factory


@pytest.fixture
def key_row():
    return _key


@pytest.fixture
def column_row():
    return _column


@pytest.fixture
def foreign_key_row():
    return _foreign_key


@pytest.fixture
def index_row():
    return _index
