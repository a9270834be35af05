"""Fixtures shared by the unit tests: an in-memory QueryRunner and sample catalog rows."""

from typing import Any, Dict, Iterable, List, Optional

import pytest

from db_explorer.domain.errors import DatabaseQueryError
from db_explorer.domain.schema import Column, ForeignKey


class FakeQueryRunner:
    """
    In-memory stand-in for DatabaseClient.

    ``results`` maps a SQL fragment to the rows returned by any query
    containing it (first match wins); ``fail_on`` lists fragments whose
    queries raise DatabaseQueryError. Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        results: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        scalar: Any = 0,
        fail_on: Iterable[str] = (),
    ):
        self.results = results or {}
        self.scalar = scalar
        self.fail_on = list(fail_on)
        self.calls: List[tuple] = []

    def _maybe_fail(self, query: str) -> None:
        for fragment in self.fail_on:
            if fragment in query:
                raise DatabaseQueryError(f"simulated failure for {fragment!r}")

    async def execute_query(self, query, params=None, timeout=None):
        self.calls.append(("query", query, list(params or [])))
        self._maybe_fail(query)
        for fragment, rows in self.results.items():
            if fragment in query:
                return [dict(row) for row in rows]
        return []

    async def execute_scalar(self, query, params=None, timeout=None):
        self.calls.append(("scalar", query, list(params or [])))
        self._maybe_fail(query)
        return self.scalar

    def is_connected(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "connected": True, "current_schema": "public"}


ORDERS_COLUMN_ROWS = [
    {"table_name": "orders", "column_name": "id", "data_type": "integer", "is_nullable": "NO", "ordinal_position": 1},
    {"table_name": "orders", "column_name": "user_id", "data_type": "integer", "is_nullable": "NO", "ordinal_position": 2},
    {"table_name": "orders", "column_name": "status", "data_type": "text", "is_nullable": "YES", "ordinal_position": 3},
]

USERS_COLUMN_ROWS = [
    {"table_name": "users", "column_name": "id", "data_type": "integer", "is_nullable": "NO", "ordinal_position": 1},
    {"table_name": "users", "column_name": "email", "data_type": "text", "is_nullable": "NO", "ordinal_position": 2},
]

# The catalog join pairs primary keys with themselves, hence the id -> id rows
FOREIGN_KEY_ROWS = [
    {"constraint_name": "orders_pkey", "source_table": "orders", "source_column": "id",
     "referenced_table": "orders", "referenced_column": "id"},
    {"constraint_name": "orders_user_id_fkey", "source_table": "orders", "source_column": "user_id",
     "referenced_table": "users", "referenced_column": "id"},
    {"constraint_name": "users_pkey", "source_table": "users", "source_column": "id",
     "referenced_table": "users", "referenced_column": "id"},
]


@pytest.fixture
def orders_columns() -> List[Column]:
    return [
        Column(name="id", data_type="integer", is_nullable=False, ordinal_position=1),
        Column(name="user_id", data_type="integer", is_nullable=False, ordinal_position=2),
        Column(name="status", data_type="text", is_nullable=True, ordinal_position=3),
    ]


@pytest.fixture
def orders_user_fk() -> ForeignKey:
    return ForeignKey(
        source_table="orders",
        source_column="user_id",
        referenced_table="users",
        referenced_column="id",
        constraint_name="orders_user_id_fkey",
    )


@pytest.fixture
def catalog_runner() -> FakeQueryRunner:
    """Runner answering catalog queries for a users/orders schema and one orders row."""
    return FakeQueryRunner(
        results={
            "information_schema.tables": [{"table_name": "orders"}, {"table_name": "users"}],
            "information_schema.columns": ORDERS_COLUMN_ROWS + USERS_COLUMN_ROWS,
            "key_column_usage": FOREIGN_KEY_ROWS,
            "pg_stat_user_tables": [
                {"table_name": "orders", "estimated_rows": 25},
                {"table_name": "users", "estimated_rows": 4},
            ],
            "SELECT * FROM": [{"id": 1, "user_id": 7, "status": "open"}],
        },
        scalar=25,
    )


@pytest.fixture
def make_runner():
    """Factory for FakeQueryRunner with custom results or failures."""
    return FakeQueryRunner


@pytest.fixture
def blobs_runner() -> FakeQueryRunner:
    """Runner for a single bytea table whose payload is not valid UTF-8."""
    return FakeQueryRunner(
        results={
            "information_schema.columns": [
                {"table_name": "blobs", "column_name": "id", "data_type": "integer",
                 "is_nullable": "NO", "ordinal_position": 1},
                {"table_name": "blobs", "column_name": "payload", "data_type": "bytea",
                 "is_nullable": "YES", "ordinal_position": 2},
            ],
            "SELECT * FROM": [{"id": 1, "payload": b"\xde\xad\xbe\xef"}],
        },
        scalar=1,
    )
