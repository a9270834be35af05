"""
Schema Repository for discovering database structure.

This repository reads PostgreSQL's information_schema (and pg_stat_user_tables
for row estimates) through an injected QueryRunner and returns domain models
from domain/schema.py.

Failure Semantics:
- A failed catalog query never raises out of a list_* method; the call
  returns an empty collection instead
- Each failure is recorded as a MetadataUnavailableError in ``failures``
- ``metadata_available`` is the companion flag callers check before reading
  an empty result as "the schema really has no tables"

Known Limitation (kept on purpose):
    Foreign keys are derived by joining key_column_usage with
    constraint_column_usage on the constraint name alone, with no constraint
    type filter. Every constraint-column-usage row sharing the name is paired
    with the key column, so primary and unique keys come back as
    self-references (users.id -> users.id) and multi-column constraints
    produce cross pairs. Diagram edges and cell links are built from this
    exact output.
"""

from typing import Any, Dict, List, Optional

from ..infrastructure.database_client import QueryRunner
from ..utils.logging import get_module_logger
from ..domain.errors import MetadataUnavailableError
from ..domain.schema import Column, ForeignKey, TableStats


logger = get_module_logger()


TABLES_QUERY = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = $1
    ORDER BY table_name
"""

COLUMNS_QUERY = """
    SELECT
        table_name,
        column_name,
        data_type,
        is_nullable,
        ordinal_position
    FROM information_schema.columns
    WHERE table_schema = $1
    ORDER BY table_name, ordinal_position
"""

TABLE_COLUMNS_QUERY = """
    SELECT
        table_name,
        column_name,
        data_type,
        is_nullable,
        ordinal_position
    FROM information_schema.columns
    WHERE table_schema = $1 AND table_name = $2
    ORDER BY ordinal_position
"""

FOREIGN_KEYS_QUERY = """
    SELECT
        kcu.constraint_name,
        kcu.table_name AS source_table,
        kcu.column_name AS source_column,
        ccu.table_name AS referenced_table,
        ccu.column_name AS referenced_column
    FROM information_schema.key_column_usage AS kcu
    JOIN information_schema.constraint_column_usage AS ccu
        ON kcu.constraint_name = ccu.constraint_name
    WHERE kcu.table_schema = $1
"""

TABLE_FOREIGN_KEYS_QUERY = FOREIGN_KEYS_QUERY + "    AND kcu.table_name = $2\n"

TABLE_STATS_QUERY = """
    SELECT relname AS table_name, n_live_tup AS estimated_rows
    FROM pg_stat_user_tables
    WHERE schemaname = $1
    ORDER BY relname
"""


class SchemaRepository:
    """
    Repository for catalog metadata (the schema introspector).

    Constructed per request: the recorded failures describe the calls made
    through this instance only.

    Usage:
        schema_repo = SchemaRepository(db_client, default_schema="public")
        tables = await schema_repo.list_tables()
        columns = await schema_repo.list_columns("orders")
        foreign_keys = await schema_repo.list_foreign_keys()
        if not schema_repo.metadata_available:
            ...  # empty results above mean "unknown"
    """

    def __init__(self, db_client: QueryRunner, default_schema: str = "public"):
        """
        Initialize schema repository.

        Args:
            db_client: Data-access capability used for catalog queries
            default_schema: Schema used when a call doesn't name one
        """
        self.db_client = db_client
        self.default_schema = default_schema
        self.failures: List[MetadataUnavailableError] = []

    @property
    def metadata_available(self) -> bool:
        """False once any catalog query made through this repository failed."""
        return not self.failures

    async def _fetch(self, operation: str, query: str, params: List[Any]) -> Optional[List[Dict[str, Any]]]:
        """
        Run a catalog query, recording instead of raising on failure.

        Returns:
            The rows, or None if the query failed
        """
        try:
            return await self.db_client.execute_query(query=query, params=params)
        except Exception as e:
            failure = MetadataUnavailableError(
                f"Catalog query '{operation}' failed: {e}",
                details={"operation": operation, "error_type": type(e).__name__},
            )
            self.failures.append(failure)
            logger.warning(
                failure.message,
                error_code=failure.error_code,
                operation=operation,
                error_type=type(e).__name__,
            )
            return None

    async def list_tables(self, schema: Optional[str] = None) -> List[str]:
        """
        Fetch the names of all tables (and views) in the schema.

        Args:
            schema: PostgreSQL schema name (default: repository default)

        Returns:
            Table names ordered by name; [] if the catalog query failed
        """
        schema = schema or self.default_schema
        results = await self._fetch("list_tables", TABLES_QUERY, [schema])
        if results is None:
            return []

        tables = [row["table_name"] for row in results]
        logger.info("Tables fetched successfully", count=len(tables), schema=schema)
        return tables

    async def list_columns(
        self,
        table_name: Optional[str] = None,
        schema: Optional[str] = None
    ) -> Dict[str, List[Column]]:
        """
        Fetch columns grouped by table, in declaration order.

        Args:
            table_name: Restrict to one table (detail view); None for the whole schema
            schema: PostgreSQL schema name (default: repository default)

        Returns:
            {"orders": [Column(name="id", ...), Column(name="user_id", ...)], ...};
            {} if the catalog query failed
        """
        schema = schema or self.default_schema
        if table_name is None:
            results = await self._fetch("list_columns", COLUMNS_QUERY, [schema])
        else:
            results = await self._fetch("list_columns", TABLE_COLUMNS_QUERY, [schema, table_name])
        if results is None:
            return {}

        columns_by_table: Dict[str, List[Column]] = {}
        for row in results:
            columns_by_table.setdefault(row["table_name"], []).append(
                Column(
                    name=row["column_name"],
                    data_type=row["data_type"],
                    is_nullable=(row["is_nullable"] == "YES"),
                    ordinal_position=row.get("ordinal_position"),
                )
            )

        logger.info(
            "Columns fetched successfully",
            table_name=table_name,
            table_count=len(columns_by_table),
            column_count=len(results),
            schema=schema
        )
        return columns_by_table

    async def list_foreign_keys(
        self,
        table_name: Optional[str] = None,
        schema: Optional[str] = None
    ) -> List[ForeignKey]:
        """
        Fetch foreign key pairings (see the module notes on over-association).

        Args:
            table_name: Restrict to keys held by one table; None for the whole schema
            schema: PostgreSQL schema name (default: repository default)

        Returns:
            List of ForeignKey in catalog order; [] if the catalog query failed
        """
        schema = schema or self.default_schema
        if table_name is None:
            results = await self._fetch("list_foreign_keys", FOREIGN_KEYS_QUERY, [schema])
        else:
            results = await self._fetch("list_foreign_keys", TABLE_FOREIGN_KEYS_QUERY, [schema, table_name])
        if results is None:
            return []

        foreign_keys = [
            ForeignKey(
                source_table=row["source_table"],
                source_column=row["source_column"],
                referenced_table=row["referenced_table"],
                referenced_column=row["referenced_column"],
                constraint_name=row.get("constraint_name"),
            )
            for row in results
        ]

        logger.info(
            "Foreign keys fetched successfully",
            table_name=table_name,
            count=len(foreign_keys),
            schema=schema
        )
        return foreign_keys

    async def list_table_stats(self, schema: Optional[str] = None) -> List[TableStats]:
        """
        Fetch tables with the planner's estimated live row counts.

        Estimates are as fresh as the last ANALYZE/autovacuum run.

        Returns:
            List of TableStats ordered by table name; [] if the query failed
        """
        schema = schema or self.default_schema
        results = await self._fetch("list_table_stats", TABLE_STATS_QUERY, [schema])
        if results is None:
            return []

        stats = [
            TableStats(
                table_name=row["table_name"],
                estimated_rows=max(int(row["estimated_rows"] or 0), 0),
            )
            for row in results
        ]
        logger.info("Table statistics fetched successfully", count=len(stats), schema=schema)
        return stats
