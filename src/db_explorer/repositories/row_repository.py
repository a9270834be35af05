"""
Row Repository.

Reads one filtered page of a table plus the total matching rows.

Execution Flow:
1. Build row and count queries (validation errors raise here, before I/O)
2. Run both queries concurrently, each on its own pooled connection
3. Return PageResult; any database failure becomes QueryExecutionFailedError
   and no partial page is returned

Usage:
    repo = RowRepository(db_client)
    page = await repo.fetch_page(
        QuerySpec(table_name="orders", filters={"status": "open"}, page=2, page_size=10),
        known_columns=columns,
    )
    print(f"Page {page.page} of {page.total_pages} ({page.total_rows} rows)")
"""

import asyncio
from typing import Sequence

from ..domain.errors import DatabaseError, QueryExecutionFailedError
from ..domain.query import PageResult, QuerySpec
from ..domain.schema import Column
from ..infrastructure.database_client import QueryRunner
from ..utils.logging import get_module_logger
from .query_builder import build_count_query, build_row_query

logger = get_module_logger()


class RowRepository:
    """Repository for paged, filtered row reads."""

    def __init__(self, db_client: QueryRunner):
        self.db_client = db_client

    async def fetch_page(self, spec: QuerySpec, known_columns: Sequence[Column]) -> PageResult:
        """
        Fetch one page of ``spec.table_name``.

        Args:
            spec: Table, filters and paging
            known_columns: Catalog columns of the table; the only columns filters may use

        Returns:
            PageResult with rows and total_rows for the same filters

        Raises:
            InvalidIdentifierError / InvalidPaginationError: before any query runs
            QueryExecutionFailedError: if the row or count query fails
        """
        row_query = build_row_query(spec, known_columns)
        count_query = build_count_query(spec, known_columns)

        logger.debug(
            "Fetching table page",
            table_name=spec.table_name,
            row_sql=row_query.text,
            count_sql=count_query.text,
        )

        try:
            rows, total = await asyncio.gather(
                self.db_client.execute_query(query=row_query.text, params=row_query.params),
                self.db_client.execute_scalar(query=count_query.text, params=count_query.params),
            )
        except DatabaseError as e:
            logger.error(
                "Failed to load table page",
                table_name=spec.table_name,
                error=str(e),
                error_code=e.error_code,
            )
            raise QueryExecutionFailedError(
                f"Failed to load rows of table '{spec.table_name}'",
                details={"table_name": spec.table_name},
            ) from e

        page = PageResult(
            rows=rows,
            total_rows=int(total or 0),
            page=spec.page,
            page_size=spec.page_size,
        )

        logger.info(
            "Table page fetched successfully",
            table_name=spec.table_name,
            page=page.page,
            row_count=len(page.rows),
            total_rows=page.total_rows,
            active_filters=len(count_query.params),
        )
        return page
