"""
Browse Service for the table page.

Request Flow:
1. Validate table name and paging (no database access on rejection)
2. Fetch the table's columns and foreign keys concurrently
3. Fetch the filtered page with the catalog columns as the filter allowlist
4. Resolve every cell to plain text or a foreign-key link and build the
   breadcrumb trail from the incoming chain
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import BrowserConfig
from ..domain import navigation
from ..domain.navigation import CellLink
from ..domain.errors import NotFoundError
from ..domain.query import QuerySpec
from ..domain.responses import PaginationInfo, TablePageResponse
from ..domain.schema import ForeignKey, Table
from ..repositories.query_builder import validate_query_spec
from ..repositories.row_repository import RowRepository
from ..repositories.schema_repository import SchemaRepository
from ..utils.logging import get_module_logger

logger = get_module_logger()


def foreign_keys_by_column(foreign_keys: Sequence[ForeignKey]) -> Dict[str, ForeignKey]:
    """First foreign key listed for each source column."""
    by_column: Dict[str, ForeignKey] = {}
    for fk in foreign_keys:
        by_column.setdefault(fk.source_column, fk)
    return by_column


class BrowseService:
    """
    Service assembling one filtered, paged view of a table.

    Usage:
        browse_service = BrowseService(schema_repo, row_repo, settings.browser)
        page = await browse_service.browse_table(
            "orders", filters={"status": "open"}, page=2, breadcrumbs="users"
        )
    """

    def __init__(
        self,
        schema_repository: SchemaRepository,
        row_repository: RowRepository,
        browser_config: Optional[BrowserConfig] = None,
    ):
        self.schema_repo = schema_repository
        self.row_repo = row_repository
        self.browser_config = browser_config or BrowserConfig()

    async def browse_table(
        self,
        table_name: str,
        filters: Optional[Mapping[str, str]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        breadcrumbs: Optional[str] = None,
    ) -> TablePageResponse:
        """
        Load one page of ``table_name``.

        Args:
            table_name: Table to browse
            filters: Column -> substring; keys that aren't columns of the table are ignored
            page: 1-based page number
            page_size: Rows per page (default from configuration)
            breadcrumbs: Encoded chain of tables visited before this one

        Raises:
            InvalidIdentifierError / InvalidPaginationError: before any database access
            NotFoundError: if the catalog is readable but lists no such table
            QueryExecutionFailedError: if the row or count query fails
        """
        spec = QuerySpec(
            table_name=table_name,
            filters=dict(filters or {}),
            page=page,
            page_size=page_size if page_size is not None else self.browser_config.default_page_size,
        )
        validate_query_spec(spec)

        columns_by_table, foreign_keys = await asyncio.gather(
            self.schema_repo.list_columns(table_name),
            self.schema_repo.list_foreign_keys(table_name),
        )
        table = Table(name=table_name, columns=columns_by_table.get(table_name, []))

        if not self.schema_repo.metadata_available:
            logger.warning(
                "Browsing without catalog metadata; filters and links disabled",
                table_name=table_name,
            )
        elif not table.columns:
            raise NotFoundError(
                f"Table '{table_name}' not found in schema '{self.schema_repo.default_schema}'",
                details={"table_name": table_name, "schema": self.schema_repo.default_schema},
            )

        result = await self.row_repo.fetch_page(spec, table.columns)

        chain = navigation.decode(breadcrumbs)
        rows = self._resolve_rows(result.rows, table, foreign_keys, chain)
        known_names = set(table.column_names)

        return TablePageResponse(
            table_name=table_name,
            columns=table.columns,
            foreign_keys=foreign_keys,
            rows=rows,
            filters={name: value for name, value in spec.filters.items() if value and name in known_names},
            pagination=PaginationInfo.from_page(result),
            breadcrumbs=navigation.breadcrumb_trail(chain),
            metadata_available=self.schema_repo.metadata_available,
        )

    @staticmethod
    def _resolve_rows(
        rows: Sequence[Mapping[str, Any]],
        table: Table,
        foreign_keys: Sequence[ForeignKey],
        chain: Sequence[str],
    ) -> List[Dict[str, CellLink]]:
        fk_by_column = foreign_keys_by_column(foreign_keys)
        resolved = []
        for row in rows:
            column_names = table.column_names or list(row.keys())
            resolved.append({
                name: navigation.resolve_cell(row.get(name), fk_by_column.get(name), table.name, chain)
                for name in column_names
            })
        return resolved
