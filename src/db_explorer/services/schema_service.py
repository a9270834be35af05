"""
Schema Service for orchestrating schema operations.

This service coordinates the schema repository and the diagram layout for
the table listing, the per-table detail view and the relationship diagram.
"""

import asyncio
from typing import Optional

from ..config import LayoutConfig
from ..domain.errors import NotFoundError
from ..domain.responses import SchemaGraphResponse, TableListResponse, TableSchemaResponse
from ..domain.schema import Table
from ..repositories.query_builder import require_identifier
from ..repositories.schema_repository import SchemaRepository
from ..utils.logging import get_module_logger
from .graph_layout import build_graph, layout_graph


logger = get_module_logger()


class SchemaService:
    """
    Service for schema-related business logic.

    Usage:
        schema_service = SchemaService(SchemaRepository(db_client), layout_config)
        listing = await schema_service.get_table_list()
        diagram = await schema_service.get_schema_graph()
    """

    def __init__(
        self,
        schema_repository: SchemaRepository,
        layout_config: Optional[LayoutConfig] = None,
    ):
        """
        Initialize schema service.

        Args:
            schema_repository: SchemaRepository instance for catalog access
            layout_config: Diagram sizing and spacing constants
        """
        self.schema_repo = schema_repository
        self.layout_config = layout_config or LayoutConfig()

    @property
    def schema_name(self) -> str:
        return self.schema_repo.default_schema

    async def get_table_list(self) -> TableListResponse:
        """Tables with estimated row counts for the landing listing."""
        stats = await self.schema_repo.list_table_stats()

        logger.info("Table list assembled", count=len(stats), schema=self.schema_name)

        return TableListResponse(
            schema_name=self.schema_name,
            tables=stats,
            metadata_available=self.schema_repo.metadata_available,
        )

    async def get_table_schema(self, table_name: str) -> TableSchemaResponse:
        """
        Column detail and foreign keys of one table.

        Columns and foreign keys are fetched concurrently.

        Raises:
            InvalidIdentifierError: If table_name fails the identifier pattern
            NotFoundError: If the catalog is readable but lists no such table
        """
        require_identifier(table_name, "table")

        columns_by_table, foreign_keys = await asyncio.gather(
            self.schema_repo.list_columns(table_name),
            self.schema_repo.list_foreign_keys(table_name),
        )

        table = Table(name=table_name, columns=columns_by_table.get(table_name, []))
        if self.schema_repo.metadata_available and not table.columns:
            raise NotFoundError(
                f"Table '{table_name}' not found in schema '{self.schema_name}'",
                details={"table_name": table_name, "schema": self.schema_name},
            )

        return TableSchemaResponse(
            table_name=table.name,
            columns=table.columns,
            foreign_keys=foreign_keys,
            metadata_available=self.schema_repo.metadata_available,
        )

    async def get_schema_graph(self) -> SchemaGraphResponse:
        """
        Build and lay out the relationship diagram of the whole schema.

        The three catalog reads are independent and run concurrently.
        """
        tables, columns_by_table, foreign_keys = await asyncio.gather(
            self.schema_repo.list_tables(),
            self.schema_repo.list_columns(),
            self.schema_repo.list_foreign_keys(),
        )

        graph = build_graph(tables, columns_by_table, foreign_keys, self.layout_config)
        graph = layout_graph(graph, self.layout_config)

        logger.info(
            "Schema graph generated",
            table_count=len(graph.nodes),
            edge_count=len(graph.edges),
            metadata_available=self.schema_repo.metadata_available,
        )

        return SchemaGraphResponse(
            schema_name=self.schema_name,
            graph=graph,
            metadata_available=self.schema_repo.metadata_available,
        )
