"""
Domain package for DB Explorer.

This package contains the domain models, the error hierarchy and the pure
navigation logic shared by repositories, services and the API layer.
"""

from .base_enums import CellKind, HealthStatus
from .schema import Column, Table, ForeignKey, TableStats
from .query import QuerySpec, SQLQuery, PageResult
from .graph import GraphNode, GraphEdge, SchemaGraph
from .navigation import BreadcrumbLink, CellLink
from .responses import (
    HealthResponse,
    ErrorResponse,
    TableListResponse,
    TableSchemaResponse,
    TablePageResponse,
    PaginationInfo,
    SchemaGraphResponse,
)

__all__ = [
    # Enums
    "CellKind",
    "HealthStatus",

    # Schema
    "Column",
    "Table",
    "ForeignKey",
    "TableStats",

    # Queries
    "QuerySpec",
    "SQLQuery",
    "PageResult",

    # Diagram
    "GraphNode",
    "GraphEdge",
    "SchemaGraph",

    # Navigation
    "BreadcrumbLink",
    "CellLink",

    # Responses
    "HealthResponse",
    "ErrorResponse",
    "TableListResponse",
    "TableSchemaResponse",
    "TablePageResponse",
    "PaginationInfo",
    "SchemaGraphResponse",
]
