"""
API response models for DB Explorer.

These models define the structure for all outgoing API responses,
ensuring consistent response formats and type safety.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .graph import SchemaGraph
from .navigation import BreadcrumbLink, CellLink
from .query import PageResult
from .schema import Column, ForeignKey, TableStats


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Health status", examples=["healthy", "unhealthy"])
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")
    database_status: str = Field(..., description="Database connection status")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Database health details")


class ErrorResponse(BaseModel):
    """Response model for error responses."""

    error: str = Field(..., description="Error type or category")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Additional error details"
    )
    trace_id: Optional[str] = Field(
        default=None,
        description="Trace ID for debugging"
    )
    timestamp: datetime = Field(..., description="Error timestamp")


class TableListResponse(BaseModel):
    """Tables of the browsed schema with estimated row counts."""

    schema_name: str = Field(..., description="PostgreSQL schema that was listed")
    tables: List[TableStats] = Field(default_factory=list)
    metadata_available: bool = Field(
        ...,
        description="False when the catalog query failed; an empty list then means 'unknown', not 'no tables'"
    )


class TableSchemaResponse(BaseModel):
    """Column detail and foreign keys of one table."""

    table_name: str
    columns: List[Column] = Field(default_factory=list)
    foreign_keys: List[ForeignKey] = Field(default_factory=list)
    metadata_available: bool


class PaginationInfo(BaseModel):
    """Paging summary of a table page."""

    current_page: int
    page_size: int
    total_pages: int
    total_rows: int
    first_row: int = Field(..., description="1-based number of the first row shown (0 if none)")
    last_row: int = Field(..., description="1-based number of the last row shown (0 if none)")
    has_previous: bool
    has_next: bool

    @classmethod
    def from_page(cls, page: PageResult) -> "PaginationInfo":
        return cls(
            current_page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
            total_rows=page.total_rows,
            first_row=page.first_row,
            last_row=page.last_row,
            has_previous=page.has_previous,
            has_next=page.has_next,
        )


class TablePageResponse(BaseModel):
    """One filtered page of a table, ready for display."""

    table_name: str
    columns: List[Column] = Field(default_factory=list, description="Columns in declaration order")
    foreign_keys: List[ForeignKey] = Field(default_factory=list)
    rows: List[Dict[str, CellLink]] = Field(
        default_factory=list,
        description="One mapping per row: column name -> cell presentation"
    )
    filters: Dict[str, str] = Field(default_factory=dict, description="Active column filters")
    pagination: PaginationInfo
    breadcrumbs: List[BreadcrumbLink] = Field(default_factory=list, description="Trail back to the origin table")
    metadata_available: bool


class SchemaGraphResponse(BaseModel):
    """Laid-out relationship diagram of the schema."""

    schema_name: str
    graph: SchemaGraph
    metadata_available: bool
