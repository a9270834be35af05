"""
Models for the table browser's parameterized queries.

QuerySpec carries unchecked user input; nothing here validates identifiers
or paging bounds. The query builder does, so that violations surface as
InvalidIdentifierError / InvalidPaginationError instead of model errors.
"""

import math
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, computed_field


class QuerySpec(BaseModel):
    """What to read from a table: filters plus the page to return."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., description="Table to read, validated by the query builder")
    filters: Dict[str, str] = Field(
        default_factory=dict,
        description="Column name -> case-insensitive substring to match. Empty values are inactive."
    )
    page: int = Field(default=1, description="1-based page number")
    page_size: int = Field(default=10, description="Rows per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class SQLQuery(BaseModel):
    """SQL text with positional ($n) bound parameters."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="SQL statement with $1..$n placeholders")
    params: List[Any] = Field(default_factory=list, description="Values bound to the placeholders, in order")


class PageResult(BaseModel):
    """
    One page of rows plus the total matching the same filters.

    page may exceed total_pages (e.g. after a filter narrowed the result);
    clamping is left to the caller.
    """

    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Rows of the page, column -> value")
    total_rows: int = Field(..., ge=0, description="Rows matching the filters across all pages")
    page: int = Field(..., description="Requested page number")
    page_size: int = Field(..., gt=0, description="Requested rows per page")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_rows / self.page_size)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def first_row(self) -> int:
        """1-based number of the first row shown, 0 when the page is empty."""
        if not self.rows:
            return 0
        return (self.page - 1) * self.page_size + 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def last_row(self) -> int:
        """1-based number of the last row shown, 0 when the page is empty."""
        if not self.rows:
            return 0
        return (self.page - 1) * self.page_size + len(self.rows)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
