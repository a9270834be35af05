from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Column(BaseModel):
    """A column as declared in information_schema.columns."""

    model_config = ConfigDict(frozen=True)

    name : str = Field(..., description="Name of the column")
    data_type : str = Field(..., description="Declared data type label, e.g. 'integer'")
    is_nullable : bool = Field(default=True, description="Indicates if the column can contain null values")
    ordinal_position : Optional[int] = Field(default=None, description="1-based declaration position within the table")


class Table(BaseModel):
    """A table and its columns in declaration order."""

    model_config = ConfigDict(frozen=True)

    name : str = Field(..., description="Name of the table")
    columns : List[Column] = Field(default_factory=list, description="Columns in declaration order")

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]


class ForeignKey(BaseModel):
    """
    A single-column reference from source_table.source_column to
    referenced_table.referenced_column.

    Self-references (referenced_table == source_table) are allowed.
    """

    model_config = ConfigDict(frozen=True)

    source_table : str = Field(..., description="Table holding the key column")
    source_column : str = Field(..., description="Key column in the source table")
    referenced_table : str = Field(..., description="Table the key points to")
    referenced_column : str = Field(..., description="Column the key points to")
    constraint_name : Optional[str] = Field(default=None, description="Constraint the pairing was derived from")

    @property
    def is_self_reference(self) -> bool:
        return self.source_table == self.referenced_table


class TableStats(BaseModel):
    """Planner statistics for a table, as shown in the table listing."""

    model_config = ConfigDict(frozen=True)

    table_name : str = Field(..., description="Name of the table")
    estimated_rows : int = Field(default=0, ge=0, description="Estimated live rows (pg_stat_user_tables.n_live_tup)")
