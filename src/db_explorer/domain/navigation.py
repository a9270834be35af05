"""
Foreign-key navigation state.

A breadcrumb chain is the list of tables visited by following foreign-key
links, carried between requests as a pipe-delimited string. The chain is
advisory history only: it never influences which rows a query returns and
must not be treated as an authorization signal.

All functions here are pure and return new lists.
"""

from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, Field
from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..config_constants import BREADCRUMB_DELIMITER
from .base_enums import CellKind
from .schema import ForeignKey


class BreadcrumbLink(BaseModel):
    """An entry of the trail and the chain to carry when it is clicked."""

    table_name: str = Field(..., description="Table to navigate back to")
    breadcrumbs: str = Field(..., description="Encoded chain preceding this entry")


class CellLink(BaseModel):
    """Presentation decision for one cell of a table page."""

    kind: CellKind
    value: Any = None
    referenced_table: Optional[str] = Field(default=None, description="Link target table")
    referenced_column: Optional[str] = Field(default=None, description="Column to filter the target table on")
    breadcrumbs: Optional[str] = Field(default=None, description="Encoded chain to carry with the link")


def append(chain: Sequence[str], current: str) -> List[str]:
    """
    Record a visit to ``current``.

    Returns the chain unchanged when ``current`` already appears anywhere in
    it, otherwise a copy with ``current`` added at the end.
    """
    if current in chain:
        return list(chain)
    return [*chain, current]


def truncate_at(chain: Sequence[str], index: int) -> List[str]:
    """Entries before ``index``: the history behind the clicked breadcrumb."""
    return list(chain[:index])


def encode(chain: Sequence[str]) -> str:
    return BREADCRUMB_DELIMITER.join(chain)


def decode(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return text.split(BREADCRUMB_DELIMITER)


def breadcrumb_trail(chain: Sequence[str]) -> List[BreadcrumbLink]:
    """Links for every entry of the chain, oldest first."""
    return [
        BreadcrumbLink(table_name=table_name, breadcrumbs=encode(truncate_at(chain, index)))
        for index, table_name in enumerate(chain)
    ]


def display_value(value: Any) -> Any:
    """
    JSON-safe form of a cell value.

    Binary values are rendered as psql does (\\x followed by hex); values
    pydantic cannot serialize (asyncpg ranges, byte arrays, ...) fall back
    to str().
    """
    if value is None or isinstance(value, (str, int, float)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    try:
        return to_jsonable_python(value)
    except (PydanticSerializationError, ValueError, TypeError):
        return str(value)


def classify_cell(value: Any, foreign_key: Optional[ForeignKey], current_table: str) -> CellKind:
    """
    Decide whether a cell links to the row it references.

    Cells without a foreign key, NULL cells, and keys pointing back at the
    table being viewed (which includes primary keys paired with themselves
    by the catalog join) are shown as plain text.
    """
    if foreign_key is None or value is None:
        return CellKind.PLAIN_TEXT
    if foreign_key.referenced_table == current_table:
        return CellKind.PLAIN_TEXT
    return CellKind.NAVIGABLE_LINK


def resolve_cell(
    value: Any,
    foreign_key: Optional[ForeignKey],
    current_table: str,
    chain: Sequence[str],
) -> CellLink:
    """
    classify_cell plus the link target and the chain to carry with it.

    The value is passed through display_value, so the cell always serializes.
    """
    kind = classify_cell(value, foreign_key, current_table)
    if kind is CellKind.PLAIN_TEXT or foreign_key is None:
        return CellLink(kind=CellKind.PLAIN_TEXT, value=display_value(value))

    return CellLink(
        kind=kind,
        value=display_value(value),
        referenced_table=foreign_key.referenced_table,
        referenced_column=foreign_key.referenced_column,
        breadcrumbs=encode(append(chain, current_table)),
    )
