"""
Dynamic Query Builder.

Builds the parameterized row and count queries of the table browser for
tables and columns only known at runtime.

Safety Model:
- Identifiers (table, filter columns) cannot be bound parameters, so they
  are interpolated only after passing the strict pattern [A-Za-z0-9_]+
- Filter columns come from the caller-supplied catalog column list, never
  from request input; unknown filter keys are ignored
- Filter values and LIMIT/OFFSET are always bound ($n placeholders)

Validation Order (fail fast, before any SQL text exists):
1. Table name matches the identifier pattern -> InvalidIdentifierError
2. 0 < page_size <= bigint max -> InvalidPaginationError
3. 0 <= offset = (page - 1) * page_size <= bigint max -> InvalidPaginationError

Both builders share build_where_clause, so the count always describes the
same filter set as the page.

Usage:
    spec = QuerySpec(table_name="orders", filters={"status": "open"}, page=2, page_size=10)
    row_query = build_row_query(spec, columns)
    # SELECT * FROM orders WHERE status::text ILIKE $1 LIMIT $2 OFFSET $3
    # params: ["%open%", 10, 10]
"""

import re
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from ..domain.errors import InvalidIdentifierError, InvalidPaginationError
from ..domain.query import QuerySpec, SQLQuery
from ..domain.schema import Column

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9_]+")

# LIMIT and OFFSET are bound as PostgreSQL bigint
MAX_BIGINT = 2**63 - 1


class IdentifierCheck(NamedTuple):
    """Outcome of validate_identifier: valid, or invalid with a reason."""
    valid: bool
    value: Any
    reason: Optional[str] = None


def validate_identifier(name: Any) -> IdentifierCheck:
    """
    Check whether ``name`` may be interpolated into SQL text.

    Total: never raises, whatever ``name`` is.
    """
    if not isinstance(name, str):
        return IdentifierCheck(False, name, f"expected a string, got {type(name).__name__}")
    if not name:
        return IdentifierCheck(False, name, "identifier is empty")
    if IDENTIFIER_PATTERN.fullmatch(name) is None:
        return IdentifierCheck(False, name, "only letters, digits and underscores are allowed")
    return IdentifierCheck(True, name)


def require_identifier(name: Any, kind: str = "identifier") -> str:
    """
    Return ``name`` if it is a safe identifier.

    Raises:
        InvalidIdentifierError: naming the rejected value and the reason
    """
    check = validate_identifier(name)
    if not check.valid:
        raise InvalidIdentifierError(
            f"Invalid {kind} name: {name!r}",
            details={"kind": kind, "value": str(name), "reason": check.reason},
        )
    return name


def validate_query_spec(spec: QuerySpec) -> Tuple[str, int]:
    """
    Run the validation sequence without building any SQL.

    Returns:
        (table_name, offset)
    """
    table_name = require_identifier(spec.table_name, "table")

    if spec.page_size <= 0:
        raise InvalidPaginationError(
            "Page size must be greater than zero",
            details={"page_size": spec.page_size},
        )
    if spec.page_size > MAX_BIGINT:
        raise InvalidPaginationError(
            "Page size is too large",
            details={"page_size": spec.page_size},
        )

    offset = spec.offset
    if offset < 0:
        raise InvalidPaginationError(
            "Page number must be 1 or greater",
            details={"page": spec.page, "offset": offset},
        )
    if offset > MAX_BIGINT:
        raise InvalidPaginationError(
            "Page number is too large",
            details={"page": spec.page, "offset": offset},
        )

    return table_name, offset


def build_where_clause(spec: QuerySpec, known_columns: Sequence[Column]) -> Tuple[str, List[Any]]:
    """
    Build the filter predicates shared by the row and count queries.

    Returns:
        (" WHERE a::text ILIKE $1 AND b::text ILIKE $2", ["%x%", "%y%"]),
        or ("", []) when no filter is active
    """
    predicates: List[str] = []
    params: List[Any] = []

    for column in known_columns:
        value = spec.filters.get(column.name)
        if not value:
            continue
        column_name = require_identifier(column.name, "column")
        params.append(f"%{value}%")
        predicates.append(f"{column_name}::text ILIKE ${len(params)}")

    if not predicates:
        return "", []
    return " WHERE " + " AND ".join(predicates), params


def build_row_query(spec: QuerySpec, known_columns: Sequence[Column]) -> SQLQuery:
    """SELECT one page of filtered rows; LIMIT/OFFSET are the last two params."""
    table_name, offset = validate_query_spec(spec)
    where_clause, params = build_where_clause(spec, known_columns)

    limit_index = len(params) + 1
    text = f"SELECT * FROM {table_name}{where_clause} LIMIT ${limit_index} OFFSET ${limit_index + 1}"
    return SQLQuery(text=text, params=[*params, spec.page_size, offset])


def build_count_query(spec: QuerySpec, known_columns: Sequence[Column]) -> SQLQuery:
    """COUNT(*) over the same filters as build_row_query, ignoring the page."""
    table_name, _ = validate_query_spec(spec)
    where_clause, params = build_where_clause(spec, known_columns)

    return SQLQuery(text=f"SELECT COUNT(*) FROM {table_name}{where_clause}", params=params)
