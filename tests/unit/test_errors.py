"""Unit tests for the exception hierarchy."""

import pytest

from db_explorer.domain.errors import (
    DatabaseConnectionError,
    DatabaseError,
    DatabaseQueryError,
    DBExplorerException,
    InvalidIdentifierError,
    InvalidPaginationError,
    MetadataUnavailableError,
    QueryExecutionFailedError,
    QueryValidationError,
    ServiceUnavailableError,
)


@pytest.mark.parametrize("error_class, status, code", [
    (InvalidIdentifierError, 400, "INVALID_IDENTIFIER"),
    (InvalidPaginationError, 400, "INVALID_PAGINATION"),
    (DatabaseConnectionError, 503, "DATABASE_CONNECTION_ERROR"),
    (DatabaseQueryError, 500, "DATABASE_QUERY_ERROR"),
    (MetadataUnavailableError, 503, "METADATA_UNAVAILABLE"),
    (QueryExecutionFailedError, 500, "QUERY_EXECUTION_FAILED"),
    (ServiceUnavailableError, 503, "SERVICE_UNAVAILABLE"),
])
def test_status_and_code(error_class, status, code):
    error = error_class("boom")
    assert error.http_status == status
    assert error.error_code == code
    assert isinstance(error, DBExplorerException)


def test_validation_and_execution_families_are_disjoint():
    assert issubclass(InvalidIdentifierError, QueryValidationError)
    assert issubclass(InvalidPaginationError, QueryValidationError)
    assert issubclass(QueryExecutionFailedError, DatabaseError)
    assert not issubclass(QueryExecutionFailedError, QueryValidationError)
    assert not issubclass(InvalidIdentifierError, DatabaseError)


def test_to_dict():
    error = InvalidIdentifierError("Invalid table name: 'a;b'", details={"value": "a;b"})

    assert error.to_dict() == {
        "error_code": "INVALID_IDENTIFIER",
        "message": "Invalid table name: 'a;b'",
        "details": {"value": "a;b"},
    }
    assert "details" not in QueryExecutionFailedError("failed").to_dict()


def test_overrides():
    error = DBExplorerException("custom", error_code="CUSTOM", http_status=418)
    assert (error.error_code, error.http_status) == ("CUSTOM", 418)
    assert str(error) == "custom"
