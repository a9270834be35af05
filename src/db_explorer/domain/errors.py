"""
Custom exception hierarchy for DB Explorer.

This module defines a comprehensive exception hierarchy with:
- Consistent error codes for API responses
- HTTP status code mappings for FastAPI
- Detailed error messages for debugging

Exception Categories:
- 4xx Client Errors: QueryValidationError (InvalidIdentifierError,
  InvalidPaginationError), NotFoundError
- 5xx Server Errors: DatabaseError (connection, query, metadata, row query)

Validation errors are raised before any SQL reaches the database, so callers
can tell "bad request" apart from "try again" by catching QueryValidationError
and DatabaseError separately.

Usage:
    raise InvalidIdentifierError("Invalid table name", details={"value": "a;b"})
    raise QueryExecutionFailedError("Failed to load rows")
"""

from typing import Any, Dict, Optional


class DBExplorerException(Exception):
    """
    Base exception for all DB Explorer errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code (e.g., "INVALID_IDENTIFIER")
        http_status: HTTP status code to return (default: 500)
        details: Optional dictionary with additional error context
    """

    error_code: str = "INTERNAL_ERROR"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        http_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        if http_status:
            self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result: Dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Client Errors (4xx)
# =============================================================================


class QueryValidationError(DBExplorerException):
    """
    Base class for rejected query input.

    HTTP Status: 400 Bad Request

    Raised by the query builder before any SQL text is produced.
    """

    error_code = "QUERY_VALIDATION_ERROR"
    http_status = 400


class InvalidIdentifierError(QueryValidationError):
    """
    Raised when a table or column name fails the identifier pattern.

    HTTP Status: 400 Bad Request

    Examples:
        - Table name containing spaces, quotes or semicolons
        - Filter column whose catalog name has non [A-Za-z0-9_] characters
    """

    error_code = "INVALID_IDENTIFIER"
    http_status = 400


class InvalidPaginationError(QueryValidationError):
    """
    Raised when paging parameters cannot produce a valid LIMIT/OFFSET.

    HTTP Status: 400 Bad Request

    Examples:
        - page_size of zero or less
        - page below 1 (negative offset)
    """

    error_code = "INVALID_PAGINATION"
    http_status = 400


class NotFoundError(DBExplorerException):
    """
    Raised when a requested resource is not found.

    HTTP Status: 404 Not Found
    """

    error_code = "NOT_FOUND"
    http_status = 404


# =============================================================================
# Configuration Errors (5xx)
# =============================================================================


class ConfigurationError(DBExplorerException):
    """
    Raised when configuration is invalid or missing.

    HTTP Status: 500 Internal Server Error
    """

    error_code = "CONFIGURATION_ERROR"
    http_status = 500


# =============================================================================
# Database Errors (5xx)
# =============================================================================


class DatabaseError(DBExplorerException):
    """
    Base class for database-related errors.

    HTTP Status: 503 Service Unavailable
    """

    error_code = "DATABASE_ERROR"
    http_status = 503


class DatabaseConnectionError(DatabaseError):
    """
    Raised when database connection fails.

    HTTP Status: 503 Service Unavailable

    Examples:
        - Connection timeout
        - Authentication failure
        - Client used before connect()
    """

    error_code = "DATABASE_CONNECTION_ERROR"
    http_status = 503


class DatabaseQueryError(DatabaseError):
    """
    Raised by the database client when a statement fails.

    HTTP Status: 500 Internal Server Error

    Examples:
        - Table/column not found
        - Statement timeout
    """

    error_code = "DATABASE_QUERY_ERROR"
    http_status = 500


class MetadataUnavailableError(DatabaseError):
    """
    Describes a failed catalog query.

    HTTP Status: 503 Service Unavailable

    The schema repository records these instead of raising them: listings
    degrade to empty collections and the failure is kept alongside so callers
    can tell "unknown" from "no tables".
    """

    error_code = "METADATA_UNAVAILABLE"
    http_status = 503


class QueryExecutionFailedError(DatabaseError):
    """
    Raised when the row or count query of a table page fails.

    HTTP Status: 500 Internal Server Error

    No partial page is returned alongside this error.
    """

    error_code = "QUERY_EXECUTION_FAILED"
    http_status = 500


# =============================================================================
# Service Unavailable (5xx)
# =============================================================================


class ServiceUnavailableError(DBExplorerException):
    """
    Raised when a required service is not available.

    HTTP Status: 503 Service Unavailable

    Examples:
        - Database client not connected at startup
    """

    error_code = "SERVICE_UNAVAILABLE"
    http_status = 503
