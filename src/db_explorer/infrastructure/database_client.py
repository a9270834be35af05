"""
Database client for PostgreSQL using asyncpg.

This module provides an async, read-only database client with connection
pooling and error translation, plus the QueryRunner protocol that
repositories depend on instead of the concrete client.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, runtime_checkable

import asyncpg

from ..config import DatabaseConfig
from ..utils.logging import get_module_logger
from ..domain.errors import DatabaseConnectionError, DatabaseQueryError


logger = get_module_logger()


@runtime_checkable
class QueryRunner(Protocol):
    """
    Data-access capability handed to repositories.

    Implementations raise DatabaseError subclasses on failure.
    """

    async def execute_query(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        ...

    async def execute_scalar(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        ...


class DatabaseClient:
    """
    Low-level async PostgreSQL client using asyncpg.

    Every statement runs inside a read-only transaction on a pooled
    connection, bounded by the configured query timeout. Schema
    introspection and row browsing live in the repository layer.

    Usage:
        client = DatabaseClient(config)
        await client.connect()

        rows = await client.execute_query(
            "SELECT * FROM orders WHERE user_id::text ILIKE $1 LIMIT $2 OFFSET $3",
            params=["%42%", 10, 0]
        )
        count = await client.execute_scalar("SELECT COUNT(*) FROM orders")

        await client.close()
    """

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database client with configuration.

        Args:
            config: Database configuration
        """
        self.config = config
        self._pool: Optional[asyncpg.Pool] = None
        self._is_connected = False

        logger.info(
            "DatabaseClient initialized",
            default_schema=config.default_schema,
            connection_pool_size=config.connection_pool_max_size,
            query_timeout_seconds=config.query_timeout_seconds,
            application_name=config.application_name
        )

    async def connect(self) -> None:
        """
        Establish connection pool to the database.

        Raises:
            DatabaseConnectionError: If connection fails
        """
        if self._is_connected:
            logger.warning("Database client already connected")
            return

        logger.info("Establishing database connection")

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.config.database_url,
                min_size=self.config.connection_pool_min_size,
                max_size=self.config.connection_pool_max_size,
                command_timeout=self.config.query_timeout_seconds,
                timeout=self.config.connection_timeout_seconds,
                ssl="require" if self.config.ssl_required else None,
                server_settings={
                    'application_name': self.config.application_name,
                    'search_path': self.config.default_schema,
                }
            )

            await self._test_connection(self._pool)

            self._is_connected = True
            logger.info(
                "Database connection established successfully",
                pool_size=self.config.connection_pool_max_size,
                default_schema=self.config.default_schema
            )

        except DatabaseConnectionError:
            raise

        except asyncpg.InvalidCatalogNameError as e:
            error_msg = f"Database does not exist: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg) from e

        except asyncpg.InvalidPasswordError as e:
            error_msg = f"Authentication failed: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg) from e

        except Exception as e:
            error_msg = f"Failed to connect to database: {e}"
            logger.error(error_msg, error_type=type(e).__name__)
            raise DatabaseConnectionError(error_msg) from e

    async def _test_connection(self, pool: asyncpg.Pool) -> None:
        """Check the pool can serve a trivial query."""
        try:
            async with pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                if result != 1:
                    raise DatabaseConnectionError("Connection test query returned an unexpected value")

                current_schema = await conn.fetchval("SELECT current_schema()")
                logger.info("Connection test successful", current_schema=current_schema)
        except DatabaseConnectionError:
            raise
        except Exception as e:
            error_msg = f"Connection test failed: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg) from e

    async def close(self) -> None:
        """Close database connection pool."""
        logger.info("Closing database connection")

        if self._pool:
            await self._pool.close()

        self._is_connected = False
        self._pool = None

        logger.info("Database connection closed")

    def is_connected(self) -> bool:
        """Check if database client is connected."""
        return self._is_connected and self._pool is not None

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check on database connection.

        Returns:
            Dictionary with status and connection details

        Example:
            {
                "status": "healthy",
                "connected": True,
                "pool_size": 5,
                "current_schema": "public"
            }
        """
        if not self.is_connected():
            return {
                "status": "unhealthy",
                "connected": False,
                "error": "Database client not connected"
            }

        try:
            async with self.acquire_connection() as conn:
                result = await conn.fetchval("SELECT 1")
                current_schema = await conn.fetchval("SELECT current_schema()")

            if result != 1:
                return {
                    "status": "unhealthy",
                    "connected": True,
                    "error": "Connection test query failed"
                }

            logger.info("Database health check passed")
            return {
                "status": "healthy",
                "connected": True,
                "pool_size": self.config.connection_pool_max_size,
                "current_schema": current_schema
            }

        except Exception as e:
            logger.error(
                "Database health check failed",
                error=str(e),
                error_type=type(e).__name__
            )
            return {
                "status": "unhealthy",
                "connected": True,
                "error": str(e)
            }

    @asynccontextmanager
    async def acquire_connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a pooled connection inside a read-only transaction.

        Example:
            async with client.acquire_connection() as conn:
                rows = await conn.fetch("SELECT * FROM orders LIMIT 5")
        """
        if not self.is_connected() or self._pool is None:
            raise DatabaseConnectionError("Database client is not connected")

        async with self._pool.acquire() as connection:
            async with connection.transaction(readonly=True):
                yield connection

    async def execute_query(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """
        Execute a SQL query and return results as list of dictionaries.

        Args:
            query: SQL query string with $n placeholders
            params: Values bound to the placeholders
            timeout: Per-call timeout in seconds (defaults to the pool's command timeout)

        Returns:
            List of dictionaries containing query results

        Raises:
            DatabaseConnectionError: If the client is not connected
            DatabaseQueryError: If the statement fails or times out
        """
        logger.debug("Executing database query", query=query[:200], param_count=len(params or []))

        try:
            async with self.acquire_connection() as conn:
                rows = await conn.fetch(query, *(params or []), timeout=timeout)

            results = [dict(row) for row in rows]
            logger.debug("Query executed successfully", row_count=len(results))
            return results

        except DatabaseConnectionError:
            raise

        except (asyncpg.QueryCanceledError, TimeoutError) as e:
            error_msg = f"Query timeout exceeded: {e}"
            logger.error(error_msg, query=query[:200])
            raise DatabaseQueryError(error_msg) from e

        except asyncpg.UndefinedTableError as e:
            error_msg = f"Table does not exist: {e}"
            logger.error(error_msg, query=query[:200])
            raise DatabaseQueryError(error_msg) from e

        except asyncpg.UndefinedColumnError as e:
            error_msg = f"Column does not exist: {e}"
            logger.error(error_msg, query=query[:200])
            raise DatabaseQueryError(error_msg) from e

        except Exception as e:
            error_msg = f"Query execution failed: {e}"
            logger.error(error_msg, error_type=type(e).__name__, query=query[:200])
            raise DatabaseQueryError(error_msg) from e

    async def execute_scalar(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Execute a query and return the first column of the first row."""
        try:
            async with self.acquire_connection() as conn:
                return await conn.fetchval(query, *(params or []), timeout=timeout)

        except DatabaseConnectionError:
            raise

        except Exception as e:
            error_msg = f"Scalar query execution failed: {e}"
            logger.error(error_msg, error_type=type(e).__name__, query=query[:200])
            raise DatabaseQueryError(error_msg) from e
