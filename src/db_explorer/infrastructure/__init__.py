"""
Infrastructure layer for external integrations.

Holds the PostgreSQL client and the QueryRunner protocol repositories
depend on.
"""

from .database_client import DatabaseClient, QueryRunner

__all__ = ["DatabaseClient", "QueryRunner"]
