"""
FastAPI dependencies for dependency injection.

Routes depend on services; services receive repositories built per request
around the shared DatabaseClient kept in app state:
- API -> Service -> Repository -> QueryRunner (DatabaseClient)

Because repositories are built per request, the metadata failures a
SchemaRepository records never leak into another request.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..config import Settings
from ..domain.errors import ConfigurationError, ServiceUnavailableError
from ..infrastructure.database_client import DatabaseClient
from ..repositories.row_repository import RowRepository
from ..repositories.schema_repository import SchemaRepository
from ..services.browse_service import BrowseService
from ..services.schema_service import SchemaService


def get_settings(request: Request) -> Settings:
    """
    Dependency to get the settings from app state.

    Raises:
        ConfigurationError: If settings were not loaded at startup
    """
    if not hasattr(request.app.state, "settings"):
        raise ConfigurationError("Settings not initialized")

    return request.app.state.settings


def get_db_client_optional(request: Request) -> DatabaseClient | None:
    """Get database client if available, None otherwise (health checks)."""
    return getattr(request.app.state, "db_client", None)


def get_db_client(request: Request) -> DatabaseClient:
    """
    Get the connected database client.

    Raises:
        ServiceUnavailableError: If the client is missing or not connected
    """
    db_client = getattr(request.app.state, "db_client", None)
    if db_client is None or not db_client.is_connected():
        raise ServiceUnavailableError("Database is not available")
    return db_client


def get_schema_repository(
    request: Request,
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
) -> SchemaRepository:
    """A fresh SchemaRepository for this request."""
    settings = get_settings(request)
    return SchemaRepository(db_client, default_schema=settings.database.default_schema)


def get_schema_service(
    request: Request,
    schema_repo: Annotated[SchemaRepository, Depends(get_schema_repository)],
) -> SchemaService:
    """
    Dependency to get a SchemaService instance.

    Usage in routes:
        @app.get("/schema/graph")
        async def schema_graph(schema_service: SchemaServiceDep):
            return await schema_service.get_schema_graph()
    """
    settings = get_settings(request)
    return SchemaService(schema_repository=schema_repo, layout_config=settings.layout)


def get_browse_service(
    request: Request,
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    schema_repo: Annotated[SchemaRepository, Depends(get_schema_repository)],
) -> BrowseService:
    """Dependency to get a BrowseService instance."""
    settings = get_settings(request)
    return BrowseService(
        schema_repository=schema_repo,
        row_repository=RowRepository(db_client),
        browser_config=settings.browser,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
OptionalDatabaseClientDep = Annotated[DatabaseClient | None, Depends(get_db_client_optional)]
SchemaServiceDep = Annotated[SchemaService, Depends(get_schema_service)]
BrowseServiceDep = Annotated[BrowseService, Depends(get_browse_service)]
