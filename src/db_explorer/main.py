"""
Main FastAPI application for DB Explorer.

This module sets up the FastAPI application with logging, tracing and
error handling middleware, and exposes the read-only JSON endpoints of the
table browser and the schema diagram.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .utils.logging import configure_logging, get_module_logger
from .utils.tracing import get_trace_id
from .config_constants import RESERVED_QUERY_PARAMS
from .domain.base_enums import HealthStatus
from .domain.errors import InvalidPaginationError
from .domain.responses import (
    HealthResponse,
    SchemaGraphResponse,
    TableListResponse,
    TablePageResponse,
    TableSchemaResponse,
)
from .api.middleware import (
    trace_id_middleware,
    logging_middleware,
    register_exception_handlers,
    ERROR_RESPONSES,
)
from .api.dependencies import (
    SettingsDep,
    SchemaServiceDep,
    BrowseServiceDep,
    OptionalDatabaseClientDep,
)
from .config import get_settings
from .infrastructure.database_client import DatabaseClient


# Configure logging on module import
configure_logging()
logger = get_module_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting DB Explorer API server", version=__version__)

    settings = get_settings()
    app.state.settings = settings
    logger.info("Settings loaded successfully", schema=settings.database.default_schema)

    db_client = DatabaseClient(settings.database)
    try:
        await db_client.connect()
        logger.info("Database client connected successfully")
    except Exception as e:
        logger.error(f"Failed to connect database client: {e}")
        # Continue without database - health check will report status

    app.state.db_client = db_client

    yield

    logger.info("Shutting down DB Explorer API server")

    if hasattr(app.state, "db_client"):
        await app.state.db_client.close()
        logger.info("Database client closed")


app = FastAPI(
    title="DB Explorer API",
    description="Read-only PostgreSQL table browser with foreign-key navigation and schema diagrams",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Last registered = first executed
app.middleware("http")(logging_middleware)
app.middleware("http")(trace_id_middleware)

register_exception_handlers(app)


# API Routes
@app.get("/", tags=["Root"])
async def root(settings: SettingsDep) -> Dict[str, Union[str, None]]:
    """
    Root endpoint returning basic API information.

    **Response**: Dict with message, version, trace_id, log_level
    """
    trace_id = get_trace_id()
    logger.info("Root endpoint accessed", trace_id=trace_id)

    return {
        "message": "DB Explorer API",
        "version": __version__,
        "trace_id": trace_id,
        "log_level": settings.app.log_level.value,
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health(db_client: OptionalDatabaseClientDep) -> HealthResponse:
    """
    Health check endpoint.

    **Response Model**: `HealthResponse`
    - status: healthy when the database answers, degraded otherwise
    - database_status: healthy / unhealthy / not_configured
    """
    logger.info("Health check endpoint accessed")

    database_status = "not_configured"
    details = None
    if db_client:
        details = await db_client.health_check()
        database_status = details.get("status", "unknown")

    overall_status = (
        HealthStatus.HEALTHY if database_status == HealthStatus.HEALTHY.value else HealthStatus.DEGRADED
    )

    return HealthResponse(
        status=overall_status.value,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database_status=database_status,
        details=details,
    )


@app.get(
    "/tables",
    response_model=TableListResponse,
    responses=ERROR_RESPONSES,
    tags=["Tables"],
)
async def list_tables(schema_service: SchemaServiceDep) -> TableListResponse:
    """
    List the tables of the configured schema with estimated row counts.

    An empty list with `metadata_available=false` means the catalog could
    not be read, not that the schema is empty.
    """
    return await schema_service.get_table_list()


@app.get(
    "/tables/{table_name}",
    response_model=TablePageResponse,
    responses=ERROR_RESPONSES,
    tags=["Tables"],
)
async def browse_table(
    table_name: str,
    request: Request,
    browse_service: BrowseServiceDep,
    settings: SettingsDep,
    page: int = 1,
    page_size: Optional[int] = None,
    breadcrumbs: Optional[str] = None,
) -> TablePageResponse:
    """
    One page of a table's rows.

    **Query parameters**:
    - page: 1-based page number (default 1)
    - page_size: rows per page (default from configuration)
    - breadcrumbs: `|`-separated chain of tables visited before this one
    - any other parameter is a case-insensitive substring filter on the
      column of that name; names that are not columns are ignored

    Columns named page, page_size or breadcrumbs cannot be filtered: those
    names always carry paging and navigation state.

    Foreign-key cells come back as links carrying the extended breadcrumb chain.
    """
    if page_size is not None and page_size > settings.browser.max_page_size:
        raise InvalidPaginationError(
            f"Page size must not exceed {settings.browser.max_page_size}",
            details={"page_size": page_size, "max_page_size": settings.browser.max_page_size},
        )

    filters = {
        key: value
        for key, value in request.query_params.items()
        if key not in RESERVED_QUERY_PARAMS
    }

    logger.info(
        "Table page requested",
        table_name=table_name,
        page=page,
        page_size=page_size,
        filter_keys=sorted(filters),
    )

    return await browse_service.browse_table(
        table_name,
        filters=filters,
        page=page,
        page_size=page_size,
        breadcrumbs=breadcrumbs,
    )


@app.get(
    "/tables/{table_name}/schema",
    response_model=TableSchemaResponse,
    responses=ERROR_RESPONSES,
    tags=["Tables"],
)
async def table_schema(table_name: str, schema_service: SchemaServiceDep) -> TableSchemaResponse:
    """Column detail (type, nullability) and foreign keys of one table."""
    return await schema_service.get_table_schema(table_name)


@app.get(
    "/schema/graph",
    response_model=SchemaGraphResponse,
    responses=ERROR_RESPONSES,
    tags=["Schema"],
)
async def schema_graph(schema_service: SchemaServiceDep) -> SchemaGraphResponse:
    """
    Laid-out relationship diagram of the configured schema.

    Node x/y are top-left corners; edges point from the referenced table to
    the table holding the foreign key.
    """
    return await schema_service.get_schema_graph()
