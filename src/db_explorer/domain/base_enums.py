from enum import Enum


class CellKind(str, Enum):
    """How a table cell is presented."""
    PLAIN_TEXT = "plain_text"
    NAVIGABLE_LINK = "navigable_link"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
