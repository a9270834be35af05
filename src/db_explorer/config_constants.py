from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


# -------------------------
# Navigation Constants
# -------------------------

# Query parameters of the table page that are never treated as column filters,
# so columns with these names cannot be filtered from the API
RESERVED_QUERY_PARAMS = frozenset({"page", "page_size", "breadcrumbs"})

# Separator between table names in an encoded breadcrumb chain
BREADCRUMB_DELIMITER = "|"
