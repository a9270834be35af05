import pytest
from pydantic import ValidationError

from db_explorer.config import BrowserConfig, LayoutConfig, Settings, get_settings
from db_explorer.config_constants import LogFormat, LogLevel, RESERVED_QUERY_PARAMS


## test for import and loading settings
def test_get_settings():
    settings = get_settings()
    assert settings is not None
    assert settings.database.database_url
    assert settings.browser.default_page_size > 0
    assert settings.app.log_level in LogLevel


## test for singleton
def test_get_settings_singleton():
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 is settings2


def test_defaults():
    assert BrowserConfig().default_page_size == 10
    assert BrowserConfig().max_page_size == 500

    layout = LayoutConfig()
    assert (layout.node_width, layout.column_row_height, layout.header_height) == (400, 30, 90)
    assert layout.rank_separation == 120


def test_nested_environment_variables(monkeypatch):
    monkeypatch.setenv("DATABASE__DATABASE_URL", "postgresql://u:p@db:5432/shop")
    monkeypatch.setenv("DATABASE__DEFAULT_SCHEMA", "sales")
    monkeypatch.setenv("BROWSER__DEFAULT_PAGE_SIZE", "25")
    monkeypatch.setenv("APP__LOG_FORMAT", "console")

    settings = Settings(_env_file=None)

    assert settings.database.database_url == "postgresql://u:p@db:5432/shop"
    assert settings.database.default_schema == "sales"
    assert settings.browser.default_page_size == 25
    assert settings.app.log_format is LogFormat.CONSOLE


def test_database_url_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE__DATABASE_URL", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_reserved_query_params():
    assert RESERVED_QUERY_PARAMS == {"page", "page_size", "breadcrumbs"}
