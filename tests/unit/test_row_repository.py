"""Unit tests for RowRepository.fetch_page."""

import pytest

from db_explorer.domain.errors import InvalidIdentifierError, InvalidPaginationError, QueryExecutionFailedError
from db_explorer.domain.query import QuerySpec
from db_explorer.repositories.row_repository import RowRepository


class TestFetchPage:

    @pytest.mark.asyncio
    async def test_orders_scenario(self, catalog_runner, orders_columns):
        repo = RowRepository(catalog_runner)
        spec = QuerySpec(table_name="orders", filters={"status": "open"}, page=2, page_size=10)

        page = await repo.fetch_page(spec, orders_columns)

        assert ("query", "SELECT * FROM orders WHERE status::text ILIKE $1 LIMIT $2 OFFSET $3",
                ["%open%", 10, 10]) in catalog_runner.calls
        assert ("scalar", "SELECT COUNT(*) FROM orders WHERE status::text ILIKE $1",
                ["%open%"]) in catalog_runner.calls
        assert page.rows == [{"id": 1, "user_id": 7, "status": "open"}]
        assert page.total_rows == 25
        assert page.total_pages == 3
        assert page.page == 2

    @pytest.mark.asyncio
    async def test_null_count_is_zero(self, make_runner, orders_columns):
        repo = RowRepository(make_runner(scalar=None))

        page = await repo.fetch_page(QuerySpec(table_name="orders"), orders_columns)

        assert page.total_rows == 0
        assert page.total_pages == 0
        assert page.first_row == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", ["SELECT *", "COUNT(*)"])
    async def test_any_query_failure_fails_the_page(self, make_runner, orders_columns, failing):
        repo = RowRepository(make_runner(fail_on=[failing]))

        with pytest.raises(QueryExecutionFailedError) as exc_info:
            await repo.fetch_page(QuerySpec(table_name="orders"), orders_columns)

        assert exc_info.value.details == {"table_name": "orders"}
        assert exc_info.value.http_status == 500

    @pytest.mark.asyncio
    async def test_invalid_table_runs_nothing(self, catalog_runner, orders_columns):
        repo = RowRepository(catalog_runner)

        with pytest.raises(InvalidIdentifierError):
            await repo.fetch_page(QuerySpec(table_name="orders; DROP TABLE users"), orders_columns)

        assert catalog_runner.calls == []

    @pytest.mark.asyncio
    async def test_invalid_paging_runs_nothing(self, catalog_runner, orders_columns):
        repo = RowRepository(catalog_runner)

        with pytest.raises(InvalidPaginationError):
            await repo.fetch_page(QuerySpec(table_name="orders", page=0), orders_columns)

        assert catalog_runner.calls == []
