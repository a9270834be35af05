"""Unit tests for the pydantic domain models."""

import pytest
from pydantic import ValidationError

from db_explorer.domain.graph import GraphEdge, GraphNode
from db_explorer.domain.query import PageResult, QuerySpec
from db_explorer.domain.responses import PaginationInfo
from db_explorer.domain.schema import Column, ForeignKey, Table, TableStats


class TestSchemaModels:

    def test_table_column_names(self):
        table = Table(name="users", columns=[Column(name="id", data_type="integer"), Column(name="email", data_type="text")])
        assert table.column_names == ["id", "email"]

    def test_models_are_frozen(self):
        column = Column(name="id", data_type="integer")
        with pytest.raises(ValidationError):
            column.name = "other"

    def test_self_reference(self):
        fk = ForeignKey(source_table="employees", source_column="manager_id",
                        referenced_table="employees", referenced_column="id")
        assert fk.is_self_reference

    def test_negative_estimate_rejected(self):
        with pytest.raises(ValidationError):
            TableStats(table_name="t", estimated_rows=-1)


class TestQueryModels:

    def test_spec_accepts_unchecked_paging(self):
        spec = QuerySpec(table_name="a;b", page=0, page_size=-5)
        assert spec.offset == 5

    def test_page_result_summary(self):
        page = PageResult(rows=[{"id": i} for i in range(10)], total_rows=25, page=3, page_size=10)

        assert page.total_pages == 3
        assert (page.first_row, page.last_row) == (21, 30)
        assert page.has_previous
        assert not page.has_next

    def test_partial_last_page(self):
        page = PageResult(rows=[{"id": i} for i in range(5)], total_rows=25, page=3, page_size=10)
        assert (page.first_row, page.last_row) == (21, 25)

    def test_page_beyond_total(self):
        page = PageResult(rows=[], total_rows=3, page=7, page_size=10)

        assert page.total_pages == 1
        assert (page.first_row, page.last_row) == (0, 0)
        assert not page.has_next

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            PageResult(rows=[], total_rows=0, page=1, page_size=0)

    def test_pagination_info_from_page(self):
        info = PaginationInfo.from_page(PageResult(rows=[{"id": 1}], total_rows=1, page=1, page_size=10))

        assert info.current_page == 1
        assert info.total_pages == 1
        assert (info.first_row, info.last_row) == (1, 1)
        assert not info.has_previous and not info.has_next


class TestGraphModels:

    def test_node_positioned(self):
        node = GraphNode(id="users", width=400, height=150)
        assert not node.is_positioned
        assert node.model_copy(update={"x": 0.0, "y": 0.0}).is_positioned

    def test_node_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            GraphNode(id="users", width=0, height=150)

    def test_self_loop(self):
        edge = GraphEdge(id="employees-manager_id-employees", source="employees", target="employees", label="manager_id")
        assert edge.is_self_loop
