"""Unit tests for extract_payload."""

from __future__ import annotations

import pytest

from mp_datatable.fetch import extract_payload
from mp_datatable.kernel.errors import ResponseShapeError
from mp_datatable.testing import table_payload


class TestExtractPayload:
    def test_top_level(self) -> None:
        assert extract_payload({"data": [{"id": 1}], "total": 9}) == ([{"id": 1}], 9)

    def test_nested_property(self) -> None:
        body = table_payload([{"id": 1}], 40, data_property="students")
        assert body == {"students": {"data": [{"id": 1}], "total": 40}}
        assert extract_payload(body, "students") == ([{"id": 1}], 40)

    def test_dotted_path(self) -> None:
        body = table_payload([], 0, data_property="result.roles")
        assert extract_payload(body, "result.roles") == ([], 0)

    def test_missing_total_reads_zero(self) -> None:
        assert extract_payload({"data": [1, 2]}) == ([1, 2], 0)

    def test_null_data_reads_empty(self) -> None:
        assert extract_payload({"data": None, "total": 0}) == ([], 0)

    def test_numeric_string_total(self) -> None:
        assert extract_payload({"data": [], "total": "12"}) == ([], 12)

    def test_missing_property(self) -> None:
        with pytest.raises(ResponseShapeError, match="students"):
            extract_payload({"data": []}, "students")

    @pytest.mark.parametrize(
        "body",
        [[1, 2], "text", {"data": {"id": 1}}, {"data": [], "total": "many"}],
    )
    def test_malformed(self, body: object) -> None:
        with pytest.raises(ResponseShapeError):
            extract_payload(body)
