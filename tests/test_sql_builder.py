"""
Tests for identifier validation and the SQL clause builders.
"""

import pytest
from psycopg2 import sql

from drugbot.database.sql_builder import (
    build_limit_offset,
    build_order_by,
    build_where,
    is_safe_name,
    normalize_order_by,
    require_safe_name,
)
from drugbot.exceptions import InvalidNameError, InvalidRequestError


class TestSafeNames:

    @pytest.mark.parametrize("name", ["generic_drugs", "Col1", "_x", "a"])
    def test_safe(self, name):
        assert is_safe_name(name)
        assert require_safe_name(name) == name

    @pytest.mark.parametrize("name", ["", "drop table", "x;--", "a-b", "名前", None, 5])
    def test_unsafe(self, name):
        assert not is_safe_name(name)

    def test_error_names_the_kind(self):
        with pytest.raises(InvalidNameError, match="Invalid column name format"):
            require_safe_name("a b", "column")


class TestOrderBy:

    def test_shapes(self):
        assert normalize_order_by(None) == []
        assert normalize_order_by("alias") == [("alias", "asc")]
        assert normalize_order_by({"approval_date": "DESC", "country": "asc"}) == [
            ("approval_date", "desc"), ("country", "asc"),
        ]
        assert normalize_order_by([("a", "desc")]) == [("a", "desc")]

    def test_invalid_direction(self):
        with pytest.raises(InvalidRequestError, match="Invalid order direction"):
            normalize_order_by({"alias": "sideways"})

    @pytest.mark.parametrize("order_by", [["generic_name"], [["a", "asc", "x"]], [{"a": "asc"}], 5])
    def test_malformed_entries(self, order_by):
        with pytest.raises(InvalidRequestError, match="Invalid order by|Order by entries"):
            normalize_order_by(order_by)

    def test_empty_clause(self):
        assert build_order_by(None) == sql.SQL("")
        assert "Identifier('alias')" in repr(build_order_by({"alias": "desc"}))


class TestWhere:

    def test_no_filters(self):
        clause, params = build_where(None)
        assert clause == sql.SQL("")
        assert params == []

    def test_scalar_list_and_null(self):
        clause, params = build_where({"generic_uid": "u-1", "country": ["USA", "EU"], "discon_date": None})
        text = repr(clause)

        assert params == ["u-1", ["USA", "EU"]]
        assert "= ANY(%s)" in text
        assert "IS NULL" in text

    def test_text_cast_stringifies_values(self):
        clause, params = build_where({"biosimilar": 1, "route_type": ("SC", "IV")}, cast_text=True)
        assert params == ["1", ["SC", "IV"]]
        assert "::text[]" in repr(clause)

    def test_search_adds_one_param_per_column(self):
        clause, params = build_where(None, search=("tnf", ["generic_name", "mech_of_action"]))
        assert params == ["%tnf%", "%tnf%"]
        assert " OR " in repr(clause)

    def test_blank_search_is_ignored(self):
        clause, params = build_where(None, search=("", ["generic_name"]))
        assert clause == sql.SQL("")
        assert params == []


class TestLimitOffset:

    def test_params(self):
        assert build_limit_offset(None, None)[1] == []
        assert build_limit_offset(10, None)[1] == [10]
        assert build_limit_offset(10, 20)[1] == [10, 20]
        assert build_limit_offset(None, 0)[1] == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
