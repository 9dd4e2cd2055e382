"""
Tests for report definitions and the distinct-data parameters built from them.
"""

import pytest

from drugbot.reports import DEFAULT_REPORT_TABLE, DistinctDataParams, ReportDefinition


def make_definition(**columns):
    return ReportDefinition.model_validate({"name": "report", "columnList": columns})


class TestActiveColumns:

    def test_sorted_by_ordinal(self):
        definition = make_definition(
            target={"isActive": True, "ordinal": 2},
            generic_name={"isActive": True, "ordinal": 1},
            route_type={"isActive": False, "ordinal": 0},
        )
        assert definition.active_columns() == ["generic_name", "target"]

    def test_column_info_display_name_fallback(self):
        definition = make_definition(
            generic_name={"isActive": True, "ordinal": 1, "displayName": "Generic Name"},
            target={"isActive": True, "ordinal": 2},
        )
        info = [c.model_dump(by_alias=True) for c in definition.column_info()]
        assert info == [
            {"key": "generic_name", "displayName": "Generic Name", "fieldName": "generic_name"},
            {"key": "target", "displayName": "target", "fieldName": "target"},
        ]

    def test_extra_fields_survive_round_trip(self):
        definition = ReportDefinition.model_validate({
            "name": "r", "chartType": "bar",
            "columnList": {"target": {"isActive": True, "width": 120}},
        })
        dumped = definition.model_dump(by_alias=True)
        assert dumped["chartType"] == "bar"
        assert dumped["columnList"]["target"]["width"] == 120


class TestFilters:

    def test_single_and_multiple_selections(self):
        definition = make_definition(
            target={"isActive": True, "filter": {"TNF": True, "JAK": False}},
            route_type={"isActive": True, "filter": {"SC": True, "IV": True}},
            country={"isActive": False, "filter": {"USA": False}},
        )
        assert definition.build_filters() == {"target": "TNF", "route_type": ["SC", "IV"]}

    def test_filters_on_inactive_columns_still_apply(self):
        definition = make_definition(
            generic_name={"isActive": True},
            country={"isActive": False, "filter": {"USA": True}},
        )
        assert definition.build_filters() == {"country": "USA"}


class TestSortColumn:

    def test_explicit_sort_column(self):
        definition = make_definition(
            generic_name={"isActive": True, "ordinal": 1},
            target={"isActive": True, "ordinal": 2, "isSortColumn": True},
        )
        assert definition.sort_column() == "target"

    def test_inactive_sort_column_ignored(self):
        definition = make_definition(
            generic_name={"isActive": True, "ordinal": 1},
            target={"isActive": False, "isSortColumn": True},
        )
        assert definition.sort_column() == "generic_name"

    def test_no_active_columns(self):
        assert make_definition(target={"isActive": False}).sort_column() is None


class TestDistinctParams:

    def test_two_active_columns_and_one_filter(self):
        definition = make_definition(
            generic_name={"isActive": True, "ordinal": 1, "isSortColumn": True},
            target={"isActive": True, "ordinal": 2, "filter": {"TNF": True}},
            route_type={"isActive": False, "ordinal": 3},
        )

        params = definition.to_distinct_params()

        assert params.model_dump(by_alias=True) == {
            "tableName": DEFAULT_REPORT_TABLE,
            "columnList": ["generic_name", "target"],
            "filters": {"target": "TNF"},
            "orderBy": "generic_name",
        }

    def test_explicit_table(self):
        definition = ReportDefinition.model_validate({
            "tableName": "generic_approvals",
            "columnList": {"country": {"isActive": True}},
        })
        assert definition.to_distinct_params().table_name == "generic_approvals"

    def test_nothing_active(self):
        assert make_definition(target={"isActive": False}).to_distinct_params() is None

    def test_params_from_camel_case(self):
        params = DistinctDataParams.model_validate({"tableName": "t", "columnList": ["a"]})
        assert params.filters == {}
        assert params.order_by is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
