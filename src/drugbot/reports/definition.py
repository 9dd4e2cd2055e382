"""
Report definitions.

A report definition is stored verbatim (JSON) on the ``reports`` row. It names
the table to read (``tableName``, defaulting to the wide drug view) and, per
column, whether it is shown, its order, an optional display name and the
filter values selected for it.

Example:
    {
        "name": "tnf-inhibitors",
        "reportType": "table",
        "owner": "8d6c...",
        "public": true,
        "columnList": {
            "generic_name": {"isActive": true, "isSortColumn": true, "ordinal": 1, "filter": {}},
            "target": {"isActive": true, "ordinal": 2, "filter": {"TNFi": true}}
        }
    }
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_REPORT_TABLE = "generic_drugs_wide_view"

FilterValue = Union[str, List[str]]


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ReportColumn(ReportModel):
    is_active: bool = False
    is_sort_column: bool = False
    filter: Dict[str, Any] = Field(default_factory=dict)
    ordinal: Optional[float] = 0
    display_name: Optional[str] = None

    def selected_filter_values(self) -> List[str]:
        """Filter values whose flag is truthy, in definition order."""
        return [value for value, selected in (self.filter or {}).items() if selected]


class ColumnInfo(ReportModel):
    """Column metadata returned alongside report rows."""
    key: str
    display_name: str
    field_name: str


class DistinctDataParams(ReportModel):
    """Parameters for a distinct-data query (everything except paging)."""
    table_name: str
    column_list: List[str]
    filters: Dict[str, Any] = Field(default_factory=dict)
    order_by: Optional[str] = None


class ReportDefinition(ReportModel):
    name: str = ""
    report_type: Optional[str] = None
    owner: Optional[str] = None
    public: bool = False
    column_list: Dict[str, ReportColumn] = Field(default_factory=dict)
    table_name: Optional[str] = None

    def resolved_table_name(self, default: str = DEFAULT_REPORT_TABLE) -> str:
        return self.table_name or default

    def active_columns(self) -> List[str]:
        """Active column names sorted by ordinal (ties keep definition order)."""
        active = [(name, col) for name, col in self.column_list.items() if col.is_active]
        return [name for name, _ in sorted(active, key=lambda item: item[1].ordinal or 0)]

    def column_info(self) -> List[ColumnInfo]:
        """Metadata for the active columns, display name falling back to the key."""
        return [
            ColumnInfo(key=name, display_name=self.column_list[name].display_name or name, field_name=name)
            for name in self.active_columns()
        ]

    def build_filters(self) -> Dict[str, FilterValue]:
        """
        Selected filter values per column: a single value when one is
        selected, a list when several are. Columns with nothing selected are
        left out.
        """
        filters: Dict[str, FilterValue] = {}
        for name, column in self.column_list.items():
            selected = column.selected_filter_values()
            if len(selected) == 1:
                filters[name] = selected[0]
            elif selected:
                filters[name] = selected
        return filters

    def sort_column(self) -> Optional[str]:
        """First active sort column, else the first active column."""
        active = self.active_columns()
        for name in active:
            if self.column_list[name].is_sort_column:
                return name
        return active[0] if active else None

    def to_distinct_params(self, default_table: str = DEFAULT_REPORT_TABLE) -> Optional[DistinctDataParams]:
        """
        Distinct-data query parameters for this definition.

        Returns:
            Params, or None when no column is active
        """
        columns = self.active_columns()
        if not columns:
            return None
        return DistinctDataParams(
            table_name=self.resolved_table_name(default_table),
            column_list=columns,
            filters=self.build_filters(),
            order_by=self.sort_column(),
        )
