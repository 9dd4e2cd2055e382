"""
Report definitions and database export.
"""
from drugbot.reports.definition import (
    DEFAULT_REPORT_TABLE,
    ColumnInfo,
    DistinctDataParams,
    ReportColumn,
    ReportDefinition,
)
from drugbot.reports.export import export_database_to_excel

__all__ = [
    "DEFAULT_REPORT_TABLE",
    "ColumnInfo",
    "DistinctDataParams",
    "ReportColumn",
    "ReportDefinition",
    "export_database_to_excel",
]
