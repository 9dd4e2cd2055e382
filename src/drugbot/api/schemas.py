"""
Request and response bodies for the DrugBot API.

The dynamic-table and report-query endpoints speak camelCase; saved-report
and select-list bodies use the table column names as-is.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    status: str
    version: str
    database_configured: bool


# ============================================================================
# Dynamic tables
# ============================================================================

class DynamicSelectRequest(CamelModel):
    table: Optional[str] = None
    properties: Optional[List[str]] = None
    where: Optional[Dict[str, Any]] = None
    order_by: Any = None
    limit: Any = None
    offset: Any = None


class DynamicSelectResponse(BaseModel):
    data: List[Dict[str, Any]]
    count: int


class DynamicUpdateRequest(CamelModel):
    table: Optional[str] = None
    uid: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class DynamicDeleteRequest(CamelModel):
    table: Optional[str] = None
    uid: Optional[str] = None


class DynamicDeleteResponse(CamelModel):
    success: bool
    rows_affected: int


class AggregateCreatedResponse(BaseModel):
    success: bool
    message: str
    id: Any


# ============================================================================
# Saved reports
# ============================================================================

class ReportCreateRequest(BaseModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    is_public: bool = False
    report_type: Optional[str] = None
    report_definition: Optional[Dict[str, Any]] = None


class ReportUpdateRequest(BaseModel):
    uid: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    is_public: Optional[bool] = None
    report_type: Optional[str] = None
    report_definition: Optional[Dict[str, Any]] = None


# ============================================================================
# Select lists
# ============================================================================

class SelectListItem(BaseModel):
    text: str = ""
    code: str = ""
    ordinal: Optional[int] = None


class SelectListCreateRequest(BaseModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    items: Optional[List[SelectListItem]] = None


class SelectListUpdateRequest(SelectListCreateRequest):
    uid: Optional[str] = None


# ============================================================================
# Report queries
# ============================================================================

class ReportDataRequest(CamelModel):
    report_definition: Optional[Dict[str, Any]] = None


class ColumnValuesRequest(CamelModel):
    report_definition: Optional[Dict[str, Any]] = None
    column_name: Optional[str] = None


class ColumnValuesResponse(CamelModel):
    values: List[str]
    column_name: str


class DistinctDataRequest(CamelModel):
    table_name: Optional[str] = None
    column_list: Any = None
    filters: Optional[Dict[str, Any]] = Field(default_factory=dict)
    offset: Any = 0
    limit: Any = None
    order_by: Any = None
