"""
Saved report endpoints and the report data queries.

All routes need the caller's user id (``X-User-Id``).
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from drugbot.api.dependencies import ReportRepoDep, UserDep, get_current_user
from drugbot.api.schemas import (
    ColumnValuesRequest,
    ColumnValuesResponse,
    DistinctDataRequest,
    ReportCreateRequest,
    ReportDataRequest,
    ReportUpdateRequest,
)
from drugbot.exceptions import InvalidRequestError
from drugbot.reports.definition import ReportDefinition

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", dependencies=[Depends(get_current_user)])


def parse_definition(raw: Optional[Dict[str, Any]], message: str) -> ReportDefinition:
    """Validate a raw report definition, rejecting it with ``message`` on failure."""
    if not raw or not isinstance(raw.get("columnList"), dict):
        raise InvalidRequestError(message)
    try:
        return ReportDefinition.model_validate(raw)
    except ValidationError as e:
        logger.info(f"Rejected report definition: {e}")
        raise InvalidRequestError(message) from e


# ============================================================================
# Report queries
# ============================================================================

@router.post("/distinct-data")
def distinct_data(request: DistinctDataRequest, repo: ReportRepoDep) -> Dict[str, Any]:
    """One page of distinct rows over a table's columns, with filters applied."""
    return repo.get_distinct_data(
        request.table_name,
        request.column_list,
        filters=request.filters,
        offset=request.offset,
        limit=request.limit,
        order_by=request.order_by,
    )


@router.post("/data")
def report_data(request: ReportDataRequest, repo: ReportRepoDep) -> Dict[str, Any]:
    definition = parse_definition(request.report_definition, "Invalid report definition")
    return repo.get_report_data(definition)


@router.post("/data-values", response_model=ColumnValuesResponse)
def column_values(request: ColumnValuesRequest, repo: ReportRepoDep) -> ColumnValuesResponse:
    """Distinct values of one report column, for its filter picker."""
    if not request.column_name:
        raise InvalidRequestError("Invalid request parameters")
    definition = parse_definition(request.report_definition, "Invalid request parameters")
    values = repo.get_column_values(definition, request.column_name)
    return ColumnValuesResponse(values=values, column_name=request.column_name)


# ============================================================================
# Saved reports
# ============================================================================

@router.get("")
def list_reports(user_id: UserDep, repo: ReportRepoDep) -> Dict[str, Any]:
    """The caller's reports, then public reports shared by others."""
    return {"reports": repo.list_reports(user_id)}


@router.post("")
def create_report(request: ReportCreateRequest, user_id: UserDep, repo: ReportRepoDep) -> Dict[str, Any]:
    report = repo.create_report(
        user_id,
        name=request.name,
        display_name=request.display_name,
        report_definition=request.report_definition,
        is_public=request.is_public,
        report_type=request.report_type,
    )
    return {"report": report}


@router.put("")
def update_report(request: ReportUpdateRequest, user_id: UserDep, repo: ReportRepoDep) -> Dict[str, Any]:
    report = repo.update_report(user_id, request.uid, request.model_dump(exclude={"uid"}))
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found or access denied")
    return {"report": report}


@router.delete("")
def delete_report(
    user_id: UserDep,
    repo: ReportRepoDep,
    uid: Optional[str] = Query(default=None),
) -> Dict[str, Any]:
    if not repo.delete_report(user_id, uid):
        raise HTTPException(status_code=404, detail="Report not found or access denied")
    return {"success": True}


@router.get("/{slug}")
def get_report(slug: str, user_id: UserDep, repo: ReportRepoDep) -> Dict[str, Any]:
    report = repo.get_report_by_slug(slug, user_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"report": report}
