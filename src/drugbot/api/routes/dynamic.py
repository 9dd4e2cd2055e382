"""
Dynamic table endpoints.

Generic select / create / update / delete against any table of the database
schema, plus aggregate reads and writes addressed by aggregate type. Table
and column names are checked against the schema before any SQL is built.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query

from drugbot.api.dependencies import AggregateRepoDep, DynamicRepoDep
from drugbot.api.schemas import (
    AggregateCreatedResponse,
    DynamicDeleteRequest,
    DynamicDeleteResponse,
    DynamicSelectRequest,
    DynamicSelectResponse,
    DynamicUpdateRequest,
)
from drugbot.database.sql_builder import is_safe_name
from drugbot.definitions.model_map import get_aggregate_mapping
from drugbot.exceptions import InvalidRequestError, RecordNotFoundError
from drugbot.models.ui_model import UIAggregate

router = APIRouter()


def require_aggregate_type(aggregate_type: Optional[str]) -> str:
    if not aggregate_type:
        raise InvalidRequestError("aggregateType parameter is required")
    if not is_safe_name(aggregate_type):
        raise InvalidRequestError("Invalid aggregateType format")
    if get_aggregate_mapping(aggregate_type) is None:
        raise InvalidRequestError("Aggregate type not found in model")
    return aggregate_type


@router.post("/dynamic-select", response_model=DynamicSelectResponse)
def dynamic_select(request: DynamicSelectRequest, repo: DynamicRepoDep) -> DynamicSelectResponse:
    """Rows of one table, optionally projected, filtered, ordered and paged."""
    if not request.table:
        raise InvalidRequestError("Missing required parameter: table")
    rows, count = repo.select(
        request.table,
        properties=request.properties,
        where=request.where,
        order_by=request.order_by,
        limit=request.limit,
        offset=request.offset,
    )
    return DynamicSelectResponse(data=rows, count=count)


@router.post("/dynamic-create", status_code=201)
def dynamic_create(
    repo: DynamicRepoDep,
    aggregates: AggregateRepoDep,
    payload: Dict[str, Any] = Body(...),
) -> Any:
    """
    Insert a row.

    ``{table, properties}`` inserts into a schema table and returns the row.
    ``{entityUid, aggregateType, ...fields}`` adds an aggregate record under
    an entity and returns ``{success, message, id}``.
    """
    payload = dict(payload)
    entity_uid = payload.pop("entityUid", None)
    aggregate_type = payload.pop("aggregateType", None)

    if entity_uid and aggregate_type:
        require_aggregate_type(aggregate_type)
        row = aggregates.create_aggregate_record_by_entity_uid(aggregate_type, entity_uid, payload)
        return AggregateCreatedResponse(
            success=True,
            message=f"{aggregate_type} created successfully",
            id=row["uid"],
        )

    properties = payload.get("properties")
    if properties is not None and not isinstance(properties, dict):
        raise InvalidRequestError("properties must be an object")
    return repo.create(payload.get("table"), properties)


@router.api_route("/dynamic-update", methods=["PATCH", "PUT"])
def dynamic_update(request: DynamicUpdateRequest, repo: DynamicRepoDep) -> Dict[str, Any]:
    return repo.update(request.table, request.uid, request.properties)


@router.delete("/dynamic-delete", response_model=DynamicDeleteResponse)
def dynamic_delete(request: DynamicDeleteRequest, repo: DynamicRepoDep) -> DynamicDeleteResponse:
    """Delete a row by uid; rows of entity tables take their dependents with them."""
    deleted = repo.delete(request.table, request.uid)
    return DynamicDeleteResponse(success=True, rows_affected=deleted)


@router.get("/dynamic-aggregate", response_model=UIAggregate)
def dynamic_aggregate(
    aggregates: AggregateRepoDep,
    entity_uid: Optional[str] = Query(default=None, alias="entityUid"),
    aggregate_type: Optional[str] = Query(default=None, alias="aggregateType"),
) -> UIAggregate:
    """One aggregate of an entity with its rows, in display form."""
    if not entity_uid:
        raise InvalidRequestError("entityUid parameter is required")
    require_aggregate_type(aggregate_type)
    return aggregates.get_aggregate_by_entity_uid(entity_uid, aggregate_type)


@router.api_route("/dynamic-aggregate/{aggregate_type}/{record_uid}", methods=["PATCH", "PUT"])
def update_aggregate_record(
    aggregate_type: str,
    record_uid: str,
    aggregates: AggregateRepoDep,
    payload: Dict[str, Any] = Body(...),
) -> Dict[str, Any]:
    require_aggregate_type(aggregate_type)
    row = aggregates.update_aggregate_record(aggregate_type, record_uid, payload)
    if row is None:
        raise RecordNotFoundError("Record not found")
    return row


@router.delete("/dynamic-aggregate/{aggregate_type}/{record_uid}")
def delete_aggregate_record(aggregate_type: str, record_uid: str, aggregates: AggregateRepoDep) -> Dict[str, Any]:
    require_aggregate_type(aggregate_type)
    if not aggregates.delete_aggregate_record(aggregate_type, record_uid):
        raise RecordNotFoundError("Record not found")
    return {"success": True}
