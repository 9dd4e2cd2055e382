"""
FastAPI dependencies: one database connection per request, repositories
built on it, and the caller's identity for report endpoints.
"""

from typing import Annotated, Iterator, Optional

from fastapi import Depends, Header, HTTPException

from drugbot.database.connection import DatabaseConnection
from drugbot.repositories import (
    AggregateRepository,
    ChildEntityRepository,
    DynamicTableRepository,
    EntityRepository,
    ReportRepository,
    SelectListRepository,
)


def get_db() -> Iterator[DatabaseConnection]:
    """Open a connection for the request and close it once the response is sent."""
    db = DatabaseConnection()
    db.connect()
    try:
        yield db
    finally:
        db.close()


DbDep = Annotated[DatabaseConnection, Depends(get_db)]


def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    User id forwarded by the authenticating gateway in ``X-User-Id``.

    Raises:
        HTTPException: 401 when the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


UserDep = Annotated[str, Depends(get_current_user)]


def get_entity_repository(db: DbDep) -> EntityRepository:
    return EntityRepository(db)


def get_child_entity_repository(db: DbDep) -> ChildEntityRepository:
    return ChildEntityRepository(db)


def get_aggregate_repository(db: DbDep) -> AggregateRepository:
    return AggregateRepository(db)


def get_dynamic_repository(db: DbDep) -> DynamicTableRepository:
    return DynamicTableRepository(db)


def get_report_repository(db: DbDep) -> ReportRepository:
    return ReportRepository(db)


def get_select_list_repository(db: DbDep) -> SelectListRepository:
    return SelectListRepository(db)


EntityRepoDep = Annotated[EntityRepository, Depends(get_entity_repository)]
ChildRepoDep = Annotated[ChildEntityRepository, Depends(get_child_entity_repository)]
AggregateRepoDep = Annotated[AggregateRepository, Depends(get_aggregate_repository)]
DynamicRepoDep = Annotated[DynamicTableRepository, Depends(get_dynamic_repository)]
ReportRepoDep = Annotated[ReportRepository, Depends(get_report_repository)]
SelectListRepoDep = Annotated[SelectListRepository, Depends(get_select_list_repository)]
