"""
Excel export of every exportable table.
"""

import logging

import psycopg2
from fastapi import APIRouter, Response

from drugbot.api.dependencies import DbDep
from drugbot.definitions.db_model import THE_DB_MODEL
from drugbot.exceptions import RepositoryError
from drugbot.reports.export import export_database_to_excel
from drugbot.utils.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/export")
def export_workbook(db: DbDep) -> Response:
    """Download the database as an xlsx workbook, one sheet per table."""
    settings = get_settings()
    try:
        content = export_database_to_excel(db, THE_DB_MODEL, page_size=settings.export_page_size)
    except psycopg2.Error as e:
        logger.error(f"Export failed: {e}")
        raise RepositoryError("Failed to generate export file") from e
    logger.info(f"Generated export workbook ({len(content)} bytes)")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{settings.export_filename}"'},
    )
