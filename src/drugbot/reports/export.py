"""
Excel export of the DrugBot database.

One sheet per exportable table, headers are the table's exportable fields.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from io import BytesIO
from typing import Any, Dict, Iterator, List

import pandas as pd

from drugbot.database.connection import DatabaseConnection
from drugbot.definitions.db_model import THE_DB_MODEL
from drugbot.models.db_model import DBModel

logger = logging.getLogger(__name__)

EXCEL_SHEET_NAME_LIMIT = 31


def _excel_value(value: Any) -> Any:
    """Convert values openpyxl cannot write (tz-aware datetimes, JSON, UUIDs)."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def iter_table_rows(
    db: DatabaseConnection,
    table_name: str,
    columns: List[str],
    order_by: List[str],
    page_size: int = 1000,
) -> Iterator[Dict[str, Any]]:
    """
    Yield every row of a table, fetched ``page_size`` rows at a time.
    """
    offset = 0
    while True:
        page = db.select(
            table_name,
            columns=columns,
            order_by=[(c, "asc") for c in order_by],
            limit=page_size,
            offset=offset,
        )
        yield from page
        if len(page) < page_size:
            break
        offset += page_size


def export_database_to_excel(
    db: DatabaseConnection,
    db_model: DBModel = THE_DB_MODEL,
    page_size: int = 1000,
) -> bytes:
    """
    Export all exportable tables to an in-memory xlsx workbook.

    Args:
        db: Database connection
        db_model: Schema describing which tables/fields to export
        page_size: Rows fetched per query

    Returns:
        Workbook bytes
    """
    buffer = BytesIO()

    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        for table in db_model.get_exportable_tables():
            columns = db_model.get_exportable_field_names(table.name)
            if not columns:
                continue
            order_by = [c for c in db_model.get_primary_key_field_names(table.name) if c in columns]

            rows = [
                {c: _excel_value(row.get(c)) for c in columns}
                for row in iter_table_rows(db, table.name, columns, order_by, page_size)
            ]
            df = pd.DataFrame(rows, columns=columns)
            df.to_excel(writer, sheet_name=table.name[:EXCEL_SHEET_NAME_LIMIT], index=False)
            logger.info(f"Exported {len(rows)} rows from {table.name}")

    return buffer.getvalue()
