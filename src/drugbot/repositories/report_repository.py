"""
Repository for saved reports and the queries that feed them.

Saved reports live in the ``reports`` table. A report is visible to its owner
and, when ``is_public`` is set, to everyone; only the owner may change or
delete it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from drugbot.database.connection import DatabaseConnection
from drugbot.database.sql_builder import normalize_order_by, require_safe_name
from drugbot.exceptions import InvalidRequestError
from drugbot.reports.definition import ReportDefinition
from drugbot.repositories.base import BaseRepository, require_connection
from drugbot.utils.config import get_settings

logger = logging.getLogger(__name__)

REPORTS_TABLE = "reports"

REPORT_COLUMNS = (
    "uid", "name", "display_name", "owner_uid", "is_public",
    "report_type", "report_definition", "created_at", "updated_at",
)

UPDATABLE_FIELDS = ("name", "display_name", "is_public", "report_type", "report_definition")


def clamp_offset(offset: Any) -> int:
    """Non-negative integer offset; anything that is not a number becomes 0."""
    if isinstance(offset, bool) or not isinstance(offset, (int, float)):
        return 0
    return max(0, int(offset))


def clamp_limit(limit: Any, default: int = 1000, maximum: int = 10000) -> int:
    """Limit clamped to [1, maximum]; anything that is not a number becomes ``default``."""
    if isinstance(limit, bool) or not isinstance(limit, (int, float)):
        return default
    return min(max(1, int(limit)), maximum)


class ReportRepository(BaseRepository):
    """
    Saved report CRUD plus the distinct-data, distinct-values and plain
    report-data queries.
    """

    def __init__(self, db: DatabaseConnection, **kwargs):
        super().__init__(db, **kwargs)
        self.settings = get_settings()

    # =========================================================================
    # SAVED REPORTS
    # =========================================================================

    @require_connection
    def list_reports(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Reports visible to a user: their own first, then public reports owned
        by others, each group newest first.
        """
        newest_first = {"created_at": "desc"}
        with self._db_errors("fetch reports", REPORTS_TABLE, {"userId": user_id}):
            own = self.db.select(REPORTS_TABLE, REPORT_COLUMNS, where={"owner_uid": user_id}, order_by=newest_first)
            public = self.db.select(REPORTS_TABLE, REPORT_COLUMNS, where={"is_public": True}, order_by=newest_first)
        others = [r for r in public if str(r["owner_uid"]) != str(user_id)]
        return own + others

    @require_connection
    def get_report_by_slug(self, slug: str, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Report by name, preferring the user's own report over a public one.
        """
        if not slug:
            raise InvalidRequestError("Report slug is required")
        with self._db_errors("fetch report", REPORTS_TABLE, {"slug": slug}):
            report = self.db.select_one(REPORTS_TABLE, {"name": slug, "owner_uid": user_id}, columns=REPORT_COLUMNS)
            if report is None:
                report = self.db.select_one(REPORTS_TABLE, {"name": slug, "is_public": True}, columns=REPORT_COLUMNS)
        return report

    @require_connection
    def create_report(
        self,
        user_id: str,
        name: str,
        display_name: str,
        report_definition: Mapping[str, Any],
        is_public: bool = False,
        report_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not name or not display_name or not report_definition:
            raise InvalidRequestError("Missing required fields")
        self.log("CREATE_REPORT", REPORTS_TABLE, {"name": name, "userId": user_id})
        with self._db_errors("create report", REPORTS_TABLE, {"name": name}):
            return self.db.insert(REPORTS_TABLE, {
                "name": name,
                "display_name": display_name,
                "owner_uid": user_id,
                "is_public": bool(is_public),
                "report_type": report_type,
                "report_definition": dict(report_definition),
            })

    @require_connection
    def update_report(self, user_id: str, uid: str, changes: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update a report the user owns. Fields not present in ``changes``
        (or None) are left alone.

        Returns:
            Updated report, or None when it does not exist or is not owned by the user
        """
        if not uid:
            raise InvalidRequestError("Report UID is required")
        values = {k: changes[k] for k in UPDATABLE_FIELDS if changes.get(k) is not None}
        values["updated_at"] = datetime.now(timezone.utc)

        self.log("UPDATE_REPORT", REPORTS_TABLE, {"uid": uid, "userId": user_id, "fields": sorted(values)})
        with self._db_errors("update report", REPORTS_TABLE, {"uid": uid}):
            rows = self.db.update(REPORTS_TABLE, values, {"uid": uid, "owner_uid": user_id})
        return rows[0] if rows else None

    @require_connection
    def delete_report(self, user_id: str, uid: str) -> bool:
        """Delete a report the user owns; False when nothing matched."""
        if not uid:
            raise InvalidRequestError("Report UID is required")
        self.log("DELETE_REPORT", REPORTS_TABLE, {"uid": uid, "userId": user_id})
        with self._db_errors("delete report", REPORTS_TABLE, {"uid": uid}):
            return self.db.delete(REPORTS_TABLE, {"uid": uid, "owner_uid": user_id}) > 0

    # =========================================================================
    # REPORT QUERIES
    # =========================================================================

    @require_connection
    def get_distinct_data(
        self,
        table_name: Any,
        column_list: Any,
        filters: Optional[Mapping[str, Any]] = None,
        offset: Any = 0,
        limit: Any = None,
        order_by: Any = None,
    ) -> Dict[str, Any]:
        """
        One page of distinct rows over the given columns.

        Filters compare each column's text value against a value or a list of
        values; empty filters are ignored. ``order_by`` must be one of the
        selected columns (a name, or ``{name: "asc"|"desc"}``).

        Returns:
            {"data", "columns", "totalRows", "offset", "limit"}

        Raises:
            InvalidRequestError: On a missing table name, an empty column
                list or unsafe names
        """
        if not table_name:
            raise InvalidRequestError("Table name is required")
        if not isinstance(column_list, (list, tuple)) or not column_list:
            raise InvalidRequestError("Column list must be a non-empty array")

        require_safe_name(table_name, "table")
        for column in column_list:
            require_safe_name(column, "column")

        active_filters = {}
        for column, value in (filters or {}).items():
            require_safe_name(column, "column")
            if value is None or value == "" or (isinstance(value, (list, tuple)) and not value):
                continue
            active_filters[column] = list(value) if isinstance(value, (list, tuple)) else value

        order_pairs = normalize_order_by(order_by)
        for column, _ in order_pairs:
            if column not in column_list:
                raise InvalidRequestError("Order by column must be one of the selected columns")

        page_offset = clamp_offset(offset)
        page_limit = clamp_limit(
            limit, default=self.settings.report_page_size, maximum=self.settings.report_max_page_size
        )
        columns = [{"key": c, "displayName": c, "fieldName": c} for c in column_list]

        self.log("DISTINCT_DATA", table_name, {
            "columns": list(column_list), "filters": active_filters,
            "offset": page_offset, "limit": page_limit, "orderBy": order_pairs,
        })
        with self._db_errors("fetch distinct data", table_name):
            rows, total = self.db.select_distinct(
                table_name,
                list(column_list),
                filters=active_filters,
                order_by=order_pairs,
                limit=page_limit,
                offset=page_offset,
            )

        return {
            "data": rows,
            "columns": columns,
            "totalRows": total if rows else 0,
            "offset": page_offset,
            "limit": page_limit,
        }

    @require_connection
    def get_column_values(self, definition: ReportDefinition, column_name: str) -> List[str]:
        """
        Distinct non-empty values of one report column, as sorted strings.

        Raises:
            InvalidRequestError: If the column is not part of the definition
        """
        if not column_name:
            raise InvalidRequestError("Invalid request parameters")
        if column_name not in definition.column_list:
            raise InvalidRequestError("Column not found in report definition")

        table_name = definition.resolved_table_name(self.settings.report_default_table)
        require_safe_name(table_name, "table")
        require_safe_name(column_name, "column")

        with self._db_errors("fetch distinct values", table_name, {"column": column_name}):
            values = self.db.distinct_values(table_name, column_name)
        return sorted(str(v) for v in values if v is not None and str(v) != "")

    @require_connection
    def get_report_data(self, definition: ReportDefinition) -> Dict[str, Any]:
        """
        Rows for the active columns of a report, capped at the configured row limit.

        Returns:
            {"data", "columns", "totalRows"}
        """
        columns = definition.column_info()
        if not columns:
            raise InvalidRequestError("No active columns found")

        table_name = definition.resolved_table_name(self.settings.report_default_table)
        require_safe_name(table_name, "table")
        field_names: Sequence[str] = [require_safe_name(c.field_name, "column") for c in columns]

        with self._db_errors("fetch report data", table_name):
            rows = self.db.select(table_name, columns=field_names, limit=self.settings.report_data_row_limit)

        return {
            "data": rows,
            "columns": [c.model_dump(by_alias=True) for c in columns],
            "totalRows": len(rows),
        }
