"""
Generic, schema-validated table access for the dynamic-* endpoints.

Every table and column name is checked for the safe-name pattern and against
the DB model before any SQL is built.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from drugbot.database.connection import DatabaseConnection
from drugbot.database.sql_builder import OrderBy, normalize_order_by, require_safe_name
from drugbot.definitions.db_model import THE_DB_MODEL
from drugbot.definitions.model_map import find_entity_mapping_by_table
from drugbot.exceptions import (
    InvalidRequestError,
    RecordNotFoundError,
    UnknownColumnError,
    UnknownTableError,
)
from drugbot.models.db_model import DBModel
from drugbot.repositories.base import BaseRepository, require_connection

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class DynamicTableRepository(BaseRepository):
    """Select / create / update / delete on any table in the schema."""

    def __init__(self, db: DatabaseConnection, db_model: DBModel = THE_DB_MODEL, **kwargs):
        super().__init__(db, **kwargs)
        self.db_model = db_model

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_table(self, table: Any) -> str:
        """
        Raises:
            InvalidNameError: Bad characters in the name
            UnknownTableError: Table not in the schema
        """
        require_safe_name(table, "table")
        if not self.db_model.has_table(table):
            raise UnknownTableError(table)
        return table

    def validate_columns(self, table: str, columns: Sequence[Any]) -> List[str]:
        """
        Raises:
            InvalidNameError: Bad characters in a column name
            UnknownColumnError: Column not in the table
        """
        for column in columns:
            require_safe_name(column, "column")
            if not self.db_model.has_table_field(table, column):
                raise UnknownColumnError(table, column)
        return list(columns)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    @require_connection
    def select(
        self,
        table: str,
        properties: Optional[Sequence[str]] = None,
        where: Optional[Mapping[str, Any]] = None,
        order_by: OrderBy = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Select rows from a schema table.

        Args:
            table: Table name
            properties: Columns to return (all when empty)
            where: Column -> value equality filters
            order_by: {column: "asc"|"desc"}
            limit: Maximum rows (ignored unless a positive number)
            offset: Rows to skip; implies a page of 1000 when no limit is set

        Returns:
            (rows, number of rows returned)
        """
        self.validate_table(table)
        if properties:
            self.validate_columns(table, properties)
        if where:
            self.validate_columns(table, list(where.keys()))
        order_pairs = normalize_order_by(order_by)
        self.validate_columns(table, [column for column, _ in order_pairs])

        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            limit = None
        if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
            offset = None
        if offset and limit is None:
            limit = DEFAULT_PAGE_SIZE

        self.log("DYNAMIC_SELECT", table, {"properties": properties, "where": where, "limit": limit, "offset": offset})
        with self._db_errors("select records", table):
            rows = self.db.select(
                table,
                columns=properties or None,
                where=where,
                order_by=order_pairs,
                limit=limit,
                offset=offset,
            )
        return rows, len(rows)

    @require_connection
    def create(self, table: str, properties: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert one row; returns the inserted row."""
        if not table or properties is None:
            raise InvalidRequestError("Missing required parameters: table, properties")
        self.validate_table(table)
        self.validate_columns(table, list(properties.keys()))

        self.log("DYNAMIC_CREATE", table, {"properties": properties})
        with self._db_errors("create record", table):
            return self.db.insert(table, dict(properties))

    @require_connection
    def update(self, table: str, uid: str, properties: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Update one row by uid.

        Raises:
            RecordNotFoundError: If no row has that uid
        """
        if not table or not uid or properties is None:
            raise InvalidRequestError("Missing required parameters: table, uid, properties")
        self.validate_table(table)
        self.validate_columns(table, list(properties.keys()))
        if not properties:
            raise InvalidRequestError("No properties to update")

        self.log("DYNAMIC_UPDATE", table, {"uid": uid, "properties": properties})
        with self._db_errors("update record", table, {"uid": uid}):
            rows = self.db.update(table, dict(properties), {"uid": uid})
        if not rows:
            raise RecordNotFoundError("Record not found")
        return rows[0]

    @require_connection
    def delete(self, table: str, uid: str) -> int:
        """
        Delete one row by uid.

        Rows of entity tables are deleted with their dependents (see
        BaseRepository.delete_entity_row); other rows are deleted on their own.

        Returns:
            Number of rows deleted

        Raises:
            RecordNotFoundError: If no row has that uid
            CascadeDeleteError: If clearing dependent rows fails part way
        """
        if not table or not uid:
            raise InvalidRequestError("Missing required parameters: table, uid")
        self.validate_table(table)

        with self._db_errors("fetch record", table, {"uid": uid}):
            existing = self.db.select_one(table, {"uid": uid}, columns=["uid"])
        if existing is None:
            raise RecordNotFoundError("Record not found")

        self.log("DYNAMIC_DELETE", table, {"uid": uid})
        entity_mapping = find_entity_mapping_by_table(table)
        if entity_mapping is not None:
            deleted = self.delete_entity_row(entity_mapping, uid)
        else:
            with self._db_errors("delete record", table, {"uid": uid}):
                deleted = self.db.delete(table, {"uid": uid})

        self.log("DYNAMIC_DELETE_SUCCESS", table, {"uid": uid, "rowsAffected": deleted})
        return deleted
