"""
Database Connection Manager

Provides PostgreSQL connection management using psycopg2, plus the small set
of table-level statements (select / insert / update / delete / distinct) the
repositories are built on.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import psycopg2
from psycopg2 import sql
from psycopg2.extras import Json, RealDictCursor

from drugbot.database.sql_builder import (
    OrderBy,
    Search,
    build_assignments,
    build_columns,
    build_limit_offset,
    build_order_by,
    build_where,
)
from drugbot.utils.config import get_settings

logger = logging.getLogger(__name__)


def _adapt_value(value: Any) -> Any:
    """Wrap dicts/lists so psycopg2 sends them as JSON."""
    if isinstance(value, (dict, list)):
        return Json(value)
    return value


class DatabaseConnection:
    """
    Database connection manager for the DrugBot database.

    Usage:
        with DatabaseConnection() as db:
            rows = db.select("generic_drugs", order_by={"generic_name": "asc"})
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Hold the connection string; nothing is opened until connect().

        Args:
            database_url: PostgreSQL connection string.
                         Defaults to the configured DRUG_DATABASE_URL.
        """
        self.database_url = database_url or get_settings().drug_database_url
        if not self.database_url:
            raise ValueError(
                "No database configured: set DRUG_DATABASE_URL (or SUPABASE_DB_URL) "
                "or pass database_url explicitly"
            )
        self.connection: Optional[psycopg2.extensions.connection] = None

    def connect(self) -> None:
        """Open a new psycopg2 connection."""
        try:
            self.connection = psycopg2.connect(self.database_url)
            logger.info("Connected to DrugBot database")
        except Exception as e:
            logger.error(f"Could not connect to DrugBot database: {e}")
            raise

    def close(self) -> None:
        """Close the connection if one is open."""
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("Closed DrugBot database connection")

    def is_connected(self) -> bool:
        """Ping the server with SELECT 1."""
        if not self.connection:
            return False
        try:
            with self.connection.cursor() as cur:
                cur.execute("SELECT 1")
            return True
        except psycopg2.Error:
            return False

    def ensure_connected(self) -> None:
        """Reconnect when the connection dropped."""
        if not self.is_connected():
            self.connect()

    @contextmanager
    def cursor(self, dict_cursor: bool = True):
        """
        Yield a cursor that is closed on exit.

        Args:
            dict_cursor: Use RealDictCursor so rows come back keyed by column

        Yields:
            Database cursor
        """
        self.ensure_connected()
        cursor_factory = RealDictCursor if dict_cursor else None
        cursor = self.connection.cursor(cursor_factory=cursor_factory)
        try:
            yield cursor
        finally:
            cursor.close()

    def commit(self) -> None:
        """Commit the open transaction."""
        if self.connection:
            self.connection.commit()

    def rollback(self) -> None:
        """Roll back the open transaction."""
        if self.connection:
            self.connection.rollback()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # =========================================================================
    # STATEMENT EXECUTION
    # =========================================================================

    def _run(self, query: sql.Composable, params: Sequence[Any] = (), fetch: str = "all", commit: bool = False) -> Any:
        """
        Execute a composed statement.

        Every write commits on its own; a failed statement is rolled back so
        the connection stays usable for the next one.

        Args:
            query: Composed SQL
            params: Query parameters
            fetch: "all", "one" or "rowcount"
            commit: Commit after executing

        Returns:
            Rows as dicts, a single dict (or None), or the affected row count
        """
        try:
            with self.cursor() as cur:
                cur.execute(query, list(params))
                if fetch == "all":
                    result = [dict(row) for row in cur.fetchall()]
                elif fetch == "one":
                    row = cur.fetchone()
                    result = dict(row) if row else None
                else:
                    result = cur.rowcount
            if commit:
                self.commit()
            return result
        except psycopg2.Error as e:
            logger.error(f"Statement failed: {e}")
            self.rollback()
            raise

    # =========================================================================
    # TABLE OPERATIONS
    # =========================================================================

    def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        where: Optional[Mapping[str, Any]] = None,
        order_by: OrderBy = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        search: Search = None,
    ) -> List[Dict[str, Any]]:
        """
        Select rows from a table.

        Args:
            table: Table name
            columns: Columns to return (all when omitted)
            where: Column -> value equality filters
            order_by: Column name, {column: direction} or [(column, direction)]
            limit: Maximum rows
            offset: Rows to skip
            search: (term, columns) case-insensitive substring search

        Returns:
            List of row dicts
        """
        where_clause, params = build_where(where, search)
        page_clause, page_params = build_limit_offset(limit, offset)
        query = (
            sql.SQL("SELECT {} FROM {}").format(build_columns(columns), sql.Identifier(table))
            + where_clause
            + build_order_by(order_by)
            + page_clause
        )
        return self._run(query, params + page_params)

    def select_one(
        self,
        table: str,
        where: Mapping[str, Any],
        columns: Optional[Sequence[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Select the first row matching the filters, or None."""
        rows = self.select(table, columns=columns, where=where, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert one row.

        Returns:
            The inserted row (RETURNING *)
        """
        columns = list(values.keys())
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            sql.Identifier(table),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        return self._run(query, [_adapt_value(values[c]) for c in columns], fetch="one", commit=True)

    def update(self, table: str, values: Mapping[str, Any], where: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        Update rows matching the filters.

        Returns:
            The updated rows (RETURNING *)
        """
        where_clause, where_params = build_where(where)
        query = (
            sql.SQL("UPDATE {} SET ").format(sql.Identifier(table))
            + build_assignments(dict(values))
            + where_clause
            + sql.SQL(" RETURNING *")
        )
        params = [_adapt_value(v) for v in values.values()] + where_params
        return self._run(query, params, fetch="all", commit=True)

    def delete(self, table: str, where: Mapping[str, Any]) -> int:
        """
        Delete rows matching the filters.

        Returns:
            Number of deleted rows
        """
        if not where:
            raise ValueError("Refusing to delete without a filter")
        where_clause, params = build_where(where)
        query = sql.SQL("DELETE FROM {}").format(sql.Identifier(table)) + where_clause
        return self._run(query, params, fetch="rowcount", commit=True)

    def select_distinct(
        self,
        table: str,
        columns: Sequence[str],
        filters: Optional[Mapping[str, Any]] = None,
        order_by: OrderBy = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Distinct combinations of the given columns.

        Filters compare the column's text representation against the value
        (or any of the values when a list is given).

        Returns:
            (page of distinct rows, total number of distinct rows)
        """
        where_clause, params = build_where(filters, cast_text=True)
        distinct = (
            sql.SQL("SELECT DISTINCT {} FROM {}").format(build_columns(columns), sql.Identifier(table))
            + where_clause
        )
        page_clause, page_params = build_limit_offset(limit, offset)

        rows = self._run(distinct + build_order_by(order_by) + page_clause, params + page_params)
        count_query = sql.SQL("SELECT COUNT(*) AS total FROM (") + distinct + sql.SQL(") AS distinct_rows")
        total_row = self._run(count_query, params, fetch="one")
        return rows, int(total_row["total"]) if total_row else 0

    def distinct_values(self, table: str, column: str) -> List[str]:
        """
        Distinct non-null values of a column as text, sorted.
        """
        query = sql.SQL(
            "SELECT DISTINCT {col}::text AS value FROM {table} WHERE {col} IS NOT NULL ORDER BY 1"
        ).format(col=sql.Identifier(column), table=sql.Identifier(table))
        return [row["value"] for row in self._run(query)]
