"""
Shared fixtures.

``InMemoryDatabase`` implements the table-level primitives of
``DatabaseConnection`` over plain dicts, so repositories and the API can be
exercised without PostgreSQL. Any (operation, table) pair can be made to fail
with a driver error to exercise partial-failure paths.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import psycopg2
import pytest

from drugbot.database.sql_builder import normalize_order_by
from drugbot.utils.config import get_settings


def _matches(value: Any, expected: Any, as_text: bool = False) -> bool:
    if as_text:
        text = None if value is None else str(value)
        if isinstance(expected, (list, tuple, set)):
            return text in {str(v) for v in expected}
        return text == str(expected)
    if expected is None:
        return value is None
    if isinstance(expected, (list, tuple, set)):
        return any(_matches(value, v) for v in expected)
    return value == expected or (value is not None and str(value) == str(expected))


def _sort_key(value: Any) -> Tuple[bool, str]:
    return (value is None, "" if value is None else str(value))


class InMemoryDatabase:
    """Dict-backed stand-in for DatabaseConnection."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: list(rows) for name, rows in (tables or {}).items()}
        self.calls: List[Tuple[str, str]] = []
        self._failures: Dict[Tuple[str, str], Exception] = {}
        self.closed = False

    # -- test helpers -------------------------------------------------------

    def fail_on(self, operation: str, table: str, message: str = "simulated failure") -> None:
        self._failures[(operation, table)] = psycopg2.OperationalError(message)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def _record(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        failure = self._failures.get((operation, table))
        if failure is not None:
            raise failure

    def _filter(self, table: str, where: Optional[Mapping[str, Any]], as_text: bool = False) -> List[Dict[str, Any]]:
        return [
            row for row in self.rows(table)
            if all(_matches(row.get(c), v, as_text) for c, v in (where or {}).items())
        ]

    @staticmethod
    def _order(rows: List[Dict[str, Any]], order_by: Any) -> List[Dict[str, Any]]:
        for column, direction in reversed(normalize_order_by(order_by)):
            rows = sorted(rows, key=lambda r: _sort_key(r.get(column)), reverse=direction == "desc")
        return rows

    @staticmethod
    def _page(rows: List[Any], limit: Optional[int], offset: Optional[int]) -> List[Any]:
        start = offset or 0
        return rows[start:start + limit] if limit is not None else rows[start:]

    # -- DatabaseConnection primitives --------------------------------------

    def ensure_connected(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Any = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        search: Optional[Tuple[str, Sequence[str]]] = None,
    ) -> List[Dict[str, Any]]:
        self._record("select", table)
        rows = self._filter(table, where)
        if search:
            term, fields = search
            rows = [r for r in rows if any(term.lower() in str(r.get(f) or "").lower() for f in fields)]
        rows = self._page(self._order(rows, order_by), limit, offset)
        if columns:
            return [{c: r.get(c) for c in columns} for r in rows]
        return [dict(r) for r in rows]

    def select_one(self, table: str, where: Mapping[str, Any], columns: Optional[Sequence[str]] = None):
        rows = self.select(table, columns=columns, where=where, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        self._record("insert", table)
        row = dict(values)
        row.setdefault("uid", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc))
        self.rows(table).append(row)
        return dict(row)

    def update(self, table: str, values: Mapping[str, Any], where: Mapping[str, Any]) -> List[Dict[str, Any]]:
        self._record("update", table)
        updated = []
        for row in self._filter(table, where):
            row.update(values)
            updated.append(dict(row))
        return updated

    def delete(self, table: str, where: Mapping[str, Any]) -> int:
        if not where:
            raise ValueError("Refusing to delete without a filter")
        self._record("delete", table)
        doomed = self._filter(table, where)
        self.tables[table] = [r for r in self.rows(table) if not any(r is d for d in doomed)]
        return len(doomed)

    def select_distinct(
        self,
        table: str,
        columns: Sequence[str],
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Any = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        self._record("select_distinct", table)
        seen = []
        for row in self._filter(table, filters, as_text=True):
            projected = {c: row.get(c) for c in columns}
            if projected not in seen:
                seen.append(projected)
        ordered = self._order(seen, order_by)
        return [dict(r) for r in self._page(ordered, limit, offset)], len(seen)

    def distinct_values(self, table: str, column: str) -> List[str]:
        self._record("distinct_values", table)
        return sorted({str(r[column]) for r in self.rows(table) if r.get(column) is not None})


# =============================================================================
# FIXTURES
# =============================================================================

GENERIC_UID = "7f1c9a52-0000-4000-8000-000000000001"
OTHER_GENERIC_UID = "7f1c9a52-0000-4000-8000-000000000002"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Settings built from a clean environment for every test."""
    for name in ("DRUG_DATABASE_URL", "SUPABASE_DB_URL", "DATABASE_URL", "LOG_LEVEL", "LOG_FILE", "UPLOAD_DIR", "REPORT_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("drugbot.utils.config._settings", None)
    yield get_settings()
    monkeypatch.setattr("drugbot.utils.config._settings", None)


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def seeded_db() -> InMemoryDatabase:
    """
    Adalimumab with two manufactured drugs, one alias, one route and one
    approval, plus an unrelated generic drug that must survive deletes.
    """
    return InMemoryDatabase({
        "generic_drugs": [
            {
                "uid": GENERIC_UID, "generic_key": "generic_1700000000000_abc123def",
                "generic_name": "adalimumab", "biologic": "Monoclonal antibody",
                "mech_of_action": "TNF-alpha inhibitor", "class_or_type": "TNFi", "target": "TNF",
            },
            {
                "uid": OTHER_GENERIC_UID, "generic_key": "generic_1700000000001_zzz999yyy",
                "generic_name": "tofacitinib", "biologic": "Small molecule",
                "mech_of_action": "JAK inhibitor", "class_or_type": "JAKi", "target": "JAK1/3",
            },
        ],
        "manu_drugs": [
            {
                "uid": "m-1", "manu_drug_key": "manu_1", "generic_uid": GENERIC_UID,
                "drug_name": "Humira", "manufacturer": "AbbVie", "biosimilar": 0,
            },
            {
                "uid": "m-2", "manu_drug_key": "manu_2", "generic_uid": GENERIC_UID,
                "drug_name": "Amjevita", "manufacturer": "Amgen", "biosimilar": 1,
                "biosimilar_suffix": "-atto", "biosimilar_originator": "Humira",
            },
            {
                "uid": "m-3", "manu_drug_key": "manu_3", "generic_uid": OTHER_GENERIC_UID,
                "drug_name": "Xeljanz", "manufacturer": "Pfizer", "biosimilar": 0,
            },
        ],
        "generic_aliases": [
            {"uid": "a-1", "generic_uid": GENERIC_UID, "generic_key": "generic_1700000000000_abc123def", "alias": "D2E7"},
        ],
        "generic_routes": [
            {"uid": "r-1", "route_key": "route_1", "generic_uid": GENERIC_UID, "route_type": "SC",
             "load_dose": "160", "load_measure": "mg"},
        ],
        "generic_approvals": [
            {"uid": "p-1", "generic_uid": GENERIC_UID, "country": "USA",
             "indication": "Rheumatoid arthritis", "approval_date": "2002-12-31"},
            {"uid": "p-2", "generic_uid": OTHER_GENERIC_UID, "country": "USA",
             "indication": "Rheumatoid arthritis", "approval_date": "2012-11-06"},
        ],
        "entity_relationships": [
            {"uid": "e-1", "ancestor_uid": GENERIC_UID, "child_uid": "m-1", "relationship_type": "parent_child"},
            {"uid": "e-2", "ancestor_uid": GENERIC_UID, "child_uid": "m-2", "relationship_type": "parent_child"},
            {"uid": "e-3", "ancestor_uid": OTHER_GENERIC_UID, "child_uid": "m-3", "relationship_type": "parent_child"},
        ],
        "generic_drugs_wide_view": [
            {"generic_uid": GENERIC_UID, "generic_name": "adalimumab", "target": "TNF", "route_type": "SC"},
            {"generic_uid": GENERIC_UID, "generic_name": "adalimumab", "target": "TNF", "route_type": "IV"},
            {"generic_uid": OTHER_GENERIC_UID, "generic_name": "tofacitinib", "target": "JAK1/3", "route_type": "PO"},
            {"generic_uid": "g-3", "generic_name": "etanercept", "target": "TNF", "route_type": "SC"},
            {"generic_uid": "g-4", "generic_name": "baricitinib", "target": None, "route_type": "PO"},
        ],
    })
