"""
Repository for select lists: named, ordered pick lists used by report
filters and entity forms.

Select lists are shared; any authenticated user may read or change any of
them. Items are ``{"text", "code", "ordinal"}`` dicts, and ordinals always
follow list order.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from drugbot.exceptions import InvalidRequestError
from drugbot.repositories.base import BaseRepository, require_connection

logger = logging.getLogger(__name__)

SELECT_LISTS_TABLE = "select_lists"

SELECT_LIST_COLUMNS = ("uid", "name", "display_name", "items", "created_at", "updated_at")

UPDATABLE_FIELDS = ("name", "display_name", "items")


def number_items(items: Optional[Sequence[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Copy items with ``ordinal`` set to each item's position.

    Raises:
        InvalidRequestError: If an item is not an object
    """
    numbered = []
    for position, item in enumerate(items or []):
        if not isinstance(item, Mapping):
            raise InvalidRequestError("Select list items must be objects")
        numbered.append({
            "text": item.get("text", ""),
            "code": item.get("code", ""),
            "ordinal": position,
        })
    return numbered


class SelectListRepository(BaseRepository):
    """CRUD for the ``select_lists`` table."""

    @require_connection
    def list_select_lists(self) -> List[Dict[str, Any]]:
        """All select lists, newest first."""
        with self._db_errors("fetch select lists", SELECT_LISTS_TABLE):
            return self.db.select(SELECT_LISTS_TABLE, SELECT_LIST_COLUMNS, order_by={"created_at": "desc"})

    @require_connection
    def create_select_list(
        self,
        name: Optional[str],
        display_name: Optional[str],
        items: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> Dict[str, Any]:
        if not name or not display_name:
            raise InvalidRequestError("Missing required fields")
        self.log("CREATE_SELECT_LIST", SELECT_LISTS_TABLE, {"name": name})
        with self._db_errors("create select list", SELECT_LISTS_TABLE, {"name": name}):
            return self.db.insert(SELECT_LISTS_TABLE, {
                "name": name,
                "display_name": display_name,
                "items": number_items(items),
            })

    @require_connection
    def update_select_list(self, uid: Optional[str], changes: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update a select list. Fields missing from ``changes`` (or None) keep
        their stored value; a new ``items`` list replaces the old one.

        Returns:
            Updated select list, or None when no list has that uid
        """
        if not uid:
            raise InvalidRequestError("Select list UID is required")
        values = {k: changes[k] for k in UPDATABLE_FIELDS if changes.get(k) is not None}
        if "items" in values:
            values["items"] = number_items(values["items"])
        values["updated_at"] = datetime.now(timezone.utc)

        self.log("UPDATE_SELECT_LIST", SELECT_LISTS_TABLE, {"uid": uid, "fields": sorted(values)})
        with self._db_errors("update select list", SELECT_LISTS_TABLE, {"uid": uid}):
            rows = self.db.update(SELECT_LISTS_TABLE, values, {"uid": uid})
        return rows[0] if rows else None

    @require_connection
    def delete_select_list(self, uid: Optional[str]) -> int:
        """Delete a select list; returns the number of rows removed."""
        if not uid:
            raise InvalidRequestError("Select list UID is required")
        self.log("DELETE_SELECT_LIST", SELECT_LISTS_TABLE, {"uid": uid})
        with self._db_errors("delete select list", SELECT_LISTS_TABLE, {"uid": uid}):
            return self.db.delete(SELECT_LISTS_TABLE, {"uid": uid})
