"""
Repository for child entities (manufactured drugs under a generic drug).

The parent relation comes from the child's entity mapping
(``parent_entity_type`` / ``parent_key_field``).
"""

import logging
from typing import Any, Dict, List, Optional

import psycopg2

from drugbot.database.connection import DatabaseConnection
from drugbot.definitions.model_map import require_entity_mapping
from drugbot.definitions.ui_model import THE_UI_MODEL
from drugbot.exceptions import ParentEntityNotFoundError
from drugbot.models.ui_model import UIEntity, UIEntityRef, UIModel
from drugbot.repositories.base import RELATIONSHIPS_TABLE, BaseRepository, require_connection

logger = logging.getLogger(__name__)


class ChildEntityRepository(BaseRepository):
    """CRUD for a child entity type; every child carries its parent as sole ancestor."""

    SEARCH_FIELDS = ("drug_name", "manufacturer")

    def __init__(self, db: DatabaseConnection, entity_type: str = "manu_drugs", ui_model: UIModel = THE_UI_MODEL):
        super().__init__(db, ui_model)
        self.mapping = require_entity_mapping(entity_type)
        if not self.mapping.parent_entity_type or not self.mapping.parent_key_field:
            raise ValueError(f"Entity type '{entity_type}' has no parent entity")
        self.parent_mapping = require_entity_mapping(self.mapping.parent_entity_type)
        self.entity_type = entity_type

    def _ancestors(self, row: Dict[str, Any], parent: Optional[Dict[str, Any]] = None) -> List[UIEntityRef]:
        parent_uid = row.get(self.mapping.parent_key_field)
        if parent is None and parent_uid is not None:
            parent = self.db.select_one(self.parent_mapping.table_name, {"uid": parent_uid})
        return [self.to_entity_ref(self.parent_mapping, parent)] if parent else []

    def _to_child(self, row: Dict[str, Any], parent: Optional[Dict[str, Any]] = None) -> UIEntity:
        return self.to_ui_entity(self.mapping, row, ancestors=self._ancestors(row, parent))

    # =========================================================================
    # READ
    # =========================================================================

    @require_connection
    def get_children_by_entity_key(self, parent_key: str) -> List[UIEntity]:
        """
        Children of the parent with business key ``parent_key``.

        Returns:
            Children ordered by display name; empty if the parent does not exist
        """
        self.log("GET_CHILDREN", self.entity_type, {"parentKey": parent_key})
        with self._db_errors("fetch children", self.entity_type, {"parentKey": parent_key}):
            parent = self.db.select_one(self.parent_mapping.table_name, {self.parent_mapping.key_field: parent_key})
            if parent is None:
                return []
            rows = self.db.select(
                self.mapping.table_name,
                where={self.mapping.parent_key_field: parent["uid"]},
                order_by={self.mapping.display_name_field: "asc"},
            )
            return [self._to_child(row, parent) for row in rows]

    @require_connection
    def get_child_by_key(self, child_key: str) -> Optional[UIEntity]:
        self.log("GET_BY_KEY", self.entity_type, {"childKey": child_key})
        with self._db_errors("fetch child entity", self.entity_type, {"childKey": child_key}):
            row = self.db.select_one(self.mapping.table_name, {self.mapping.key_field: child_key})
            return self._to_child(row) if row else None

    @require_connection
    def search_children(self, search_term: str) -> List[UIEntity]:
        """Case-insensitive substring search over brand name and manufacturer."""
        self.log("SEARCH", self.entity_type, {"searchTerm": search_term})
        with self._db_errors("search children", self.entity_type, {"searchTerm": search_term}):
            rows = self.db.select(
                self.mapping.table_name,
                order_by={self.mapping.display_name_field: "asc"},
                search=(search_term, self.SEARCH_FIELDS) if search_term else None,
            )
            return [self._to_child(row) for row in rows]

    # =========================================================================
    # WRITE
    # =========================================================================

    @require_connection
    def create_child_entity(self, parent_entity_key: str, values: Dict[str, Any]) -> UIEntity:
        """
        Create a child under the parent with key ``parent_entity_key`` and
        record the parent/child relationship.

        Raises:
            ParentEntityNotFoundError: If no parent has that key
        """
        self.log("CREATE", self.entity_type, {"parentKey": parent_entity_key, "values": values})
        with self._db_errors("fetch parent entity", self.entity_type, {"parentKey": parent_entity_key}):
            parent = self.db.select_one(
                self.parent_mapping.table_name, {self.parent_mapping.key_field: parent_entity_key}
            )
        if parent is None:
            raise ParentEntityNotFoundError(parent_entity_key)

        columns = self.to_db_values(
            values,
            self.mapping.property_mappings,
            exclude=("uid", self.mapping.key_field, self.mapping.parent_key_field),
        )
        columns[self.mapping.key_field] = self.generate_key(self.mapping.key_prefix or self.entity_type)
        columns[self.mapping.parent_key_field] = parent["uid"]

        with self._db_errors("create child entity", self.entity_type, {"parentKey": parent_entity_key}):
            row = self.db.insert(self.mapping.table_name, columns)

        try:
            self.db.insert(RELATIONSHIPS_TABLE, {
                "ancestor_uid": parent["uid"],
                "child_uid": row["uid"],
                "relationship_type": "parent_child",
            })
        except psycopg2.Error as e:
            logger.warning(f"Created {self.entity_type} {row['uid']} without relationship row: {e}")

        self.log("CREATE_SUCCESS", self.entity_type, {"uid": row["uid"]})
        return self._to_child(row, parent)

    @require_connection
    def update_child_entity(self, child_key: str, values: Dict[str, Any]) -> Optional[UIEntity]:
        """
        Update a child by business key; uid, key and parent are never changed.

        Returns:
            Updated child, or None if no child has that key
        """
        self.log("UPDATE", self.entity_type, {"childKey": child_key, "values": values})
        columns = self.to_db_values(
            values,
            self.mapping.property_mappings,
            exclude=("uid", self.mapping.key_field, self.mapping.parent_key_field),
        )
        if not columns:
            return self.get_child_by_key(child_key)

        with self._db_errors("update child entity", self.entity_type, {"childKey": child_key}):
            rows = self.db.update(self.mapping.table_name, columns, {self.mapping.key_field: child_key})
            return self._to_child(rows[0]) if rows else None

    @require_connection
    def delete_child_entity(self, child_key: str) -> bool:
        """
        Delete a child by business key, removing its relationship rows first.

        Returns:
            True if deleted, False if no child has that key
        """
        self.log("DELETE", self.entity_type, {"childKey": child_key})
        with self._db_errors("fetch child entity", self.entity_type, {"childKey": child_key}):
            row = self.db.select_one(self.mapping.table_name, {self.mapping.key_field: child_key})
        if row is None:
            return False

        self.delete_relationships(row["uid"], as_ancestor=False)
        with self._db_errors("delete child entity", self.entity_type, {"childKey": child_key}):
            deleted = self.db.delete(self.mapping.table_name, {"uid": row["uid"]})
        self.log("DELETE_SUCCESS", self.entity_type, {"childKey": child_key, "rowsAffected": deleted})
        return deleted > 0
