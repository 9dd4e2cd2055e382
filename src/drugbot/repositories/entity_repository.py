"""
Repository for top-level entities (generic drugs by default).
"""

import logging
from typing import Any, Dict, List, Optional

from drugbot.database.connection import DatabaseConnection
from drugbot.definitions.model_map import get_child_entity_mappings, require_entity_mapping
from drugbot.definitions.ui_model import THE_UI_MODEL
from drugbot.models.ui_model import UIEntity, UIEntityRef, UIModel
from drugbot.repositories.base import BaseRepository, require_connection

logger = logging.getLogger(__name__)


class EntityRepository(BaseRepository):
    """
    CRUD for an entity type resolved through the model map.

    Usage:
        repo = EntityRepository(db)
        drugs = repo.search_entities("tnf")
        drug = repo.get_entity_by_key("generic_1712345678901_ab12cd34e")
    """

    SEARCH_FIELDS = ("generic_name", "mech_of_action")

    def __init__(self, db: DatabaseConnection, entity_type: str = "generic_drugs", ui_model: UIModel = THE_UI_MODEL):
        super().__init__(db, ui_model)
        self.mapping = require_entity_mapping(entity_type)
        self.entity_type = entity_type

    @property
    def _order(self) -> Dict[str, str]:
        return {self.mapping.display_name_field: "asc"}

    # =========================================================================
    # READ
    # =========================================================================

    @require_connection
    def get_all_entities(self) -> List[UIEntity]:
        """All entities ordered by display name."""
        self.log("GET_ALL", self.entity_type)
        with self._db_errors("fetch entities", self.entity_type):
            rows = self.db.select(self.mapping.table_name, order_by=self._order)
        self.log("GET_ALL_SUCCESS", self.entity_type, {"recordCount": len(rows)})
        return [self.to_ui_entity(self.mapping, row) for row in rows]

    @require_connection
    def get_entity_by_key(self, entity_key: str) -> Optional[UIEntity]:
        """
        Get an entity by its business key, with child references filled in.

        Returns:
            UIEntity, or None if no entity has that key
        """
        self.log("GET_BY_KEY", self.entity_type, {"entityKey": entity_key})
        with self._db_errors("fetch entity", self.entity_type, {"entityKey": entity_key}):
            row = self.db.select_one(self.mapping.table_name, {self.mapping.key_field: entity_key})
            children = self._child_refs(row) if row else []
        if row is None:
            self.log("GET_BY_KEY_NOT_FOUND", self.entity_type, {"entityKey": entity_key})
            return None
        return self.to_ui_entity(self.mapping, row, children=children)

    @require_connection
    def get_entity_by_uid(self, uid: str) -> Optional[UIEntity]:
        with self._db_errors("fetch entity", self.entity_type, {"uid": uid}):
            row = self.db.select_one(self.mapping.table_name, {"uid": uid})
            return self.to_ui_entity(self.mapping, row, children=self._child_refs(row)) if row else None

    @require_connection
    def search_entities(self, search_term: str) -> List[UIEntity]:
        """
        Case-insensitive substring search over name and mechanism of action.
        An empty term returns every entity.
        """
        self.log("SEARCH", self.entity_type, {"searchTerm": search_term})
        with self._db_errors("search entities", self.entity_type, {"searchTerm": search_term}):
            rows = self.db.select(
                self.mapping.table_name,
                order_by=self._order,
                search=(search_term, self.SEARCH_FIELDS) if search_term else None,
            )
        self.log("SEARCH_SUCCESS", self.entity_type, {"searchTerm": search_term, "matchedRecords": len(rows)})
        return [self.to_ui_entity(self.mapping, row) for row in rows]

    @require_connection
    def get_entity_tree_data(self) -> List[UIEntityRef]:
        """
        Entity references with their child entity references, for tree views.
        """
        with self._db_errors("fetch entity tree", self.entity_type):
            parents = self.db.select(self.mapping.table_name, order_by=self._order)
            tree = [self.to_entity_ref(self.mapping, row, children=self._child_refs(row)) for row in parents]
        self.log("GET_TREE_SUCCESS", self.entity_type, {"entityCount": len(tree)})
        return tree

    def _child_refs(self, row: Dict[str, Any]) -> List[UIEntityRef]:
        refs = []
        parent_ref = self.to_entity_ref(self.mapping, row)
        for child_mapping in get_child_entity_mappings(self.entity_type):
            children = self.db.select(
                child_mapping.table_name,
                where={child_mapping.parent_key_field: row["uid"]},
                order_by={child_mapping.display_name_field: "asc"},
            )
            refs.extend(self.to_entity_ref(child_mapping, child, ancestors=[parent_ref]) for child in children)
        return refs

    # =========================================================================
    # WRITE
    # =========================================================================

    @require_connection
    def create_entity(self, values: Dict[str, Any]) -> UIEntity:
        """
        Create an entity from UI property values. The business key is generated.
        """
        self.log("CREATE", self.entity_type, {"values": values})
        columns = self.to_db_values(values, self.mapping.property_mappings, exclude=("uid", self.mapping.key_field))
        columns[self.mapping.key_field] = self.generate_key(self.mapping.key_prefix or self.entity_type)

        with self._db_errors("create entity", self.entity_type, {"values": values}):
            row = self.db.insert(self.mapping.table_name, columns)

        self.log("CREATE_SUCCESS", self.entity_type, {"uid": row["uid"]})
        return self.to_ui_entity(self.mapping, row)

    @require_connection
    def update_entity(self, entity_key: str, values: Dict[str, Any]) -> Optional[UIEntity]:
        """
        Update an entity by business key. The uid and key are never changed.

        Returns:
            Updated UIEntity, or None if no entity has that key
        """
        self.log("UPDATE", self.entity_type, {"entityKey": entity_key, "values": values})
        columns = self.to_db_values(values, self.mapping.property_mappings, exclude=("uid", self.mapping.key_field))
        if not columns:
            return self.get_entity_by_key(entity_key)

        with self._db_errors("update entity", self.entity_type, {"entityKey": entity_key}):
            rows = self.db.update(self.mapping.table_name, columns, {self.mapping.key_field: entity_key})

        if not rows:
            self.log("UPDATE_NOT_FOUND", self.entity_type, {"entityKey": entity_key})
            return None
        return self.to_ui_entity(self.mapping, rows[0])

    @require_connection
    def delete_entity(self, entity_key: str) -> bool:
        """
        Delete an entity and everything referencing it.

        Returns:
            True if deleted, False if no entity has that key

        Raises:
            CascadeDeleteError: If clearing dependent rows fails part way
        """
        self.log("DELETE", self.entity_type, {"entityKey": entity_key})
        with self._db_errors("fetch entity", self.entity_type, {"entityKey": entity_key}):
            row = self.db.select_one(self.mapping.table_name, {self.mapping.key_field: entity_key})
        if row is None:
            return False

        deleted = self.delete_entity_row(self.mapping, row["uid"])
        self.log("DELETE_SUCCESS", self.entity_type, {"entityKey": entity_key, "rowsAffected": deleted})
        return deleted > 0
