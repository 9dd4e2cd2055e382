"""
Base repository with common database operations.

Provides operation logging, business-key generation and the conversion
between database rows and UI property lists driven by the model map.
"""

import json
import logging
import random
import string
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import psycopg2

from drugbot.database.connection import DatabaseConnection
from drugbot.definitions.model_map import get_entity_aggregate_mappings
from drugbot.definitions.ui_model import THE_UI_MODEL
from drugbot.exceptions import CascadeDeleteError, RepositoryError
from drugbot.models.model_map import EntityMapping, PropertyMapping
from drugbot.models.ui_model import UIEntity, UIEntityRef, UIModel, UIProperty, UIPropertyMeta
from drugbot.utils.transforms import apply_transform

logger = logging.getLogger(__name__)

RELATIONSHIPS_TABLE = "entity_relationships"

_KEY_ALPHABET = string.digits + string.ascii_lowercase


def require_connection(f: Callable) -> Callable:
    """Decorator to ensure database connection before method execution."""
    @wraps(f)
    def wrapper(self, *args, **kwargs):
        self.db.ensure_connected()
        return f(self, *args, **kwargs)
    return wrapper


class BaseRepository:
    """
    Base repository providing common database operations.

    All specific repositories (entities, children, aggregates, reports)
    inherit from this.
    """

    def __init__(self, db: DatabaseConnection, ui_model: UIModel = THE_UI_MODEL):
        """
        Initialize repository with database connection.

        Args:
            db: DatabaseConnection instance (shared across repositories)
            ui_model: UI model used to shape rows into UI objects
        """
        self.db = db
        self.ui_model = ui_model

    # =========================================================================
    # LOGGING / ERRORS
    # =========================================================================

    def log(self, operation: str, entity_type: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log a repository operation with its details as JSON."""
        payload = json.dumps(details or {}, default=str)
        logger.info(f"{operation} [{entity_type}] {payload}")

    @contextmanager
    def _db_errors(self, action: str, entity_type: str, details: Optional[Dict[str, Any]] = None):
        """
        Translate driver errors into RepositoryError("Failed to <action>: ...").
        """
        try:
            yield
        except psycopg2.Error as e:
            self.log(f"{action.upper().replace(' ', '_')}_ERROR", entity_type, {**(details or {}), "error": str(e)})
            raise RepositoryError(f"Failed to {action}: {e}") from e

    # =========================================================================
    # KEYS
    # =========================================================================

    def generate_key(self, prefix: str) -> str:
        """
        Generate a business key: ``<prefix>_<epoch millis>_<9 base36 chars>``.
        """
        suffix = "".join(random.choices(_KEY_ALPHABET, k=9))
        key = f"{prefix}_{int(time.time() * 1000)}_{suffix}"
        self.log("GENERATE_KEY", prefix, {"generatedKey": key})
        return key

    # =========================================================================
    # ROW <-> UI PROPERTY CONVERSION
    # =========================================================================

    def create_properties_array(
        self,
        property_defs: Sequence[UIPropertyMeta],
        row: Dict[str, Any],
        property_mappings: Sequence[PropertyMapping],
    ) -> List[UIProperty]:
        """
        Build UI properties for one row, sorted by ordinal.

        Values come from the mapped column with any ``from_db`` transform
        applied. A property with no mapping gets a None value and a warning.
        """
        by_name = {m.property_name: m for m in property_mappings}
        properties = []

        for prop_def in sorted(property_defs, key=lambda p: p.ordinal):
            mapping = by_name.get(prop_def.property_name)
            if mapping is None:
                logger.warning(f"No property mapping for '{prop_def.property_name}'")
                value = None
            else:
                value = row.get(mapping.field_name)
                if mapping.transform and mapping.transform.from_db:
                    value = apply_transform(mapping.transform.from_db, value)
            properties.append(UIProperty(**prop_def.model_dump(), property_value=value))

        return properties

    def to_db_values(
        self,
        values: Dict[str, Any],
        property_mappings: Sequence[PropertyMapping],
        exclude: Iterable[str] = (),
    ) -> Dict[str, Any]:
        """
        Convert UI property values to column values.

        Applies ``to_db`` transforms; computed, unmapped and excluded
        properties are dropped.
        """
        excluded = set(exclude)
        columns: Dict[str, Any] = {}

        for mapping in property_mappings:
            if mapping.is_computed or mapping.property_name in excluded:
                continue
            if mapping.property_name not in values:
                continue
            value = values[mapping.property_name]
            if mapping.transform and mapping.transform.to_db:
                value = apply_transform(mapping.transform.to_db, value)
            columns[mapping.field_name] = value

        unknown = set(values) - {m.property_name for m in property_mappings}
        if unknown:
            logger.warning(f"Ignoring unmapped properties: {sorted(unknown)}")
        return columns

    def to_ui_entity(
        self,
        mapping: EntityMapping,
        row: Dict[str, Any],
        ancestors: Optional[List[UIEntityRef]] = None,
        children: Optional[List[UIEntityRef]] = None,
    ) -> UIEntity:
        """Shape one entity row into a UIEntity."""
        meta = self.ui_model.get_entity(mapping.ui_entity_type)
        property_defs = meta.property_defs if meta else []
        return UIEntity(
            entity_type=mapping.ui_entity_type,
            entity_uid=str(row["uid"]),
            display_name=row.get(mapping.display_name_field) or "",
            plural_name=meta.plural_name if meta else mapping.ui_entity_type,
            property_defs=property_defs,
            aggregate_refs=meta.aggregate_refs if meta else [],
            properties=self.create_properties_array(property_defs, row, mapping.property_mappings),
            ancestors=ancestors or [],
            children=children or [],
        )

    @staticmethod
    def to_entity_ref(mapping: EntityMapping, row: Dict[str, Any], **kwargs) -> UIEntityRef:
        return UIEntityRef(
            entity_uid=str(row["uid"]),
            display_name=row.get(mapping.display_name_field) or "",
            **kwargs,
        )

    # =========================================================================
    # CASCADING DELETE
    # =========================================================================

    @require_connection
    def delete_entity_row(self, mapping: EntityMapping, uid: str) -> int:
        """
        Delete an entity row together with everything that references it.

        Order: every aggregate table row whose parent key is ``uid``, then
        relationship rows naming ``uid`` as ancestor or child, then the row
        itself. Each statement commits on its own, so a failure part way
        through leaves the earlier deletions in place.

        Returns:
            Number of entity rows deleted

        Raises:
            CascadeDeleteError: If clearing an aggregate table fails
            RepositoryError: If deleting the entity row fails
        """
        cleared: List[str] = []
        for aggregate in get_entity_aggregate_mappings(mapping.entity_type):
            if aggregate.table_name == mapping.table_name or aggregate.table_name in cleared:
                continue
            try:
                deleted = self.db.delete(aggregate.table_name, {aggregate.parent_key_field: uid})
            except psycopg2.Error as e:
                self.log("CASCADE_DELETE_ERROR", mapping.entity_type, {
                    "uid": uid, "table": aggregate.table_name, "error": str(e),
                })
                raise CascadeDeleteError(aggregate.table_name, cleared, cause=e) from e
            cleared.append(aggregate.table_name)
            self.log("CASCADE_DELETE", mapping.entity_type, {
                "uid": uid, "table": aggregate.table_name, "rowsDeleted": deleted,
            })

        self.delete_relationships(uid)

        with self._db_errors("delete record", mapping.entity_type, {"uid": uid}):
            return self.db.delete(mapping.table_name, {"uid": uid})

    def delete_relationships(self, uid: str, as_ancestor: bool = True) -> None:
        """
        Remove relationship rows naming ``uid``. Failures are logged and the
        delete carries on.
        """
        columns = ["ancestor_uid", "child_uid"] if as_ancestor else ["child_uid"]
        for column in columns:
            try:
                self.db.delete(RELATIONSHIPS_TABLE, {column: uid})
            except psycopg2.Error as e:
                logger.warning(f"Failed to delete relationships where {column}={uid}: {e}")
