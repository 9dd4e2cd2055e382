"""
Repository for aggregates: one-to-many child collections of an entity
(aliases, routes, approvals, manufactured drugs).
"""

import logging
from typing import Any, Dict, List, Optional

from drugbot.definitions.model_map import (
    find_entity_mapping_by_table,
    get_entity_aggregate_types,
    require_aggregate_mapping,
)
from drugbot.models.model_map import AggregateMapping
from drugbot.models.ui_model import UIAggregate, UIAggregateMeta, UIPropertyMeta
from drugbot.repositories.base import BaseRepository, require_connection

logger = logging.getLogger(__name__)

# Row order per aggregate; anything not listed is ordered by uid
AGGREGATE_ORDER: Dict[str, Dict[str, str]] = {
    "GenericAlias": {"alias": "asc"},
    "GenericApproval": {"approval_date": "desc"},
    "GenericRoute": {"route_type": "asc"},
    "GenericManuDrugs": {"drug_name": "asc"},
}


class AggregateRepository(BaseRepository):
    """
    Load and modify aggregate rows by parent entity uid.

    Usage:
        repo = AggregateRepository(db)
        aliases = repo.get_aggregate_by_entity_uid(drug_uid, "GenericAlias")
        repo.create_aggregate_record_by_entity_uid("GenericAlias", drug_uid, {"alias": "Humira"})
    """

    def _meta(self, mapping: AggregateMapping) -> UIAggregateMeta:
        meta = self.ui_model.get_aggregate(mapping.aggregate_type)
        if meta is not None:
            return meta
        # Aggregates with no UI definition show every mapped column as text
        return UIAggregateMeta(
            aggregate_type=mapping.aggregate_type,
            display_name=mapping.aggregate_type,
            property_defs=[
                UIPropertyMeta(property_name=m.property_name, display_name=m.property_name, ordinal=i)
                for i, m in enumerate(mapping.property_mappings, start=1)
            ],
        )

    def _order(self, aggregate_type: str) -> Dict[str, str]:
        return AGGREGATE_ORDER.get(aggregate_type, {"uid": "asc"})

    # =========================================================================
    # READ
    # =========================================================================

    @require_connection
    def get_aggregate_by_entity_uid(self, entity_uid: str, aggregate_type: str) -> UIAggregate:
        """
        Load one aggregate for an entity.

        Args:
            entity_uid: uid of the parent entity row
            aggregate_type: Aggregate type (e.g. "GenericRoute")

        Returns:
            UIAggregate with one property list per row (possibly empty)

        Raises:
            UnknownAggregateTypeError: If the aggregate type is not mapped
        """
        mapping = require_aggregate_mapping(aggregate_type)
        self.log("GET_AGGREGATE", aggregate_type, {"entityUid": entity_uid})

        with self._db_errors("fetch aggregate", aggregate_type, {"entityUid": entity_uid}):
            rows = self.db.select(
                mapping.table_name,
                where={mapping.parent_key_field: entity_uid},
                order_by=self._order(aggregate_type),
            )

        meta = self._meta(mapping)
        aggregate = UIAggregate(
            **meta.model_dump(),
            entity_uid=entity_uid,
            rows=[self.create_properties_array(meta.property_defs, row, mapping.property_mappings) for row in rows],
        )
        self.log("GET_AGGREGATE_SUCCESS", aggregate_type, {"entityUid": entity_uid, "rowCount": len(rows)})
        return aggregate

    def get_entity_aggregates(self, entity_uid: str, entity_type: str = "generic_drugs") -> List[UIAggregate]:
        """Every mapped aggregate of an entity, in the mapping's reference order."""
        return [
            self.get_aggregate_by_entity_uid(entity_uid, aggregate_type)
            for aggregate_type in get_entity_aggregate_types(entity_type)
        ]

    @require_connection
    def get_all_aggregate_rows(self, aggregate_type: str) -> List[Dict[str, Any]]:
        """Raw rows of an aggregate table across all entities."""
        mapping = require_aggregate_mapping(aggregate_type)
        with self._db_errors("fetch aggregates", aggregate_type):
            return self.db.select(mapping.table_name, order_by=self._order(aggregate_type))

    # =========================================================================
    # WRITE
    # =========================================================================

    @require_connection
    def create_aggregate_record_by_entity_uid(
        self, aggregate_type: str, entity_uid: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Insert one aggregate row under an entity.

        The parent key column is always set to ``entity_uid``. When the
        aggregate table is itself an entity table (manufactured drugs), a
        business key is generated if none was given.

        Returns:
            The inserted row
        """
        mapping = require_aggregate_mapping(aggregate_type)
        self.log("CREATE_AGGREGATE", aggregate_type, {"entityUid": entity_uid, "data": data})

        columns = self.to_db_values(data, mapping.property_mappings, exclude=("uid", mapping.parent_key_field))
        columns[mapping.parent_key_field] = entity_uid

        entity_mapping = find_entity_mapping_by_table(mapping.table_name)
        if entity_mapping and not columns.get(entity_mapping.key_field):
            columns[entity_mapping.key_field] = self.generate_key(entity_mapping.key_prefix or entity_mapping.entity_type)

        with self._db_errors("create aggregate record", aggregate_type, {"entityUid": entity_uid}):
            row = self.db.insert(mapping.table_name, columns)

        self.log("CREATE_AGGREGATE_SUCCESS", aggregate_type, {"uid": row["uid"]})
        return row

    @require_connection
    def update_aggregate_record(
        self, aggregate_type: str, record_uid: str, data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Update one aggregate row by its uid. The parent key is never changed.

        Returns:
            Updated row, or None if no row has that uid
        """
        mapping = require_aggregate_mapping(aggregate_type)
        self.log("UPDATE_AGGREGATE", aggregate_type, {"uid": record_uid, "data": data})

        columns = self.to_db_values(data, mapping.property_mappings, exclude=("uid", mapping.parent_key_field))
        with self._db_errors("update aggregate record", aggregate_type, {"uid": record_uid}):
            if not columns:
                return self.db.select_one(mapping.table_name, {"uid": record_uid})
            rows = self.db.update(mapping.table_name, columns, {"uid": record_uid})
        return rows[0] if rows else None

    @require_connection
    def delete_aggregate_record(self, aggregate_type: str, record_uid: str) -> bool:
        mapping = require_aggregate_mapping(aggregate_type)
        self.log("DELETE_AGGREGATE", aggregate_type, {"uid": record_uid})
        with self._db_errors("delete aggregate record", aggregate_type, {"uid": record_uid}):
            return self.db.delete(mapping.table_name, {"uid": record_uid}) > 0
