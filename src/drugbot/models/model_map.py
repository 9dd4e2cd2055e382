"""
Model map types.

A model map links the property names the UI works with to the tables and
columns they live in. Entities are top-level records (one row per entity);
aggregates are one-to-many child collections hanging off an entity through a
parent key column.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class PropertyTransform:
    """Named value transforms applied when reading from / writing to the database."""
    from_db: Optional[str] = None
    to_db: Optional[str] = None
    params: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class PropertyMapping:
    """Maps one UI property to a table column."""
    property_name: str
    table_name: str
    field_name: str
    is_computed: bool = False
    transform: Optional[PropertyTransform] = None


@dataclass(frozen=True)
class EntityMapping:
    """
    Maps a UI entity to its table, key field and aggregates.

    Child entities (e.g. manufactured drugs under a generic drug) name their
    parent entity type and the column holding the parent's uid.
    """
    entity_type: str
    ui_entity_type: str
    table_name: str
    key_field: str
    display_name_field: str
    property_mappings: Tuple[PropertyMapping, ...] = ()
    aggregate_references: Tuple[str, ...] = ()
    key_prefix: Optional[str] = None
    parent_entity_type: Optional[str] = None
    parent_key_field: Optional[str] = None


@dataclass(frozen=True)
class AggregateMapping:
    """Maps a UI aggregate to its table and the column pointing at the parent entity."""
    aggregate_type: str
    table_name: str
    parent_key_field: str
    property_mappings: Tuple[PropertyMapping, ...] = ()


@dataclass(frozen=True)
class AggregateQueryInfo:
    aggregate_type: str
    table_name: str
    parent_key_field: str


@dataclass(frozen=True)
class EntityQueryInfo:
    """Everything needed to load an entity together with all of its aggregates."""
    entity_table: str
    entity_key_field: str
    entity_display_field: str
    aggregates: Tuple[AggregateQueryInfo, ...]
    all_tables: Tuple[str, ...]


@dataclass(frozen=True)
class ModelMap:
    """Complete model map: entity and aggregate mappings keyed by type."""
    name: str
    version: str
    entity_mappings: Dict[str, EntityMapping] = field(default_factory=dict)
    aggregate_mappings: Dict[str, AggregateMapping] = field(default_factory=dict)


# =============================================================================
# TYPE CHECKS
# =============================================================================

def is_property_mapping(obj: Any) -> bool:
    """Check whether an object is a PropertyMapping (or a dict shaped like one)."""
    if isinstance(obj, PropertyMapping):
        return True
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("propertyName"), str)
        and isinstance(obj.get("tableName"), str)
        and isinstance(obj.get("fieldName"), str)
        and isinstance(obj.get("isComputed"), bool)
    )


def is_entity_mapping(obj: Any) -> bool:
    """Check whether an object is an EntityMapping (or a dict shaped like one)."""
    if isinstance(obj, EntityMapping):
        return True
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("entityType"), str)
        and isinstance(obj.get("tableName"), str)
        and isinstance(obj.get("keyField"), str)
        and isinstance(obj.get("displayNameField"), str)
        and isinstance(obj.get("propertyMappings"), list)
        and isinstance(obj.get("aggregateReferences"), list)
    )


def is_aggregate_mapping(obj: Any) -> bool:
    """Check whether an object is an AggregateMapping (or a dict shaped like one)."""
    if isinstance(obj, AggregateMapping):
        return True
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("aggregateType"), str)
        and isinstance(obj.get("tableName"), str)
        and isinstance(obj.get("parentKeyField"), str)
        and isinstance(obj.get("propertyMappings"), list)
    )


def is_model_map(obj: Any) -> bool:
    if isinstance(obj, ModelMap):
        return True
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("name"), str)
        and isinstance(obj.get("version"), str)
        and isinstance(obj.get("entityMappings"), dict)
        and isinstance(obj.get("aggregateMappings"), dict)
    )


# =============================================================================
# LOOKUPS OVER AN ARBITRARY MODEL MAP
# =============================================================================

def find_property_mapping(entity_mapping: EntityMapping, property_name: str) -> Optional[PropertyMapping]:
    """Find a property mapping on an entity by property name."""
    for mapping in entity_mapping.property_mappings:
        if mapping.property_name == property_name:
            return mapping
    return None


def find_aggregate_property_mapping(
    aggregate_mapping: AggregateMapping, property_name: str
) -> Optional[PropertyMapping]:
    """Find a property mapping on an aggregate by property name."""
    for mapping in aggregate_mapping.property_mappings:
        if mapping.property_name == property_name:
            return mapping
    return None


def get_referenced_tables(model_map: ModelMap) -> List[str]:
    """
    All table names referenced anywhere in a model map.

    Returns:
        Sorted list of unique table names
    """
    tables = set()
    for entity in model_map.entity_mappings.values():
        tables.add(entity.table_name)
        tables.update(m.table_name for m in entity.property_mappings)
    for aggregate in model_map.aggregate_mappings.values():
        tables.add(aggregate.table_name)
        tables.update(m.table_name for m in aggregate.property_mappings)
    return sorted(tables)
