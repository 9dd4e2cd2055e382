"""
The DrugBot model map and its accessors.

Entity types:
    generic_drugs  - generic drug records (top level)
    manu_drugs     - manufactured / branded drugs, children of a generic drug

Aggregate types (all keyed to the parent through ``generic_uid``):
    GenericAlias, GenericRoute, GenericApproval, GenericManuDrugs

Accessors return None / [] for unknown types; the ``require_*`` variants
raise instead.
"""

from typing import List, Optional

from drugbot.exceptions import UnknownAggregateTypeError, UnknownEntityTypeError
from drugbot.models.model_map import (
    AggregateMapping,
    AggregateQueryInfo,
    EntityMapping,
    EntityQueryInfo,
    ModelMap,
    PropertyMapping,
    PropertyTransform,
    find_aggregate_property_mapping as _find_in_aggregate,
    find_property_mapping as _find_in_entity,
)

BIOSIMILAR_TRANSFORM = PropertyTransform(from_db="integerToBoolean", to_db="booleanToInteger")


def _props(table_name: str, *field_names: str) -> tuple:
    """Property mappings where the property name equals the column name."""
    return tuple(PropertyMapping(name, table_name, name) for name in field_names)


# =============================================================================
# ENTITY MAPPINGS
# =============================================================================

GENERIC_DRUGS_MAPPING = EntityMapping(
    entity_type="generic_drugs",
    ui_entity_type="GenericDrugs",
    table_name="generic_drugs",
    key_field="generic_key",
    display_name_field="generic_name",
    property_mappings=_props(
        "generic_drugs",
        "uid", "generic_key", "generic_name", "biologic",
        "mech_of_action", "class_or_type", "target",
    ),
    aggregate_references=("GenericAlias", "GenericRoute", "GenericApproval", "GenericManuDrugs"),
    key_prefix="generic",
)

_MANU_DRUG_PROPERTIES = (
    _props("manu_drugs", "uid", "manu_drug_key", "generic_uid", "drug_name", "manufacturer")
    + (PropertyMapping("biosimilar", "manu_drugs", "biosimilar", transform=BIOSIMILAR_TRANSFORM),)
    + _props("manu_drugs", "biosimilar_suffix", "biosimilar_originator")
)

MANU_DRUGS_MAPPING = EntityMapping(
    entity_type="manu_drugs",
    ui_entity_type="ManuDrugs",
    table_name="manu_drugs",
    key_field="manu_drug_key",
    display_name_field="drug_name",
    property_mappings=_MANU_DRUG_PROPERTIES,
    aggregate_references=(),
    key_prefix="manu",
    parent_entity_type="generic_drugs",
    parent_key_field="generic_uid",
)

# =============================================================================
# AGGREGATE MAPPINGS
# =============================================================================

GENERIC_ALIAS_MAPPING = AggregateMapping(
    aggregate_type="GenericAlias",
    table_name="generic_aliases",
    parent_key_field="generic_uid",
    property_mappings=_props("generic_aliases", "uid", "generic_uid", "generic_key", "alias"),
)

GENERIC_ROUTE_MAPPING = AggregateMapping(
    aggregate_type="GenericRoute",
    table_name="generic_routes",
    parent_key_field="generic_uid",
    property_mappings=_props(
        "generic_routes",
        "uid", "route_key", "generic_uid", "route_type", "load_dose", "load_measure",
        "maintain_dose", "maintain_measure", "montherapy", "half_life",
    ),
)

GENERIC_APPROVAL_MAPPING = AggregateMapping(
    aggregate_type="GenericApproval",
    table_name="generic_approvals",
    parent_key_field="generic_uid",
    property_mappings=_props(
        "generic_approvals",
        "uid", "generic_uid", "country", "indication", "approval_date", "box_warning",
    ),
)

GENERIC_MANU_DRUGS_MAPPING = AggregateMapping(
    aggregate_type="GenericManuDrugs",
    table_name="manu_drugs",
    parent_key_field="generic_uid",
    property_mappings=_MANU_DRUG_PROPERTIES,
)

THE_MODEL_MAP = ModelMap(
    name="DrugBot Model Map",
    version="1.0.0",
    entity_mappings={
        GENERIC_DRUGS_MAPPING.entity_type: GENERIC_DRUGS_MAPPING,
        MANU_DRUGS_MAPPING.entity_type: MANU_DRUGS_MAPPING,
    },
    aggregate_mappings={
        GENERIC_ALIAS_MAPPING.aggregate_type: GENERIC_ALIAS_MAPPING,
        GENERIC_ROUTE_MAPPING.aggregate_type: GENERIC_ROUTE_MAPPING,
        GENERIC_APPROVAL_MAPPING.aggregate_type: GENERIC_APPROVAL_MAPPING,
        GENERIC_MANU_DRUGS_MAPPING.aggregate_type: GENERIC_MANU_DRUGS_MAPPING,
    },
)


# =============================================================================
# ACCESSORS
# =============================================================================

def get_entity_mapping(entity_type: str) -> Optional[EntityMapping]:
    return THE_MODEL_MAP.entity_mappings.get(entity_type)


def get_aggregate_mapping(aggregate_type: str) -> Optional[AggregateMapping]:
    return THE_MODEL_MAP.aggregate_mappings.get(aggregate_type)


def require_entity_mapping(entity_type: str) -> EntityMapping:
    """
    Get an entity mapping or raise.

    Raises:
        UnknownEntityTypeError: If the entity type is not mapped
    """
    mapping = get_entity_mapping(entity_type)
    if mapping is None:
        raise UnknownEntityTypeError(entity_type)
    return mapping


def require_aggregate_mapping(aggregate_type: str) -> AggregateMapping:
    """
    Get an aggregate mapping or raise.

    Raises:
        UnknownAggregateTypeError: If the aggregate type is not mapped
    """
    mapping = get_aggregate_mapping(aggregate_type)
    if mapping is None:
        raise UnknownAggregateTypeError(aggregate_type)
    return mapping


def find_entity_mapping_by_table(table_name: str) -> Optional[EntityMapping]:
    """Entity mapping whose own table is ``table_name``."""
    for mapping in THE_MODEL_MAP.entity_mappings.values():
        if mapping.table_name == table_name:
            return mapping
    return None


def get_child_entity_mappings(entity_type: str) -> List[EntityMapping]:
    """Entity mappings whose parent is ``entity_type``."""
    return [
        mapping for mapping in THE_MODEL_MAP.entity_mappings.values()
        if mapping.parent_entity_type == entity_type
    ]


def get_entity_property_mappings(entity_type: str) -> List[PropertyMapping]:
    mapping = get_entity_mapping(entity_type)
    return list(mapping.property_mappings) if mapping else []


def get_aggregate_property_mappings(aggregate_type: str) -> List[PropertyMapping]:
    mapping = get_aggregate_mapping(aggregate_type)
    return list(mapping.property_mappings) if mapping else []


def find_entity_property_mapping(entity_type: str, property_name: str) -> Optional[PropertyMapping]:
    mapping = get_entity_mapping(entity_type)
    return _find_in_entity(mapping, property_name) if mapping else None


def find_aggregate_property_mapping(aggregate_type: str, property_name: str) -> Optional[PropertyMapping]:
    mapping = get_aggregate_mapping(aggregate_type)
    return _find_in_aggregate(mapping, property_name) if mapping else None


def get_entity_table_name(entity_type: str) -> Optional[str]:
    mapping = get_entity_mapping(entity_type)
    return mapping.table_name if mapping else None


def get_aggregate_table_name(aggregate_type: str) -> Optional[str]:
    mapping = get_aggregate_mapping(aggregate_type)
    return mapping.table_name if mapping else None


def get_entity_key_field(entity_type: str) -> Optional[str]:
    mapping = get_entity_mapping(entity_type)
    return mapping.key_field if mapping else None


def get_aggregate_parent_key_field(aggregate_type: str) -> Optional[str]:
    mapping = get_aggregate_mapping(aggregate_type)
    return mapping.parent_key_field if mapping else None


def get_entity_aggregate_mappings(entity_type: str) -> List[AggregateMapping]:
    """Aggregate mappings an entity references, skipping references with no mapping."""
    mapping = get_entity_mapping(entity_type)
    if mapping is None:
        return []
    aggregates = [get_aggregate_mapping(ref) for ref in mapping.aggregate_references]
    return [agg for agg in aggregates if agg is not None]


def get_entity_aggregate_types(entity_type: str) -> List[str]:
    return [agg.aggregate_type for agg in get_entity_aggregate_mappings(entity_type)]


def get_entity_all_table_names(entity_type: str) -> List[str]:
    """
    The entity's own table followed by every aggregate table, without duplicates.

    Returns:
        Table names in first-seen order; empty for unknown entity types
    """
    mapping = get_entity_mapping(entity_type)
    if mapping is None:
        return []

    tables = [mapping.table_name]
    for aggregate in get_entity_aggregate_mappings(entity_type):
        if aggregate.table_name not in tables:
            tables.append(aggregate.table_name)
    return tables


def get_entity_complete_query_info(entity_type: str) -> Optional[EntityQueryInfo]:
    """Table, key and aggregate information needed to load an entity in full."""
    mapping = get_entity_mapping(entity_type)
    if mapping is None:
        return None

    aggregates = tuple(
        AggregateQueryInfo(
            aggregate_type=agg.aggregate_type,
            table_name=agg.table_name,
            parent_key_field=agg.parent_key_field,
        )
        for agg in get_entity_aggregate_mappings(entity_type)
    )
    return EntityQueryInfo(
        entity_table=mapping.table_name,
        entity_key_field=mapping.key_field,
        entity_display_field=mapping.display_name_field,
        aggregates=aggregates,
        all_tables=tuple(get_entity_all_table_names(entity_type)),
    )


def entity_has_aggregates(entity_type: str) -> bool:
    return bool(get_entity_aggregate_mappings(entity_type))


def entity_has_aggregate(entity_type: str, aggregate_type: str) -> bool:
    mapping = get_entity_mapping(entity_type)
    return bool(mapping) and aggregate_type in mapping.aggregate_references
