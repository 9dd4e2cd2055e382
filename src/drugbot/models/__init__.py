"""
Model definitions for the DrugBot data service.

- model_map: UI property -> table/column mappings (frozen dataclasses)
- ui_model: UI entity/aggregate shapes (pydantic, camelCase on the wire)
- db_model: database schema metadata (frozen dataclasses)
"""
from drugbot.models.model_map import (
    PropertyTransform,
    PropertyMapping,
    EntityMapping,
    AggregateMapping,
    AggregateQueryInfo,
    EntityQueryInfo,
    ModelMap,
    is_property_mapping,
    is_entity_mapping,
    is_aggregate_mapping,
    is_model_map,
    get_referenced_tables,
)
from drugbot.models.ui_model import (
    PropertyValidation,
    UIPropertyMeta,
    UIProperty,
    AggregateRef,
    UIAggregateMeta,
    UIAggregate,
    UIEntityRef,
    UIEntityMeta,
    UIEntity,
    UIModel,
)
from drugbot.models.db_model import (
    DBField,
    DBTable,
    DBSchema,
    DBModel,
    ForeignKeyRelationship,
    ModelValidationResult,
)

__all__ = [
    # Model map
    "PropertyTransform",
    "PropertyMapping",
    "EntityMapping",
    "AggregateMapping",
    "AggregateQueryInfo",
    "EntityQueryInfo",
    "ModelMap",
    "is_property_mapping",
    "is_entity_mapping",
    "is_aggregate_mapping",
    "is_model_map",
    "get_referenced_tables",
    # UI model
    "PropertyValidation",
    "UIPropertyMeta",
    "UIProperty",
    "AggregateRef",
    "UIAggregateMeta",
    "UIAggregate",
    "UIEntityRef",
    "UIEntityMeta",
    "UIEntity",
    "UIModel",
    # DB model
    "DBField",
    "DBTable",
    "DBSchema",
    "DBModel",
    "ForeignKeyRelationship",
    "ModelValidationResult",
]
