"""
UI model types.

These are the display-oriented shapes sent to the front end. Field names are
snake_case in Python and camelCase on the wire (``propertyName``,
``isEditable``, ...).
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ControlType = Literal["text", "textarea", "number", "date", "select", "checkbox", "boolean"]


class UIBaseModel(BaseModel):
    """camelCase aliases, constructible by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PropertyValidation(UIBaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    custom: Optional[str] = None


class UIPropertyMeta(UIBaseModel):
    """Static definition of a property shown in a form or table."""
    property_name: str
    control_type: ControlType = "text"
    is_editable: bool = True
    is_visible: bool = True
    is_id: bool = False
    is_required: bool = False
    ordinal: int = 0
    select_values: Optional[List[str]] = None
    display_name: str = ""
    placeholder: Optional[str] = None
    validation: Optional[PropertyValidation] = None


class UIProperty(UIPropertyMeta):
    """A property definition together with its current value."""
    property_value: Any = None


class AggregateRef(UIBaseModel):
    aggregate_type: str
    display_name: str
    ordinal: int = 0


class UIAggregateMeta(UIBaseModel):
    aggregate_type: str
    display_name: str
    property_defs: List[UIPropertyMeta] = Field(default_factory=list)
    is_table: bool = True
    can_edit: bool = True


class UIAggregate(UIAggregateMeta):
    """An aggregate loaded for one entity: one property list per child row."""
    entity_uid: str
    rows: List[List[UIProperty]] = Field(default_factory=list)


class UIEntityRef(UIBaseModel):
    entity_uid: str
    display_name: str
    ancestors: List["UIEntityRef"] = Field(default_factory=list)
    children: List["UIEntityRef"] = Field(default_factory=list)


class UIEntityMeta(UIBaseModel):
    entity_type: str
    display_name: str
    plural_name: str
    property_defs: List[UIPropertyMeta] = Field(default_factory=list)
    aggregate_refs: List[AggregateRef] = Field(default_factory=list)


class UIEntity(UIEntityMeta):
    """An entity instance built from one database row."""
    entity_uid: str
    properties: List[UIProperty] = Field(default_factory=list)
    aggregates: List[UIAggregate] = Field(default_factory=list)
    ancestors: List[UIEntityRef] = Field(default_factory=list)
    children: List[UIEntityRef] = Field(default_factory=list)

    def get_property_value(self, property_name: str) -> Any:
        for prop in self.properties:
            if prop.property_name == property_name:
                return prop.property_value
        return None


UIEntityRef.model_rebuild()


def _editable(properties: List[UIPropertyMeta]) -> List[UIPropertyMeta]:
    return [p for p in properties if p.is_visible and p.is_editable and not p.is_id]


class UIModel:
    """
    Lookup wrapper over the UI entity and aggregate definitions.

    Unknown names give empty results (None, [] or the name itself for
    display names) rather than raising.
    """

    def __init__(self, entities: Dict[str, UIEntityMeta], aggregates: Dict[str, UIAggregateMeta]):
        self.entities = entities
        self.aggregates = aggregates

    # =========================================================================
    # ENTITY OPERATIONS
    # =========================================================================

    def get_entity(self, entity_name: str) -> Optional[UIEntityMeta]:
        return self.entities.get(entity_name)

    def get_entity_names(self) -> List[str]:
        return list(self.entities.keys())

    def get_entity_display_name(self, entity_name: str) -> str:
        entity = self.get_entity(entity_name)
        return entity.display_name if entity and entity.display_name else entity_name

    def get_entity_plural_name(self, entity_name: str) -> str:
        entity = self.get_entity(entity_name)
        if entity is None:
            return entity_name
        return entity.plural_name or entity.display_name or entity_name

    def has_entity(self, entity_name: str) -> bool:
        return entity_name in self.entities

    # =========================================================================
    # ENTITY PROPERTY OPERATIONS
    # =========================================================================

    def get_entity_properties(self, entity_name: str) -> List[UIPropertyMeta]:
        entity = self.get_entity(entity_name)
        return list(entity.property_defs) if entity else []

    def get_entity_visible_properties(self, entity_name: str) -> List[UIPropertyMeta]:
        return [p for p in self.get_entity_properties(entity_name) if p.is_visible]

    def get_entity_editable_properties(self, entity_name: str) -> List[UIPropertyMeta]:
        """Visible, editable and not an id."""
        return _editable(self.get_entity_properties(entity_name))

    def get_entity_id_properties(self, entity_name: str) -> List[UIPropertyMeta]:
        return [p for p in self.get_entity_properties(entity_name) if p.is_id]

    def get_entity_id_property(self, entity_name: str) -> Optional[UIPropertyMeta]:
        ids = self.get_entity_id_properties(entity_name)
        return ids[0] if ids else None

    def get_entity_required_properties(self, entity_name: str) -> List[UIPropertyMeta]:
        return [p for p in self.get_entity_properties(entity_name) if p.is_required]

    def find_entity_property(self, entity_name: str, property_name: str) -> Optional[UIPropertyMeta]:
        for prop in self.get_entity_properties(entity_name):
            if prop.property_name == property_name:
                return prop
        return None

    # =========================================================================
    # ENTITY AGGREGATE OPERATIONS
    # =========================================================================

    def get_entity_aggregates(self, entity_name: str) -> List[UIAggregateMeta]:
        """Aggregate definitions referenced by an entity, in reference order."""
        entity = self.get_entity(entity_name)
        if entity is None:
            return []
        aggregates = [self.get_aggregate(ref.aggregate_type) for ref in entity.aggregate_refs]
        return [agg for agg in aggregates if agg is not None]

    def find_entity_aggregate(self, entity_name: str, aggregate_type: str) -> Optional[UIAggregateMeta]:
        entity = self.get_entity(entity_name)
        if entity is None:
            return None
        for ref in entity.aggregate_refs:
            if ref.aggregate_type == aggregate_type:
                return self.get_aggregate(aggregate_type)
        return None

    # =========================================================================
    # AGGREGATE OPERATIONS
    # =========================================================================

    def get_aggregate(self, aggregate_type: str) -> Optional[UIAggregateMeta]:
        return self.aggregates.get(aggregate_type)

    def get_aggregate_types(self) -> List[str]:
        return list(self.aggregates.keys())

    def get_aggregate_display_name(self, aggregate_type: str) -> str:
        aggregate = self.get_aggregate(aggregate_type)
        return aggregate.display_name if aggregate and aggregate.display_name else aggregate_type

    def has_aggregate(self, aggregate_type: str) -> bool:
        return aggregate_type in self.aggregates

    def get_aggregate_properties(self, aggregate_type: str) -> List[UIPropertyMeta]:
        aggregate = self.get_aggregate(aggregate_type)
        return list(aggregate.property_defs) if aggregate else []

    def get_aggregate_visible_properties(self, aggregate_type: str) -> List[UIPropertyMeta]:
        return [p for p in self.get_aggregate_properties(aggregate_type) if p.is_visible]

    def get_aggregate_editable_properties(self, aggregate_type: str) -> List[UIPropertyMeta]:
        return _editable(self.get_aggregate_properties(aggregate_type))

    def get_aggregate_required_properties(self, aggregate_type: str) -> List[UIPropertyMeta]:
        return [p for p in self.get_aggregate_properties(aggregate_type) if p.is_required]

    def find_aggregate_property(self, aggregate_type: str, property_name: str) -> Optional[UIPropertyMeta]:
        for prop in self.get_aggregate_properties(aggregate_type):
            if prop.property_name == property_name:
                return prop
        return None
