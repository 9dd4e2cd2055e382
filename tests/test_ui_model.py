"""
Tests for the UI model definitions and the UIModel lookups.
"""

import pytest

from drugbot.definitions.ui_model import THE_UI_MODEL
from drugbot.models.ui_model import UIEntity, UIEntityRef, UIProperty


class TestEntityLookups:

    def test_entity_names(self):
        assert THE_UI_MODEL.get_entity_names() == ["GenericDrugs", "ManuDrugs"]
        assert THE_UI_MODEL.has_entity("GenericDrugs")
        assert not THE_UI_MODEL.has_entity("Vaccines")

    def test_display_and_plural_names(self):
        assert THE_UI_MODEL.get_entity_display_name("GenericDrugs") == "Generic"
        assert THE_UI_MODEL.get_entity_plural_name("ManuDrugs") == "Manufactured Drugs"

    def test_unknown_entity_falls_back_to_name(self):
        assert THE_UI_MODEL.get_entity_display_name("Vaccines") == "Vaccines"
        assert THE_UI_MODEL.get_entity_plural_name("Vaccines") == "Vaccines"
        assert THE_UI_MODEL.get_entity_properties("Vaccines") == []
        assert THE_UI_MODEL.get_entity_aggregates("Vaccines") == []


class TestEntityProperties:

    def test_editable_properties_are_visible_and_not_ids(self):
        editable = THE_UI_MODEL.get_entity_editable_properties("GenericDrugs")
        names = [p.property_name for p in editable]

        assert names == ["generic_name", "biologic", "mech_of_action", "class_or_type", "target"]
        assert all(p.is_visible and p.is_editable and not p.is_id for p in editable)

    def test_id_property(self):
        assert THE_UI_MODEL.get_entity_id_property("GenericDrugs").property_name == "uid"
        ids = [p.property_name for p in THE_UI_MODEL.get_entity_id_properties("ManuDrugs")]
        assert ids == ["uid", "generic_uid"]

    def test_required_and_visible(self):
        required = {p.property_name for p in THE_UI_MODEL.get_entity_required_properties("GenericDrugs")}
        assert required == {"generic_name", "biologic", "mech_of_action", "class_or_type", "target"}
        visible = {p.property_name for p in THE_UI_MODEL.get_entity_visible_properties("GenericDrugs")}
        assert "uid" not in visible

    def test_find_entity_property(self):
        assert THE_UI_MODEL.find_entity_property("GenericDrugs", "target").display_name == "Target"
        assert THE_UI_MODEL.find_entity_property("GenericDrugs", "missing") is None


class TestAggregates:

    def test_entity_aggregates_follow_reference_order(self):
        types = [a.aggregate_type for a in THE_UI_MODEL.get_entity_aggregates("GenericDrugs")]
        assert types == ["GenericManuDrugs", "GenericRoute", "GenericApproval", "GenericAlias", "GenericDrugsWideView"]

    def test_find_entity_aggregate(self):
        assert THE_UI_MODEL.find_entity_aggregate("GenericDrugs", "GenericAlias").display_name
        assert THE_UI_MODEL.find_entity_aggregate("ManuDrugs", "GenericAlias") is None

    def test_wide_view_is_read_only(self):
        wide = THE_UI_MODEL.get_aggregate("GenericDrugsWideView")
        assert wide.can_edit is False
        assert THE_UI_MODEL.get_aggregate_editable_properties("GenericDrugsWideView") == []

    def test_aggregate_property_lookups(self):
        assert THE_UI_MODEL.has_aggregate("GenericRoute")
        assert THE_UI_MODEL.get_aggregate_display_name("Unknown") == "Unknown"
        alias = THE_UI_MODEL.find_aggregate_property("GenericAlias", "alias")
        assert alias.is_required
        required = [p.property_name for p in THE_UI_MODEL.get_aggregate_required_properties("GenericAlias")]
        assert required == ["alias"]


class TestSerialization:
    """UI objects serialize with camelCase keys."""

    def test_entity_round_trip_uses_camel_case(self):
        entity = UIEntity(
            entity_type="GenericDrugs",
            entity_uid="u-1",
            display_name="adalimumab",
            plural_name="Generic Drugs",
            properties=[UIProperty(property_name="target", display_name="Target", property_value="TNF")],
            children=[UIEntityRef(entity_uid="m-1", display_name="Humira")],
        )
        data = entity.model_dump(by_alias=True)

        assert data["entityUid"] == "u-1"
        assert data["properties"][0]["propertyValue"] == "TNF"
        assert data["children"][0]["displayName"] == "Humira"
        assert UIEntity.model_validate(data).get_property_value("target") == "TNF"

    def test_missing_property_value_is_none(self):
        entity = UIEntity(entity_type="X", entity_uid="1", display_name="x", plural_name="xs")
        assert entity.get_property_value("anything") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
