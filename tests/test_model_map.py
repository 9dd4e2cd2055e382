"""
Tests for the model map definitions and accessors.
"""

import pytest

from drugbot.definitions.model_map import (
    THE_MODEL_MAP,
    entity_has_aggregate,
    entity_has_aggregates,
    find_aggregate_property_mapping,
    find_entity_mapping_by_table,
    find_entity_property_mapping,
    get_aggregate_mapping,
    get_aggregate_parent_key_field,
    get_aggregate_table_name,
    get_child_entity_mappings,
    get_entity_aggregate_types,
    get_entity_all_table_names,
    get_entity_complete_query_info,
    get_entity_key_field,
    get_entity_mapping,
    get_entity_table_name,
    require_aggregate_mapping,
    require_entity_mapping,
)
from drugbot.exceptions import UnknownAggregateTypeError, UnknownEntityTypeError
from drugbot.models.model_map import (
    PropertyMapping,
    get_referenced_tables,
    is_aggregate_mapping,
    is_entity_mapping,
    is_model_map,
    is_property_mapping,
)


class TestFixedMappings:
    """The aggregate and entity mappings the rest of the system relies on."""

    @pytest.mark.parametrize("aggregate_type,table_name", [
        ("GenericAlias", "generic_aliases"),
        ("GenericRoute", "generic_routes"),
        ("GenericApproval", "generic_approvals"),
        ("GenericManuDrugs", "manu_drugs"),
    ])
    def test_aggregate_tables(self, aggregate_type, table_name):
        assert get_aggregate_mapping(aggregate_type).table_name == table_name
        assert get_aggregate_table_name(aggregate_type) == table_name
        assert get_aggregate_parent_key_field(aggregate_type) == "generic_uid"

    def test_entity_tables_and_keys(self):
        assert get_entity_table_name("generic_drugs") == "generic_drugs"
        assert get_entity_key_field("generic_drugs") == "generic_key"
        assert get_entity_table_name("manu_drugs") == "manu_drugs"
        assert get_entity_key_field("manu_drugs") == "manu_drug_key"

    def test_manu_drugs_is_child_of_generic_drugs(self):
        children = get_child_entity_mappings("generic_drugs")
        assert [c.entity_type for c in children] == ["manu_drugs"]
        assert children[0].parent_key_field == "generic_uid"

    def test_find_entity_mapping_by_table(self):
        assert find_entity_mapping_by_table("manu_drugs").entity_type == "manu_drugs"
        assert find_entity_mapping_by_table("generic_aliases") is None

    def test_biosimilar_is_transformed(self):
        mapping = find_entity_property_mapping("manu_drugs", "biosimilar")
        assert mapping.transform.from_db == "integerToBoolean"
        assert mapping.transform.to_db == "booleanToInteger"


class TestUnknownTypes:

    def test_lookups_return_none_or_empty(self):
        assert get_entity_mapping("nope") is None
        assert get_aggregate_mapping("Nope") is None
        assert get_entity_all_table_names("nope") == []
        assert get_entity_aggregate_types("nope") == []
        assert get_entity_complete_query_info("nope") is None
        assert find_aggregate_property_mapping("Nope", "alias") is None

    def test_require_variants_raise(self):
        with pytest.raises(UnknownEntityTypeError):
            require_entity_mapping("nope")
        with pytest.raises(UnknownAggregateTypeError):
            require_aggregate_mapping("Nope")


class TestEntityTables:

    @pytest.mark.parametrize("entity_type", list(THE_MODEL_MAP.entity_mappings))
    def test_all_table_names_has_own_table_first_and_no_duplicates(self, entity_type):
        tables = get_entity_all_table_names(entity_type)
        mapping = get_entity_mapping(entity_type)

        assert tables[0] == mapping.table_name
        assert len(tables) == len(set(tables)), f"Duplicate tables for {entity_type}: {tables}"
        for aggregate_type in mapping.aggregate_references:
            assert get_aggregate_table_name(aggregate_type) in tables

    def test_generic_drug_tables(self):
        assert get_entity_all_table_names("generic_drugs") == [
            "generic_drugs", "generic_aliases", "generic_routes", "generic_approvals", "manu_drugs",
        ]

    def test_complete_query_info(self):
        info = get_entity_complete_query_info("generic_drugs")
        assert info.entity_key_field == "generic_key"
        assert info.entity_display_field == "generic_name"
        assert [a.aggregate_type for a in info.aggregates] == [
            "GenericAlias", "GenericRoute", "GenericApproval", "GenericManuDrugs",
        ]
        assert info.all_tables == tuple(get_entity_all_table_names("generic_drugs"))

    def test_has_aggregate(self):
        assert entity_has_aggregates("generic_drugs")
        assert not entity_has_aggregates("manu_drugs")
        assert entity_has_aggregate("generic_drugs", "GenericRoute")
        assert not entity_has_aggregate("manu_drugs", "GenericRoute")


class TestTypeChecks:

    def test_dataclasses_pass(self):
        assert is_model_map(THE_MODEL_MAP)
        assert is_entity_mapping(get_entity_mapping("generic_drugs"))
        assert is_aggregate_mapping(get_aggregate_mapping("GenericAlias"))
        assert is_property_mapping(PropertyMapping("alias", "generic_aliases", "alias"))

    def test_camel_case_dicts_pass(self):
        assert is_property_mapping({
            "propertyName": "alias", "tableName": "generic_aliases", "fieldName": "alias", "isComputed": False,
        })
        assert is_aggregate_mapping({
            "aggregateType": "X", "tableName": "x", "parentKeyField": "p", "propertyMappings": [],
        })
        assert is_model_map({"name": "m", "version": "1", "entityMappings": {}, "aggregateMappings": {}})

    def test_incomplete_dicts_fail(self):
        assert not is_property_mapping({"propertyName": "alias"})
        assert not is_entity_mapping({"entityType": "x", "tableName": "x"})
        assert not is_model_map([])

    def test_referenced_tables(self):
        assert get_referenced_tables(THE_MODEL_MAP) == sorted({
            "generic_drugs", "manu_drugs", "generic_aliases", "generic_routes", "generic_approvals",
        })


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
