"""
Tests for the database schema metadata.
"""

import pytest

from drugbot.definitions.db_model import THE_DB_MODEL
from drugbot.models.db_model import DBField, DBModel, DBSchema, DBTable


@pytest.fixture
def small_model():
    """Two tables where foreign keys can be resolved from their names."""
    return DBModel(DBSchema(
        name="small",
        version="0.1",
        tables=(
            DBTable("drugs", (
                DBField("uid", "UUID", is_nullable=False, is_primary_key=True),
                DBField("name", "VARCHAR", is_nullable=False, max_length=100),
            )),
            DBTable("doses", (
                DBField("uid", "UUID", is_nullable=False, is_primary_key=True, default_value="gen_random_uuid()"),
                DBField("drug_uid", "UUID", is_foreign_key=True),
                DBField("amount", "NUMERIC", for_export=False),
            )),
            DBTable("notes", (DBField("body", "TEXT"), DBField("body", "")), for_export=False),
        ),
    ))


class TestTableLookups:

    def test_known_tables(self):
        names = THE_DB_MODEL.get_table_names()
        for table in ("generic_drugs", "generic_aliases", "generic_routes", "generic_approvals",
                      "manu_drugs", "entity_relationships", "reports", "select_lists"):
            assert table in names, f"Missing table {table}"

    def test_field_lookups(self):
        assert THE_DB_MODEL.has_table_field("manu_drugs", "biosimilar")
        assert not THE_DB_MODEL.has_table_field("manu_drugs", "dose")
        assert THE_DB_MODEL.get_table_field("generic_approvals", "approval_date").datatype == "DATE"
        assert THE_DB_MODEL.get_table_fields("unknown") == []
        assert THE_DB_MODEL.get_table("unknown") is None

    def test_primary_keys(self):
        assert THE_DB_MODEL.get_primary_key_field_names("generic_drugs") == ["uid"]
        assert THE_DB_MODEL.has_primary_key("entity_relationships")

    def test_required_fields_skip_defaults(self, small_model):
        assert [f.name for f in small_model.get_required_fields("drugs")] == ["uid", "name"]
        assert small_model.get_required_fields("doses") == []
        assert [f.name for f in small_model.get_nullable_fields("doses")] == ["drug_uid", "amount"]


class TestRelationships:

    def test_foreign_keys_resolved_from_field_names(self, small_model):
        (relationship,) = small_model.find_foreign_key_relationships()
        assert relationship.from_table == "doses"
        assert relationship.from_field == "drug_uid"
        assert relationship.to_table == "drugs"
        assert relationship.to_field == "uid"

    def test_unresolvable_foreign_key_has_no_target(self):
        relationships = THE_DB_MODEL.find_foreign_key_relationships()
        ancestor = [r for r in relationships if r.from_field == "ancestor_uid"]
        assert ancestor and ancestor[0].to_table is None


class TestSummaryAndValidation:

    def test_summary(self, small_model):
        summary = small_model.get_model_summary()
        assert summary["schemaName"] == "small"
        assert summary["tableCount"] == 3
        assert summary["totalFieldCount"] == 7
        assert summary["tables"][1] == {"name": "doses", "fieldCount": 3, "hasPrimaryKey": True, "foreignKeyCount": 1}

    def test_validation_reports_problems(self, small_model):
        result = small_model.validate_model()
        assert not result.is_valid
        assert "Table 'notes' has no primary key" in result.warnings
        assert "Table 'notes' has duplicate field names" in result.errors
        assert "Field 'body' in table 'notes' has no datatype" in result.errors

    def test_drugbot_schema_is_valid(self):
        result = THE_DB_MODEL.validate_model()
        assert result.is_valid, result.errors

    def test_create_table_sql(self, small_model):
        ddl = small_model.generate_create_table_sql("drugs")
        assert ddl == (
            "CREATE TABLE drugs (\n"
            "  uid UUID NOT NULL,\n"
            "  name VARCHAR(100) NOT NULL,\n"
            "  PRIMARY KEY (uid)\n"
            ");"
        )
        assert small_model.generate_create_table_sql("missing") is None


class TestExport:

    def test_exportable_tables_skip_application_tables(self):
        names = THE_DB_MODEL.get_exportable_table_names()
        assert "reports" not in names
        assert "select_lists" not in names
        assert "generic_drugs" in names

    def test_exportable_fields(self, small_model):
        assert small_model.get_exportable_field_names("doses") == ["uid", "drug_uid"]
        config = small_model.get_export_configuration()
        assert config["tables"][2] == {"name": "notes", "forExport": False, "fieldCount": 2, "exportableFieldCount": 2}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
