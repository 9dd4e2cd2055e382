"""
The DrugBot database schema.

Every table name and column name accepted from an HTTP request is checked
against this schema before SQL is built.
"""

from drugbot.models.db_model import DBField, DBModel, DBSchema, DBTable

UUID_DEFAULT = "gen_random_uuid()"


def _uid() -> DBField:
    return DBField("uid", "UUID", is_nullable=False, is_primary_key=True, default_value=UUID_DEFAULT)


def _row() -> DBField:
    return DBField("row", "INTEGER")


def _varchar(name: str, length: int = 255) -> DBField:
    return DBField(name, "VARCHAR", max_length=length)


def _text(name: str) -> DBField:
    return DBField(name, "TEXT")


def _fk(name: str, nullable: bool = True) -> DBField:
    return DBField(name, "UUID", is_nullable=nullable, is_foreign_key=True)


def _lookup_table(name: str, description: str) -> DBTable:
    return DBTable(
        name=name,
        description=description,
        fields=(_uid(), DBField("value", "VARCHAR", is_nullable=False, max_length=255)),
    )


# =============================================================================
# LOOKUP TABLES
# =============================================================================

DRUG_CLASSES_TABLE = _lookup_table("drug_classes", "Lookup table for drug class/type classifications")
ROUTE_TYPES_TABLE = _lookup_table("route_types", "Lookup table for drug administration routes")
COUNTRIES_TABLE = _lookup_table("countries", "Lookup table for countries where drugs are approved")

# =============================================================================
# DRUG TABLES
# =============================================================================

GENERIC_DRUGS_TABLE = DBTable(
    name="generic_drugs",
    description="Generic drug information including mechanism of action and classification",
    fields=(
        _uid(),
        _row(),
        _varchar("generic_key"),
        _varchar("generic_name"),
        _text("biologic"),
        _varchar("mech_of_action"),
        _varchar("class_or_type"),
        _varchar("target"),
    ),
)

GENERIC_ALIASES_TABLE = DBTable(
    name="generic_aliases",
    description="Alternative names and aliases for generic drugs",
    fields=(
        _uid(),
        _row(),
        _varchar("generic_key"),
        _fk("generic_uid"),
        _varchar("alias"),
    ),
)

GENERIC_ROUTES_TABLE = DBTable(
    name="generic_routes",
    description="Drug administration routes and dosing information",
    fields=(
        _uid(),
        _row(),
        _varchar("route_key"),
        _varchar("generic_key"),
        _fk("generic_uid"),
        _varchar("route_type"),
        _varchar("load_measure"),
        _varchar("load_dose"),
        _varchar("load_measure_2"),
        _varchar("load_reg"),
        _varchar("maintain_dose"),
        _varchar("maintain_measure"),
        _varchar("maintain_reg"),
        _varchar("montherapy"),
        _text("half_life"),
    ),
)

GENERIC_APPROVALS_TABLE = DBTable(
    name="generic_approvals",
    description="Drug approval information by country and route",
    fields=(
        _uid(),
        _row(),
        _varchar("generic_key"),
        _fk("generic_uid"),
        _varchar("route_type"),
        _varchar("country"),
        _text("indication"),
        _text("populations"),
        DBField("approval_date", "DATE"),
        _text("discon_date"),
        _text("box_warning"),
        _text("box_warning_date"),
    ),
)

MANU_DRUGS_TABLE = DBTable(
    name="manu_drugs",
    description="Manufactured drug products including brand names and biosimilar information",
    fields=(
        _uid(),
        _row(),
        _varchar("manu_drug_key"),
        _varchar("generic_key"),
        _fk("generic_uid"),
        _varchar("drug_name"),
        _varchar("manufacturer"),
        _varchar("brandkey"),
        _varchar("biosimilar_suffix"),
        DBField("biosimilar", "INTEGER"),
        _varchar("biosimilar_originator"),
    ),
)

# =============================================================================
# RELATIONSHIP AND APPLICATION TABLES
# =============================================================================

ENTITY_RELATIONSHIPS_TABLE = DBTable(
    name="entity_relationships",
    description="Tracks hierarchical relationships between entities (ancestors and children)",
    fields=(
        _uid(),
        _fk("ancestor_uid", nullable=False),
        _fk("child_uid", nullable=False),
        DBField("relationship_type", "VARCHAR", is_nullable=False, max_length=50, default_value="'parent_child'"),
        DBField("created_at", "TIMESTAMP WITH TIME ZONE", is_nullable=False, default_value="NOW()"),
        DBField("updated_at", "TIMESTAMP WITH TIME ZONE", is_nullable=False, default_value="NOW()"),
    ),
)

REPORTS_TABLE = DBTable(
    name="reports",
    description="Saved report definitions, owned by a user and optionally shared",
    for_export=False,
    fields=(
        _uid(),
        DBField("name", "VARCHAR", is_nullable=False, max_length=255),
        DBField("display_name", "VARCHAR", is_nullable=False, max_length=255),
        DBField("owner_uid", "UUID", is_nullable=False),
        DBField("is_public", "BOOLEAN", is_nullable=False, default_value="false"),
        DBField("report_type", "VARCHAR", max_length=50),
        DBField("report_definition", "JSONB", is_nullable=False),
        DBField("created_at", "TIMESTAMP WITH TIME ZONE", is_nullable=False, default_value="NOW()"),
        DBField("updated_at", "TIMESTAMP WITH TIME ZONE", is_nullable=False, default_value="NOW()"),
    ),
)

SELECT_LISTS_TABLE = DBTable(
    name="select_lists",
    description="Named pick lists of {text, code, ordinal} items shared by all users",
    for_export=False,
    fields=(
        _uid(),
        DBField("name", "VARCHAR", is_nullable=False, max_length=255),
        DBField("display_name", "VARCHAR", is_nullable=False, max_length=255),
        DBField("items", "JSONB", is_nullable=False, default_value="'[]'::jsonb"),
        DBField("created_at", "TIMESTAMP WITH TIME ZONE", is_nullable=False, default_value="NOW()"),
        DBField("updated_at", "TIMESTAMP WITH TIME ZONE", is_nullable=False, default_value="NOW()"),
    ),
)

DRUGBOT_SCHEMA = DBSchema(
    name="drugbot_schema",
    version="1.0.0",
    description=(
        "Complete database schema for the DrugBot application, including drug "
        "information, approvals, routes, and manufacturer data"
    ),
    tables=(
        DRUG_CLASSES_TABLE,
        ROUTE_TYPES_TABLE,
        COUNTRIES_TABLE,
        GENERIC_DRUGS_TABLE,
        GENERIC_ALIASES_TABLE,
        GENERIC_ROUTES_TABLE,
        GENERIC_APPROVALS_TABLE,
        MANU_DRUGS_TABLE,
        ENTITY_RELATIONSHIPS_TABLE,
        REPORTS_TABLE,
        SELECT_LISTS_TABLE,
    ),
)

THE_DB_MODEL = DBModel(DRUGBOT_SCHEMA)
