"""
Database schema metadata.

Describes tables and fields so that requests naming tables or columns can be
validated before any SQL is built, and so exports know which tables and
columns to include.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DBField:
    name: str
    datatype: str
    is_nullable: bool = True
    is_primary_key: bool = False
    is_foreign_key: bool = False
    max_length: Optional[int] = None
    default_value: Optional[str] = None
    for_export: bool = True


@dataclass(frozen=True)
class DBTable:
    name: str
    fields: Tuple[DBField, ...]
    description: Optional[str] = None
    for_export: bool = True


@dataclass(frozen=True)
class DBSchema:
    name: str
    version: str
    tables: Tuple[DBTable, ...]
    description: Optional[str] = None


@dataclass
class ForeignKeyRelationship:
    from_table: str
    from_field: str
    to_table: Optional[str]
    to_field: str = "uid"


@dataclass
class ModelValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class DBModel:
    """Lookup wrapper over a DBSchema."""

    def __init__(self, schema: DBSchema):
        self.schema = schema
        self._tables: Dict[str, DBTable] = {t.name: t for t in schema.tables}

    # =========================================================================
    # TABLE OPERATIONS
    # =========================================================================

    def get_table(self, table_name: str) -> Optional[DBTable]:
        return self._tables.get(table_name)

    def get_all_tables(self) -> List[DBTable]:
        return list(self.schema.tables)

    def get_table_names(self) -> List[str]:
        return [t.name for t in self.schema.tables]

    def has_table(self, table_name: str) -> bool:
        return table_name in self._tables

    # =========================================================================
    # FIELD OPERATIONS
    # =========================================================================

    def get_table_fields(self, table_name: str) -> List[DBField]:
        table = self.get_table(table_name)
        return list(table.fields) if table else []

    def get_table_field(self, table_name: str, field_name: str) -> Optional[DBField]:
        for f in self.get_table_fields(table_name):
            if f.name == field_name:
                return f
        return None

    def has_table_field(self, table_name: str, field_name: str) -> bool:
        return self.get_table_field(table_name, field_name) is not None

    def get_table_field_names(self, table_name: str) -> List[str]:
        return [f.name for f in self.get_table_fields(table_name)]

    def get_primary_key_fields(self, table_name: str) -> List[DBField]:
        return [f for f in self.get_table_fields(table_name) if f.is_primary_key]

    def get_primary_key_field_names(self, table_name: str) -> List[str]:
        return [f.name for f in self.get_primary_key_fields(table_name)]

    def has_primary_key(self, table_name: str) -> bool:
        return bool(self.get_primary_key_fields(table_name))

    def get_foreign_key_fields(self, table_name: str) -> List[DBField]:
        return [f for f in self.get_table_fields(table_name) if f.is_foreign_key]

    def get_nullable_fields(self, table_name: str) -> List[DBField]:
        return [f for f in self.get_table_fields(table_name) if f.is_nullable]

    def get_required_fields(self, table_name: str) -> List[DBField]:
        """Non-nullable fields without a default (must be supplied on insert)."""
        return [
            f for f in self.get_table_fields(table_name)
            if not f.is_nullable and f.default_value is None
        ]

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    def find_foreign_key_relationships(self) -> List[ForeignKeyRelationship]:
        """
        Foreign keys across all tables, with the referenced table guessed
        from the field name (``x_uid`` -> ``x``, ``xs``, ``x_table``, ``x_tables``).
        """
        relationships = []
        for table in self.schema.tables:
            for f in self.get_foreign_key_fields(table.name):
                relationships.append(
                    ForeignKeyRelationship(
                        from_table=table.name,
                        from_field=f.name,
                        to_table=self._infer_referenced_table(f.name),
                    )
                )
        return relationships

    def _infer_referenced_table(self, field_name: str) -> Optional[str]:
        if not field_name.endswith("_uid"):
            return None
        prefix = field_name[: -len("_uid")]
        for candidate in (prefix, f"{prefix}s", f"{prefix}_table", f"{prefix}_tables"):
            if self.has_table(candidate):
                return candidate
        return None

    # =========================================================================
    # SUMMARY AND VALIDATION
    # =========================================================================

    def get_model_summary(self) -> Dict[str, Any]:
        tables = self.get_all_tables()
        return {
            "schemaName": self.schema.name,
            "schemaVersion": self.schema.version,
            "tableCount": len(tables),
            "totalFieldCount": sum(len(t.fields) for t in tables),
            "tables": [
                {
                    "name": t.name,
                    "fieldCount": len(t.fields),
                    "hasPrimaryKey": self.has_primary_key(t.name),
                    "foreignKeyCount": len(self.get_foreign_key_fields(t.name)),
                }
                for t in tables
            ],
        }

    def validate_model(self) -> ModelValidationResult:
        """
        Check the schema for missing primary keys (warning), duplicate field
        names and empty datatypes (errors).
        """
        errors: List[str] = []
        warnings: List[str] = []

        for table in self.schema.tables:
            if not self.has_primary_key(table.name):
                warnings.append(f"Table '{table.name}' has no primary key")

            names = [f.name for f in table.fields]
            if len(names) != len(set(names)):
                errors.append(f"Table '{table.name}' has duplicate field names")

            for f in table.fields:
                if not f.datatype or not f.datatype.strip():
                    errors.append(f"Field '{f.name}' in table '{table.name}' has no datatype")

        return ModelValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def generate_create_table_sql(self, table_name: str) -> Optional[str]:
        """CREATE TABLE statement for a table, or None if the table is unknown."""
        table = self.get_table(table_name)
        if table is None:
            return None

        definitions = []
        for f in table.fields:
            definition = f"  {f.name} {f.datatype}"
            if f.max_length:
                definition += f"({f.max_length})"
            if not f.is_nullable:
                definition += " NOT NULL"
            if f.default_value is not None:
                definition += f" DEFAULT {f.default_value}"
            definitions.append(definition)

        pk_fields = self.get_primary_key_field_names(table_name)
        if pk_fields:
            definitions.append(f"  PRIMARY KEY ({', '.join(pk_fields)})")

        body = ",\n".join(definitions)
        return f"CREATE TABLE {table_name} (\n{body}\n);"

    # =========================================================================
    # EXPORT OPERATIONS
    # =========================================================================

    def get_exportable_tables(self) -> List[DBTable]:
        return [t for t in self.schema.tables if t.for_export]

    def get_exportable_table_names(self) -> List[str]:
        return [t.name for t in self.get_exportable_tables()]

    def get_exportable_fields(self, table_name: str) -> List[DBField]:
        return [f for f in self.get_table_fields(table_name) if f.for_export]

    def get_exportable_field_names(self, table_name: str) -> List[str]:
        return [f.name for f in self.get_exportable_fields(table_name)]

    def get_export_configuration(self) -> Dict[str, Any]:
        return {
            "tables": [
                {
                    "name": t.name,
                    "forExport": t.for_export,
                    "fieldCount": len(t.fields),
                    "exportableFieldCount": len(self.get_exportable_fields(t.name)),
                }
                for t in self.schema.tables
            ]
        }
