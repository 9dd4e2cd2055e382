"""
Database access for the DrugBot data service.

Usage:
    from drugbot.database import DatabaseConnection

    with DatabaseConnection() as db:
        rows = db.select("generic_drugs", where={"biologic": "Yes"})
"""
from drugbot.database.connection import DatabaseConnection
from drugbot.database.sql_builder import is_safe_name, require_safe_name, normalize_order_by

__all__ = [
    "DatabaseConnection",
    "is_safe_name",
    "require_safe_name",
    "normalize_order_by",
]
