"""
Exception hierarchy for the DrugBot data service.

The API layer maps these onto HTTP status codes (see drugbot.api.errors).
"""
from typing import List, Optional


class DrugBotError(Exception):
    """Base class for all DrugBot errors."""


# =============================================================================
# Model lookups
# =============================================================================

class UnknownEntityTypeError(DrugBotError, LookupError):
    """Entity type has no mapping in the model map."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"Unknown entity type: {entity_type}")


class UnknownAggregateTypeError(DrugBotError, LookupError):
    """Aggregate type has no mapping in the model map."""

    def __init__(self, aggregate_type: str):
        self.aggregate_type = aggregate_type
        super().__init__(f"Unknown aggregate type: {aggregate_type}")


# =============================================================================
# Request validation
# =============================================================================

class InvalidRequestError(DrugBotError, ValueError):
    """Request parameters are missing or malformed."""


class InvalidNameError(InvalidRequestError):
    """Table or column name contains characters outside [a-zA-Z0-9_]."""


class UnknownTableError(InvalidRequestError):
    """Table is not part of the database schema."""

    def __init__(self, table: str):
        self.table = table
        super().__init__("Table not found in schema")


class UnknownColumnError(InvalidRequestError):
    """Column is not part of the table."""

    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(f"Column not found in table: {column}")


# =============================================================================
# Persistence
# =============================================================================

class RepositoryError(DrugBotError):
    """A database operation failed."""


class RecordNotFoundError(RepositoryError):
    """The row addressed by a write does not exist."""


class ParentEntityNotFoundError(RepositoryError):
    """A child entity was created under a parent key that does not exist."""

    def __init__(self, parent_key: str):
        self.parent_key = parent_key
        super().__init__("Parent entity not found")


class CascadeDeleteError(RepositoryError):
    """Deleting dependent rows failed part way through a cascading delete."""

    def __init__(self, table: str, cleared_tables: Optional[List[str]] = None, cause: Optional[Exception] = None):
        self.table = table
        self.cleared_tables = list(cleared_tables or [])
        self.cause = cause
        super().__init__(f"Failed to delete child records from {table}")
