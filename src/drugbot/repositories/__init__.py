"""
Repositories for the DrugBot database.

Usage:
    from drugbot.database import DatabaseConnection
    from drugbot.repositories import EntityRepository, AggregateRepository

    with DatabaseConnection() as db:
        drug = EntityRepository(db).get_entity_by_key("generic_1712345678901_ab12cd34e")
        routes = AggregateRepository(db).get_aggregate_by_entity_uid(drug.entity_uid, "GenericRoute")
"""
from drugbot.repositories.base import BaseRepository, require_connection
from drugbot.repositories.entity_repository import EntityRepository
from drugbot.repositories.child_entity_repository import ChildEntityRepository
from drugbot.repositories.aggregate_repository import AggregateRepository
from drugbot.repositories.dynamic_repository import DynamicTableRepository
from drugbot.repositories.report_repository import ReportRepository
from drugbot.repositories.select_list_repository import SelectListRepository

__all__ = [
    "BaseRepository",
    "require_connection",
    "EntityRepository",
    "ChildEntityRepository",
    "AggregateRepository",
    "DynamicTableRepository",
    "ReportRepository",
    "SelectListRepository",
]
