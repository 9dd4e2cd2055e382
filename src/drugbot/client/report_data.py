"""
Clients for whole-report rows and per-column filter values.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from drugbot.client.base import ApiClient
from drugbot.reports.definition import DEFAULT_REPORT_TABLE, ReportDefinition

logger = logging.getLogger(__name__)

REPORT_DATA_PATH = "/api/reports/data"
COLUMN_VALUES_PATH = "/api/reports/data-values"

DefinitionLike = Union[ReportDefinition, Mapping[str, Any]]

# Shared across ColumnValuesClient instances, keyed "table:column"
_column_values_cache: Dict[str, List[str]] = {}
_cache_lock = threading.Lock()


def _definition_payload(definition: DefinitionLike) -> Dict[str, Any]:
    if isinstance(definition, ReportDefinition):
        return definition.model_dump(by_alias=True, exclude_none=True)
    return dict(definition)


def clear_column_values_cache() -> None:
    with _cache_lock:
        _column_values_cache.clear()


class ReportDataClient(ApiClient):
    """
    Fetches the rows of a report's active columns.

    After ``fetch`` either ``data`` holds ``{"data", "columns", "totalRows"}``
    or ``error`` holds the failure message.
    """

    DEFAULT_ERROR = "Failed to fetch report data"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.data: Optional[Dict[str, Any]] = None
        self.is_loading = False
        self.error: Optional[str] = None

    def fetch(self, definition: Optional[DefinitionLike]) -> Optional[Dict[str, Any]]:
        if definition is None:
            self.data = None
            return None

        self.is_loading = True
        self.error = None
        try:
            response = self.post_json(REPORT_DATA_PATH, {"reportDefinition": _definition_payload(definition)})
            if response.is_success:
                self.data = response.json()
            else:
                self.data = None
                self.error = self.error_message(response, self.DEFAULT_ERROR)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching report data: {e}")
            self.data = None
            self.error = self.DEFAULT_ERROR
        finally:
            self.is_loading = False
        return self.data


class ColumnValuesClient(ApiClient):
    """
    Fetches the distinct values of one report column for its filter list.

    Successful results are cached per ``table:column`` for the life of the
    process; pass ``use_cache=False`` (or call ``clear_column_values_cache``)
    to refresh.
    """

    DEFAULT_ERROR = "Failed to fetch column values"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.values: List[str] = []
        self.is_loading = False
        self.error: Optional[str] = None

    @staticmethod
    def cache_key(definition: DefinitionLike, column_name: str) -> str:
        if isinstance(definition, ReportDefinition):
            table_name = definition.table_name
        else:
            table_name = definition.get("tableName") or definition.get("table_name")
        return f"{table_name or DEFAULT_REPORT_TABLE}:{column_name}"

    def fetch(
        self,
        definition: Optional[DefinitionLike],
        column_name: Optional[str],
        use_cache: bool = True,
    ) -> List[str]:
        if definition is None or not column_name:
            self.values = []
            return self.values

        key = self.cache_key(definition, column_name)
        if use_cache:
            with _cache_lock:
                cached = _column_values_cache.get(key)
            if cached is not None:
                self.values = list(cached)
                return self.values

        self.is_loading = True
        self.error = None
        try:
            response = self.post_json(COLUMN_VALUES_PATH, {
                "reportDefinition": _definition_payload(definition),
                "columnName": column_name,
            })
            if response.is_success:
                self.values = list(response.json().get("values") or [])
                with _cache_lock:
                    _column_values_cache[key] = list(self.values)
            else:
                self.values = []
                self.error = self.error_message(response, self.DEFAULT_ERROR)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching column values: {e}")
            self.values = []
            self.error = self.DEFAULT_ERROR
        finally:
            self.is_loading = False
        return self.values
