"""
Python clients for the report endpoints.
"""
from drugbot.client.base import ApiClient, USER_ID_HEADER
from drugbot.client.debounce import Debouncer
from drugbot.client.distinct_data import DistinctDataLoader
from drugbot.client.report_data import (
    ColumnValuesClient,
    ReportDataClient,
    clear_column_values_cache,
)
from drugbot.client.request_queue import RequestQueue

__all__ = [
    "ApiClient",
    "USER_ID_HEADER",
    "Debouncer",
    "DistinctDataLoader",
    "ColumnValuesClient",
    "ReportDataClient",
    "clear_column_values_cache",
    "RequestQueue",
]
