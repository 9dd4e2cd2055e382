"""
Paged loader for distinct report data.

Holds the rows loaded so far for one set of distinct-data parameters and
fetches further pages from ``POST /api/reports/distinct-data`` on demand.
All fetches go through a FIFO request queue; ``fetch_more`` is debounced so a
burst of scroll events turns into a single page request.

Example:
    definition = ReportDefinition.model_validate(saved["report_definition"])
    with DistinctDataLoader(definition.to_distinct_params(), user_id=user) as loader:
        loader.refetch()
        while loader.has_more:
            loader.fetch_page(loader.offset)
        rows = loader.data
"""

import json
import logging
import threading
from concurrent.futures import CancelledError
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from drugbot.client.base import ApiClient
from drugbot.client.debounce import Debouncer
from drugbot.client.request_queue import RequestQueue
from drugbot.reports.definition import DistinctDataParams
from drugbot.utils.config import get_settings

logger = logging.getLogger(__name__)

DISTINCT_DATA_PATH = "/api/reports/distinct-data"
DEFAULT_ERROR = "Failed to fetch distinct data"

ParamsLike = Union[DistinctDataParams, Mapping[str, Any]]


def _as_params(params: Optional[ParamsLike]) -> Optional[DistinctDataParams]:
    if params is None or isinstance(params, DistinctDataParams):
        return params
    return DistinctDataParams.model_validate(dict(params))


class DistinctDataLoader(ApiClient):
    """
    Incremental loader state for one distinct-data query.

    Attributes:
        params: Current query parameters (None until set)
        page_size: Rows requested per page
        data: Rows loaded so far
        columns: Column metadata from the last response
        total_rows: Total distinct rows reported by the server
        offset: Offset of the next page to load
        is_loading: A request is in flight
        error: Message from the last failed request, else None
        has_more: More rows remain on the server
    """

    def __init__(
        self,
        params: Optional[ParamsLike] = None,
        page_size: Optional[int] = None,
        debounce_seconds: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        settings = get_settings()
        self.page_size = page_size or settings.report_page_size
        self._queue = RequestQueue()
        self._state_lock = threading.RLock()
        wait = settings.distinct_data_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debounced_fetch = Debouncer(self.fetch_page, wait)
        self.params: Optional[DistinctDataParams] = None
        self._clear_state()
        self.reset(params)

    def _clear_state(self) -> None:
        self.data: List[Dict[str, Any]] = []
        self.columns: List[Dict[str, Any]] = []
        self.total_rows = 0
        self.offset = 0
        self.is_loading = False
        self.error: Optional[str] = None
        self.has_more = True
        self._last_request: Optional[str] = None

    # =========================================================================
    # STATE
    # =========================================================================

    def reset(self, params: Optional[ParamsLike] = None) -> None:
        """
        Switch to new parameters, dropping loaded rows, queued requests and
        any pending debounced fetch.
        """
        self._debounced_fetch.cancel()
        self._queue.clear()
        with self._state_lock:
            self.params = _as_params(params)
            self._clear_state()

    def request_body(self, offset: int) -> Dict[str, Any]:
        """JSON body for the page starting at ``offset``."""
        body = self.params.model_dump(by_alias=True) if self.params else {}
        body["offset"] = offset
        body["limit"] = self.page_size
        return body

    # =========================================================================
    # FETCHING
    # =========================================================================

    def fetch_page(self, offset: int = 0) -> None:
        """
        Load the page at ``offset``. Offset 0 replaces the loaded rows, later
        offsets append to them. A request identical to the last successful
        one is skipped.
        """
        params = self.params
        if params is None:
            return
        future = self._queue.add(lambda: self._fetch(offset, params))
        try:
            future.result()
        except CancelledError:
            logger.debug(f"Distinct data request for offset {offset} was dropped")

    def fetch_more(self) -> None:
        """Debounced load of the next page; no-op while loading or when exhausted."""
        with self._state_lock:
            if self.is_loading or not self.has_more or self.params is None:
                return
            offset = self.offset
        self._debounced_fetch(offset)

    def flush(self) -> bool:
        """Run a pending ``fetch_more`` immediately."""
        return self._debounced_fetch.flush()

    def refetch(self) -> None:
        """Reload from the first page, dropping any pending ``fetch_more``."""
        self._debounced_fetch.cancel()
        with self._state_lock:
            self._last_request = None
        self.fetch_page(0)

    def fetch_all(self) -> List[Dict[str, Any]]:
        """
        Load every page for the current parameters.

        Returns:
            All rows; stops early on an error (see ``error``)
        """
        self.refetch()
        while self.has_more and self.error is None and self.data:
            before = self.offset
            self.fetch_page(self.offset)
            if self.offset == before:
                break
        return list(self.data)

    def _is_stale(self, offset: int) -> bool:
        # Appended pages must continue exactly where the loaded rows end
        return offset != 0 and offset != self.offset

    def _fetch(self, offset: int, params: DistinctDataParams) -> None:
        with self._state_lock:
            if params != self.params or self._is_stale(offset):
                return
            body = self.request_body(offset)
            signature = json.dumps(body, sort_keys=True, default=str)
            if signature == self._last_request:
                logger.debug(f"Skipping duplicate distinct data request at offset {offset}")
                return
            self.is_loading = True
            self.error = None

        try:
            response = self.post_json(DISTINCT_DATA_PATH, body)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching distinct data: {e}")
            with self._state_lock:
                self.error = DEFAULT_ERROR
                self.is_loading = False
            return

        with self._state_lock:
            try:
                if params != self.params or self._is_stale(offset):
                    logger.debug(f"Dropping stale distinct data page at offset {offset}")
                    return
                if not response.is_success:
                    self.error = self.error_message(response, DEFAULT_ERROR)
                    logger.warning(f"Distinct data request failed ({response.status_code}): {self.error}")
                    return

                try:
                    result = response.json()
                except ValueError:
                    self.error = DEFAULT_ERROR
                    return
                rows = result.get("data") or []
                total = result.get("totalRows") or 0
                next_offset = (result.get("offset") or 0) + len(rows)

                self.data = list(rows) if offset == 0 else self.data + list(rows)
                self.columns = result.get("columns") or []
                self.total_rows = total
                self.offset = next_offset
                self.has_more = next_offset < total
                self._last_request = signature
                logger.debug(f"Loaded {len(rows)} distinct rows at offset {offset} ({total} total)")
            finally:
                self.is_loading = False

    def close(self) -> None:
        self._debounced_fetch.cancel()
        self._queue.clear()
        super().close()
