"""
Tests for the report clients: request queue, debouncing and the paged
distinct-data loader, run against an httpx mock transport.
"""

import json
import threading
from concurrent.futures import CancelledError

import httpx
import pytest

from drugbot.client import (
    ColumnValuesClient,
    Debouncer,
    DistinctDataLoader,
    ReportDataClient,
    RequestQueue,
    clear_column_values_cache,
)
from drugbot.client.base import USER_ID_HEADER
from drugbot.reports import DistinctDataParams

ROWS = [{"generic_name": name} for name in ("abatacept", "adalimumab", "baricitinib", "etanercept", "tofacitinib")]

PARAMS = DistinctDataParams(
    table_name="generic_drugs_wide_view",
    column_list=["generic_name"],
    order_by="generic_name",
)


class FakeApi:
    """Serves distinct-data pages from ROWS and records every request body."""

    def __init__(self, rows=ROWS, status_code=200, error=None):
        self.rows = rows
        self.status_code = status_code
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append((request.url.path, body, request.headers.get(USER_ID_HEADER)))
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": self.error} if self.error else {})
        offset, limit = body["offset"], body["limit"]
        page = self.rows[offset:offset + limit]
        return httpx.Response(200, json={
            "data": page,
            "columns": [{"key": "generic_name", "displayName": "generic_name", "fieldName": "generic_name"}],
            "totalRows": len(self.rows) if page else 0,
            "offset": offset,
            "limit": limit,
        })

    @property
    def offsets(self):
        return [body["offset"] for _, body, _ in self.requests]


def make_loader(api, params=PARAMS, page_size=2, **kwargs):
    client = httpx.Client(transport=httpx.MockTransport(api), base_url="http://testserver")
    return DistinctDataLoader(params, page_size=page_size, debounce_seconds=0, client=client, **kwargs)


# =============================================================================
# RequestQueue
# =============================================================================

class TestRequestQueue:

    def test_runs_in_order_and_returns_results(self):
        queue = RequestQueue()
        calls = []

        first = queue.add(lambda: calls.append("a") or 1)
        second = queue.add(lambda: calls.append("b") or 2)

        assert (first.result(), second.result()) == (1, 2)
        assert calls == ["a", "b"]
        assert not queue.is_processing
        assert len(queue) == 0

    def test_failure_does_not_stop_the_queue(self):
        queue = RequestQueue()

        def boom():
            raise RuntimeError("boom")

        failed = queue.add(boom)
        ok = queue.add(lambda: "ok")

        with pytest.raises(RuntimeError):
            failed.result()
        assert ok.result() == "ok"

    def test_requests_from_other_threads_run_serially(self):
        queue = RequestQueue()
        started = threading.Event()
        release = threading.Event()
        order = []

        def slow():
            started.set()
            release.wait(timeout=5)
            order.append("slow")

        worker = threading.Thread(target=lambda: queue.add(slow))
        worker.start()
        assert started.wait(timeout=5)

        queued = queue.add(lambda: order.append("fast"))
        assert len(queue) == 1
        assert not queued.done()

        release.set()
        worker.join(timeout=5)
        queued.result(timeout=5)
        assert order == ["slow", "fast"]

    def test_clear_cancels_pending(self):
        queue = RequestQueue()
        started = threading.Event()
        release = threading.Event()

        def slow():
            started.set()
            release.wait(timeout=5)

        worker = threading.Thread(target=lambda: queue.add(slow))
        worker.start()
        assert started.wait(timeout=5)

        pending = queue.add(lambda: "never")
        assert queue.clear() == 1

        release.set()
        worker.join(timeout=5)
        with pytest.raises(CancelledError):
            pending.result(timeout=5)


# =============================================================================
# Debouncer
# =============================================================================

class TestDebouncer:

    def test_zero_wait_calls_through(self):
        calls = []
        Debouncer(calls.append, 0)(1)
        assert calls == [1]

    def test_latest_arguments_win(self):
        calls = []
        debounced = Debouncer(calls.append, 60)

        debounced(1)
        debounced(2)
        debounced(3)

        assert calls == []
        assert debounced.pending
        assert debounced.flush() is True
        assert calls == [3]
        assert debounced.flush() is False

    def test_cancel(self):
        calls = []
        debounced = Debouncer(calls.append, 60)
        debounced(1)
        debounced.cancel()
        assert not debounced.pending
        assert debounced.flush() is False
        assert calls == []

    def test_fires_after_wait(self):
        fired = threading.Event()
        Debouncer(lambda: fired.set(), 0.01)()
        assert fired.wait(timeout=5)


# =============================================================================
# DistinctDataLoader
# =============================================================================

class TestDistinctDataLoader:

    def test_first_page(self):
        api = FakeApi()
        loader = make_loader(api, user_id="user-1")

        loader.refetch()

        assert [r["generic_name"] for r in loader.data] == ["abatacept", "adalimumab"]
        assert loader.total_rows == 5
        assert loader.offset == 2
        assert loader.has_more is True
        assert loader.error is None
        assert not loader.is_loading
        path, body, user = api.requests[0]
        assert path == "/api/reports/distinct-data"
        assert body == {
            "tableName": "generic_drugs_wide_view",
            "columnList": ["generic_name"],
            "filters": {},
            "orderBy": "generic_name",
            "offset": 0,
            "limit": 2,
        }
        assert user == "user-1"

    def test_pages_append_without_duplicates(self):
        api = FakeApi()
        loader = make_loader(api)

        loader.refetch()
        loader.fetch_more()
        loader.fetch_more()

        assert [r["generic_name"] for r in loader.data] == [r["generic_name"] for r in ROWS]
        assert loader.offset == 5
        assert loader.has_more is False
        assert api.offsets == [0, 2, 4]

    def test_fetch_more_stops_when_exhausted(self):
        api = FakeApi()
        loader = make_loader(api)
        loader.fetch_all()
        requests = len(api.requests)

        loader.fetch_more()

        assert len(api.requests) == requests

    def test_repeated_page_request_skipped(self):
        api = FakeApi()
        loader = make_loader(api)

        loader.fetch_page(0)
        loader.fetch_page(0)

        assert api.offsets == [0]
        assert len(loader.data) == 2

    def test_refetch_reloads_first_page(self):
        api = FakeApi()
        loader = make_loader(api)
        loader.fetch_all()

        loader.refetch()

        assert api.offsets == [0, 2, 4, 0]
        assert len(loader.data) == 2
        assert loader.has_more is True

    def test_debounced_fetch_more(self):
        api = FakeApi()
        loader = make_loader(api)
        loader._debounced_fetch.wait = 60
        loader.refetch()

        loader.fetch_more()
        loader.fetch_more()
        assert api.offsets == [0]

        assert loader.flush() is True
        assert api.offsets == [0, 2]

    def test_refetch_cancels_pending_fetch_more(self):
        api = FakeApi()
        loader = make_loader(api)
        loader._debounced_fetch.wait = 60
        loader.refetch()
        loader.fetch_page(2)

        loader.fetch_more()
        loader.refetch()

        assert loader.flush() is False
        assert api.offsets == [0, 2, 0]
        assert [row["generic_name"] for row in loader.data] == ["abatacept", "adalimumab"]
        assert loader.offset == 2

    def test_page_not_continuing_loaded_rows_is_dropped(self):
        api = FakeApi()
        loader = make_loader(api)
        loader.refetch()

        loader.fetch_page(4)

        assert api.offsets == [0]
        assert len(loader.data) == 2
        assert loader.offset == 2

    def test_fetch_all(self):
        api = FakeApi()
        rows = make_loader(api, page_size=3).fetch_all()
        assert len(rows) == 5
        assert api.offsets == [0, 3]

    def test_empty_result(self):
        api = FakeApi(rows=[])
        loader = make_loader(api)
        loader.refetch()
        assert loader.data == []
        assert loader.total_rows == 0
        assert loader.has_more is False

    def test_server_error_message(self):
        api = FakeApi(status_code=400, error="Column list must be a non-empty array")
        loader = make_loader(api)
        loader.refetch()
        assert loader.error == "Column list must be a non-empty array"
        assert loader.data == []
        assert not loader.is_loading

    def test_server_error_without_message(self):
        loader = make_loader(FakeApi(status_code=500))
        loader.refetch()
        assert loader.error == "Failed to fetch distinct data"

    def test_transport_error(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(unreachable), base_url="http://testserver")
        loader = DistinctDataLoader(PARAMS, page_size=2, debounce_seconds=0, client=client)
        loader.refetch()

        assert loader.error == "Failed to fetch distinct data"
        assert not loader.is_loading

    def test_failed_request_can_be_retried(self):
        api = FakeApi(status_code=500)
        loader = make_loader(api)
        loader.refetch()

        api.status_code = 200
        loader.fetch_page(0)

        assert loader.error is None
        assert len(loader.data) == 2

    def test_reset_clears_state(self):
        api = FakeApi()
        loader = make_loader(api)
        loader.refetch()

        loader.reset({"tableName": "generic_drugs_wide_view", "columnList": ["target"]})

        assert loader.data == []
        assert loader.offset == 0
        assert loader.has_more is True
        assert loader.params.column_list == ["target"]

    def test_without_params_nothing_is_requested(self):
        api = FakeApi()
        loader = make_loader(api, params=None)
        loader.refetch()
        loader.fetch_more()
        assert api.requests == []


# =============================================================================
# Report data and column values
# =============================================================================

DEFINITION = {"name": "r", "columnList": {"target": {"isActive": True}}}


@pytest.fixture
def clear_cache():
    clear_column_values_cache()
    yield
    clear_column_values_cache()


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")


class TestReportDataClient:

    def test_fetch(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": [{"target": "TNF"}], "columns": [], "totalRows": 1})

        client = ReportDataClient(client=mock_client(handler))
        result = client.fetch(DEFINITION)

        assert result["totalRows"] == 1
        assert seen == [{"reportDefinition": DEFINITION}]

    def test_none_definition(self):
        client = ReportDataClient(client=mock_client(lambda r: httpx.Response(500)))
        assert client.fetch(None) is None

    def test_error(self):
        client = ReportDataClient(client=mock_client(
            lambda r: httpx.Response(400, json={"error": "No active columns found"})
        ))
        client.fetch(DEFINITION)
        assert client.error == "No active columns found"

    def test_failed_fetch_clears_previous_rows(self):
        responses = iter([
            httpx.Response(200, json={"data": [{"target": "TNF"}], "columns": [], "totalRows": 1}),
            httpx.Response(500, json={"error": "Failed to fetch report data: connection reset"}),
        ])
        client = ReportDataClient(client=mock_client(lambda r: next(responses)))

        assert client.fetch(DEFINITION)["totalRows"] == 1
        assert client.fetch(DEFINITION) is None
        assert client.data is None
        assert client.error == "Failed to fetch report data: connection reset"


class TestColumnValuesClient:

    def test_values_are_cached_per_column(self, clear_cache):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content))
            return httpx.Response(200, json={"values": ["JAK", "TNF"], "columnName": "target"})

        first = ColumnValuesClient(client=mock_client(handler))
        second = ColumnValuesClient(client=mock_client(handler))

        assert first.fetch(DEFINITION, "target") == ["JAK", "TNF"]
        assert second.fetch(DEFINITION, "target") == ["JAK", "TNF"]
        assert calls == [{"reportDefinition": DEFINITION, "columnName": "target"}]

        second.fetch(DEFINITION, "target", use_cache=False)
        assert len(calls) == 2

    def test_cache_key(self):
        assert ColumnValuesClient.cache_key(DEFINITION, "target") == "generic_drugs_wide_view:target"
        assert ColumnValuesClient.cache_key({"tableName": "t"}, "c") == "t:c"

    def test_errors_are_not_cached(self, clear_cache):
        responses = iter([
            httpx.Response(400, json={"error": "Column not found in report definition"}),
            httpx.Response(200, json={"values": ["SC"]}),
        ])
        client = ColumnValuesClient(client=mock_client(lambda r: next(responses)))

        assert client.fetch(DEFINITION, "route_type") == []
        assert client.error == "Column not found in report definition"
        assert client.fetch(DEFINITION, "route_type") == ["SC"]
        assert client.error is None

    def test_missing_column(self):
        client = ColumnValuesClient(client=mock_client(lambda r: httpx.Response(500)))
        assert client.fetch(DEFINITION, "") == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
