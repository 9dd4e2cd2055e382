"""
Shared HTTP plumbing for the report clients.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from drugbot.utils.config import get_settings

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
DEFAULT_TIMEOUT = 30.0


class ApiClient:
    """
    Thin wrapper around an ``httpx.Client`` pointed at the DrugBot API.

    Pass ``client`` to share a connection pool (or a mock transport in
    tests); otherwise one is created from settings and closed by ``close()``.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        base_url: Optional[str] = None,
        user_id: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        headers = {USER_ID_HEADER: user_id} if user_id else {}
        if client is None:
            client = httpx.Client(
                base_url=base_url or get_settings().api_base_url,
                headers=headers,
                timeout=timeout,
            )
            self._owns_client = True
        else:
            client.headers.update(headers)
            self._owns_client = False
        self.http = client

    def post_json(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        return self.http.post(path, json=payload)

    @staticmethod
    def error_message(response: httpx.Response, default: str) -> str:
        """The ``error`` field of a JSON error body, else ``default``."""
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return default

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
