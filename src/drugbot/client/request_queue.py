"""
First-in first-out request queue.

Requests run one at a time in submission order. The thread that submits to an
idle queue drains it; submissions from other threads while it is draining are
picked up by that same thread, so no two requests ever overlap.
"""

import logging
import threading
from collections import deque
from concurrent.futures import Future
from typing import Any, Callable, Deque, Tuple

logger = logging.getLogger(__name__)


class RequestQueue:
    """Serial executor for client requests."""

    def __init__(self):
        self._pending: Deque[Tuple[Callable[[], Any], Future]] = deque()
        self._lock = threading.Lock()
        self._processing = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return self._processing

    def add(self, request: Callable[[], Any]) -> Future:
        """
        Queue a request.

        Args:
            request: Zero-argument callable performing the request

        Returns:
            Future resolved with the request's result (or its exception).
            Cancelled if the queue is cleared before the request runs.
        """
        future: Future = Future()
        with self._lock:
            self._pending.append((request, future))
            if self._processing:
                return future
            self._processing = True

        self._drain()
        return future

    def clear(self) -> int:
        """Drop every request that has not started yet. Returns how many were dropped."""
        with self._lock:
            dropped = list(self._pending)
            self._pending.clear()
        for _, future in dropped:
            future.cancel()
        if dropped:
            logger.debug(f"Cleared {len(dropped)} pending requests")
        return len(dropped)

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._pending:
                    self._processing = False
                    return
                request, future = self._pending.popleft()

            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(request())
            except Exception as e:
                logger.error(f"Queued request failed: {e}")
                future.set_exception(e)
