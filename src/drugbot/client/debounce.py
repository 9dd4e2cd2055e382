"""
Trailing-edge debouncing for rapid repeated calls (scroll-driven paging).
"""

import threading
from typing import Any, Callable, Dict, Optional, Tuple


class Debouncer:
    """
    Coalesce calls made within ``wait`` seconds into one call with the most
    recent arguments, made ``wait`` seconds after the last of them.

    A ``wait`` of zero or less calls straight through.

    Example:
        load_more = Debouncer(loader.fetch_page, 0.15)
        for offset in (1000, 1000, 1000):
            load_more(offset)      # one fetch_page(1000) 150 ms later
    """

    def __init__(self, func: Callable[..., Any], wait: float):
        self.func = func
        self.wait = wait
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._call: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._call is not None

    def __call__(self, *args, **kwargs) -> None:
        if self.wait <= 0:
            self.cancel()
            self.func(*args, **kwargs)
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._call = (args, kwargs)
            self._timer = threading.Timer(self.wait, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Run the pending call now, if any. Returns whether a call was made."""
        call = self._take()
        if call is None:
            return False
        args, kwargs = call
        self.func(*args, **kwargs)
        return True

    def cancel(self) -> None:
        """Drop the pending call."""
        self._take()

    def _take(self) -> Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]]:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            call, self._call = self._call, None
        return call

    def _fire(self) -> None:
        call = self._take()
        if call is not None:
            args, kwargs = call
            self.func(*args, **kwargs)
