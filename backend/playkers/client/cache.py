"""Query cache with key-prefix invalidation, and a background refetch loop.

Query keys are tuples whose first element is the API path, e.g.
``("/api/matches", match_id, "roster")``. Invalidating a prefix marks every
key that starts with it stale; the next fetch for a stale key hits the API.
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional, Set, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]


class QueryCache:
    def __init__(self):
        self._lock = threading.Lock()
        self._data: Dict[QueryKey, Any] = {}
        self._stale: Set[QueryKey] = set()

    def get(self, key: QueryKey, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: QueryKey, data: Any) -> None:
        with self._lock:
            self._data[key] = data
            self._stale.discard(key)

    def is_stale(self, key: QueryKey) -> bool:
        with self._lock:
            return key not in self._data or key in self._stale

    def fetch(self, key: QueryKey, fetcher: Callable[[], Any], force: bool = False) -> Any:
        """Return the cached value for ``key``, calling ``fetcher`` when stale or forced."""
        if not force and not self.is_stale(key):
            return self.get(key)
        data = fetcher()
        self.set(key, data)
        return data

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every key starting with ``prefix`` stale. Returns how many were marked."""
        prefix = tuple(prefix)
        with self._lock:
            matched = [k for k in self._data if k[:len(prefix)] == prefix]
            self._stale.update(matched)
        if matched:
            logger.debug("invalidated %d key(s) under %r", len(matched), prefix)
        return len(matched)


class Poller:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread until stopped.

    A failed tick is logged, kept on ``last_error`` and handed to ``on_error``;
    the loop keeps going, the next tick is the retry.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Any],
        name: Optional[str] = None,
        on_error: Optional[Callable[[Exception], Any]] = None,
    ):
        self.interval = interval
        self.callback = callback
        self.on_error = on_error
        self.name = name or getattr(callback, '__name__', 'poller')
        self.last_error: Optional[Exception] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.callback()
                self.last_error = None
            except Exception as exc:
                self.last_error = exc
                logger.warning("[poll-error] %s: %s", self.name, exc)
                if self.on_error is not None:
                    self.on_error(exc)
