import time
import logging
from collections import OrderedDict
from threading import Lock
from typing import Callable, Optional, Tuple

from area_agent.models.schemas import GeocodeResult

logger = logging.getLogger(__name__)


class GeocodeCache:
    """
    Thread-safe LRU map of normalized address -> GeocodeResult with an optional time-to-live.

    Entries are never replaced while they are live: `put` on an existing key keeps the
    first value and returns it, so concurrent lookups of the same address converge on
    one coordinate. `max_entries <= 0` removes the size bound, `ttl_seconds <= 0`
    disables expiry.
    """

    def __init__(self, max_entries: int = 2048, ttl_seconds: float = 0, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = Lock()
        self._entries: "OrderedDict[str, Tuple[float, GeocodeResult]]" = OrderedDict()

    def _is_expired(self, stored_at: float) -> bool:
        return self.ttl_seconds > 0 and self._clock() - stored_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[GeocodeResult]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._is_expired(stored_at):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def put(self, key: str, value: GeocodeResult) -> GeocodeResult:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not self._is_expired(entry[0]):
                self._entries.move_to_end(key)
                return entry[1]

            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            if self.max_entries > 0:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug(f"Evicted geocode cache entry '{evicted}'.")
            return value

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
