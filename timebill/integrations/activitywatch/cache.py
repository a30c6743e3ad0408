import threading
import time
from typing import Any, Callable, Optional


class BucketCache:
    """
    Holds the last bucket listing together with the time it was fetched.

    Entries older than ``ttl`` seconds are treated as missing. One cache is
    owned by each provider instance.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._value: Optional[Any] = None
        self._stored_at: Optional[float] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[Any]:
        with self._lock:
            if self._stored_at is None:
                return None
            if self._clock() - self._stored_at >= self.ttl:
                self._value = None
                self._stored_at = None
                return None
            return self._value

    def set(self, value: Any) -> None:
        with self._lock:
            self._value = value
            self._stored_at = self._clock()

    def clear(self) -> None:
        with self._lock:
            self._value = None
            self._stored_at = None
