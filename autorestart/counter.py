from __future__ import annotations

from threading import Lock


class RequestCounter:
    """Thread-safe, process-local request count (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._value: int = 0

    def increment(self) -> int:
        """Add one handled request and return the new total."""

        with self._lock:
            self._value += 1
            return self._value

    def current(self) -> int:
        with self._lock:
            return self._value
