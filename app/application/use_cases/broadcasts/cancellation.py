"""In-process cancellation tokens for running dispatches."""

from __future__ import annotations

import threading


class CancellationRegistry:
    """Map in-flight batch ids to the event their fan-out polls between chunks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: dict[int, threading.Event] = {}

    def register(self, batch_id: int) -> threading.Event:
        with self._lock:
            return self._tokens.setdefault(batch_id, threading.Event())

    def cancel(self, batch_id: int) -> bool:
        """Signal the batch; ``False`` when it is not running in this process."""

        with self._lock:
            token = self._tokens.get(batch_id)
        if token is None:
            return False
        token.set()
        return True

    def release(self, batch_id: int) -> None:
        with self._lock:
            self._tokens.pop(batch_id, None)

    def is_running(self, batch_id: int) -> bool:
        with self._lock:
            return batch_id in self._tokens

    def batch_ids(self) -> list[int]:
        with self._lock:
            return list(self._tokens)


cancellation_registry = CancellationRegistry()

__all__ = ["CancellationRegistry", "cancellation_registry"]
