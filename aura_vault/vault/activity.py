"""Activity signal source for auto-lock.

Input handling (keyboard, pointer, CLI commands) lives outside the vault.
Whatever sees user input calls ActivitySource.signal(); sessions subscribe
with on_activity() to push their auto-lock deadline forward.
"""

import threading
from typing import Callable

from ..utils.logging import get_logger

logger = get_logger(__name__)


class ActivitySource:
    """Thread-safe publisher of "user activity occurred" signals."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    def on_activity(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Subscribe to activity signals.

        Args:
            callback: Called with no arguments on every signal

        Returns:
            Function that removes the subscription (safe to call twice)
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def signal(self) -> None:
        """Notify every listener that activity occurred."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.error(f"Activity listener failed: {e}")

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)
