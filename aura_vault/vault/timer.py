"""Auto-lock timer for vault sessions."""

import threading
from typing import Callable, Optional

from ..utils.logging import get_logger

logger = get_logger(__name__)


class AutoLockTimer:
    """
    Single-shot, resettable inactivity deadline.

    Each arm() issues a new generation token and the expiry callback receives
    it. The owner must check is_current(token) under its own lock before
    acting, so a deadline that fired while being disarmed is ignored.
    """

    def __init__(
        self,
        on_expire: Callable[[int], None],
        timeout_seconds: float,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        """
        Initialize the timer.

        Args:
            on_expire: Called with the generation token when the deadline passes
            timeout_seconds: Inactivity window (0 = never expire)
            timer_factory: threading.Timer compatible factory
        """
        self.on_expire = on_expire
        self.timeout_seconds = timeout_seconds
        self._timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._armed = False
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.timeout_seconds > 0

    @property
    def armed(self) -> bool:
        return self._armed

    def arm(self) -> None:
        """Start the countdown, replacing any pending deadline."""
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            self._armed = True
            if not self.enabled:
                return
            timer = self._timer_factory(
                self.timeout_seconds, self._fire, args=(self._generation,)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()

    def reset(self) -> None:
        """Push the deadline forward if armed."""
        if self._armed:
            self.arm()

    def disarm(self) -> None:
        """Cancel any pending deadline."""
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            self._armed = False

    def is_current(self, generation: int) -> bool:
        """True if ``generation`` belongs to the live, armed deadline."""
        with self._lock:
            return self._armed and generation == self._generation

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int) -> None:
        try:
            self.on_expire(generation)
        except Exception as e:
            logger.error(f"Auto-lock callback failed: {e}")
