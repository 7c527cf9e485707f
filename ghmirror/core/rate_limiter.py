# ghmirror/core/rate_limiter.py
import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window limiter for outbound API calls.

    At most ``budget`` calls are let through per window, measured from the
    window's own start. When the budget is spent before the window is over,
    the caller sleeps for as long as the window has already run and a new
    window starts once it wakes up.

    Example:
        >>> limiter = RateLimiter(budget=60)
        >>> limiter.acquire()  # blocks only when the budget is exhausted
    """

    def __init__(
        self,
        budget: int,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if budget < 1:
            raise ValueError("budget must be at least 1 call per window")

        self.budget = budget
        self.window = window
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()

        self.calls = 0
        self.window_start = clock()

    def acquire(self) -> float:
        """Take one call from the current window.

        Returns the number of seconds the caller was blocked (0.0 if none).
        """
        waited = 0.0
        with self._lock:
            now = self._clock()
            elapsed = now - self.window_start

            if elapsed >= self.window:
                logger.debug("Tick, num_calls = %d, zeroing", self.calls)
                self._reset(now)
            elif self.calls >= self.budget:
                logger.debug("Sleeping for %.2fs (num_calls = %d)", elapsed, self.calls)
                self._sleep(elapsed)
                waited = elapsed
                self._reset(self._clock())

            self.calls += 1
        return waited

    def _reset(self, now: float) -> None:
        self.calls = 0
        self.window_start = now
