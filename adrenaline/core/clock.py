"""
Time source and best-effort deferred callbacks.

All engine timestamps are integer epoch milliseconds.
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def elapsed_ms(now: int, since: Optional[int]) -> Optional[int]:
    """
    Milliseconds between ``since`` and ``now``.

    Returns None when ``since`` never happened. Negative values (clock skew)
    are clamped to zero.
    """
    if since is None:
        return None
    return max(0, now - since)


def utc_date(now_ms: int) -> date:
    """Calendar date (UTC) for an epoch-millisecond timestamp"""
    return datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).date()


class Scheduler(ABC):
    """Fire-once deferred callbacks. Delivery is not guaranteed."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        pass

    @abstractmethod
    def cancel_all(self) -> None:
        """Drop every callback that has not fired yet"""
        pass


class NullScheduler(Scheduler):
    """Drops every callback; expiry then relies on lazy status reads."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        return None

    def cancel_all(self) -> None:
        return None


class ThreadingScheduler(Scheduler):
    """Deferred callbacks on daemon ``threading.Timer`` threads"""

    def __init__(self):
        self._timers: List[threading.Timer] = []
        self._lock = threading.Lock()

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        timer = threading.Timer(max(0, delay_ms) / 1000, self._run, args=(callback,))
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def _run(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Deferred callback failed: {e}")

    def cancel_all(self) -> None:
        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
