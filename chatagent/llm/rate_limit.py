# chatagent/llm/rate_limit.py
"""
Shared outbound rate limiting for every model session.
"""

import threading
import time
from typing import Callable, List, Optional

from ..errors import RateLimitCancelledError
from ..utils.console import debug
from .session import LLMSession, Message


class RateLimiter:
    """
    Token bucket with a burst of one.

    Each call to wait() reserves the next free slot and blocks until it
    arrives. A non-positive rate disables limiting.
    """

    def __init__(
        self,
        requests_per_minute: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.requests_per_minute = requests_per_minute
        self.interval = 60.0 / requests_per_minute if requests_per_minute > 0 else 0.0
        self._clock = clock
        self._sleep = sleep
        self._next_slot = 0.0
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    def wait(self, cancel_event: Optional[threading.Event] = None) -> None:
        """Block for a token; raises RateLimitCancelledError if cancel_event fires first."""
        if cancel_event is not None and cancel_event.is_set():
            raise RateLimitCancelledError("rate limiter wait cancelled")
        if not self.enabled:
            return

        with self._lock:
            now = self._clock()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.interval
            delay = slot - now

        if delay <= 0:
            return
        debug(f"Rate limit: waiting {delay:.2f}s")
        if cancel_event is None:
            self._sleep(delay)
            return
        if cancel_event.wait(delay):
            with self._lock:
                # give the slot back if nobody reserved after us
                if self._next_slot == slot + self.interval:
                    self._next_slot = slot
            raise RateLimitCancelledError("rate limiter wait cancelled")


class RateLimitedSession(LLMSession):
    """Wraps a session so every send first takes a token from the shared limiter."""

    def __init__(self, session: LLMSession, limiter: RateLimiter):
        self.session = session
        self.limiter = limiter

    def send_message(self, message, json_mode=None, cancel_event=None) -> str:
        self.limiter.wait(cancel_event)
        return self.session.send_message(message, json_mode=json_mode, cancel_event=cancel_event)

    def get_history(self) -> List[Message]:
        return self.session.get_history()

    def set_history(self, history: List[Message]) -> None:
        self.session.set_history(history)

    def clear_history(self) -> None:
        self.session.clear_history()
