# chatagent/core/assistants.py
"""
Thin adapters over model sessions.

- AnalysisAssistant: free-form text in, free-form guidance out.
- InstructionAssistant: guidance in, exactly one Command out, retrying when
  the structured output does not decode.
- GenerateCodeAssistant: prompt in, file content out (fences stripped).
"""

import json
import threading
import time
from typing import Any, Callable, Optional

from ..commands import Command, new_command
from ..errors import DecodeError
from ..llm.session import LLMSession
from ..utils.console import debug, warning
from ..utils.text import extract_code_block

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY = 0.1
DEFAULT_MAX_DELAY = 5.0


class AnalysisAssistant:

    def __init__(self, session: LLMSession):
        self.session = session

    def execute(self, message: str, cancel_event: Optional[threading.Event] = None) -> str:
        return self.session.send_message(message, json_mode=False, cancel_event=cancel_event)

    def clear_history(self) -> None:
        self.session.clear_history()


class InstructionAssistant:
    """
    Only decode failures are retried, with exponential backoff capped at
    max_delay. A failing call (CallError) propagates on the first attempt.
    """

    def __init__(
        self,
        session: LLMSession,
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.attempts = attempts
        self.delay = delay
        self.max_delay = max_delay
        self._sleep = sleep

    def backoff(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return min(self.delay * (2 ** (attempt - 1)), self.max_delay)

    def _decode(self, raw: str) -> Any:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def instruct(self, message: str, cancel_event: Optional[threading.Event] = None) -> Command:
        raw = ""
        last_error: Optional[Exception] = None
        for attempt in range(1, self.attempts + 1):
            raw = self.session.send_message(message, json_mode=True, cancel_event=cancel_event)
            debug(f"Raw instruction response: {raw}")
            try:
                data = self._decode(raw)
            except ValueError as e:
                # json.JSONDecodeError is a ValueError
                last_error = e
                if attempt < self.attempts:
                    warning(f"Retry attempt {attempt} failed: {e}")
                    self._sleep(self.backoff(attempt))
                continue
            return new_command(data)
        raise DecodeError(self.attempts, raw, last_error)

    def clear_history(self) -> None:
        self.session.clear_history()


class GenerateCodeAssistant:
    """Every call starts from an empty history."""

    def __init__(self, session: LLMSession):
        self.session = session

    def generate_code(self, message: str, cancel_event: Optional[threading.Event] = None) -> str:
        try:
            response = self.session.send_message(message, json_mode=False, cancel_event=cancel_event)
        finally:
            self.session.clear_history()
        return extract_code_block(response)
