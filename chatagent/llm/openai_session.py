# chatagent/llm/openai_session.py
"""
Chat-completions session over the openai client. Groq and Gemini are
reached through their OpenAI-compatible endpoints with the same class.
"""

import threading
from typing import Any, Dict, List, Optional

import openai

from ..errors import CallError
from ..utils.console import debug
from .session import GenerationOptions, LLMSession, Message


class OpenAISession(LLMSession):

    def __init__(
        self,
        client: "openai.OpenAI",
        model: str,
        system_prompt: str = "",
        options: Optional[GenerationOptions] = None,
    ):
        self.client = client
        self.model = model
        self.system_prompt = system_prompt
        self.options = options or GenerationOptions()
        self._history: List[Message] = []
        self._lock = threading.Lock()

    def _request_kwargs(self, json_mode: bool) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if self.options.temperature is not None:
            kwargs["temperature"] = self.options.temperature
        if self.options.top_p is not None:
            kwargs["top_p"] = self.options.top_p
        if self.options.max_tokens is not None:
            kwargs["max_tokens"] = self.options.max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    def _trim_history(self) -> None:
        limit = self.options.max_history_length * 2
        if limit > 0 and len(self._history) > limit:
            self._history = self._history[-limit:]

    def send_message(self, message, json_mode=None, cancel_event=None) -> str:
        if json_mode is None:
            json_mode = self.options.json_mode
        with self._lock:
            messages: List[Message] = []
            if self.system_prompt:
                messages.append({"role": "system", "content": self.system_prompt})
            messages.extend(self._history)
            messages.append({"role": "user", "content": message})

            debug(f"Sending {len(message)} chars to {self.model} (json={json_mode})")
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    **self._request_kwargs(json_mode),
                )
            except openai.OpenAIError as e:
                raise CallError(f"{self.model} request failed: {e}") from e

            if not response.choices:
                raise CallError(f"{self.model} returned no choices")
            content = response.choices[0].message.content or ""

            self._history.append({"role": "user", "content": message})
            self._history.append({"role": "assistant", "content": content})
            self._trim_history()
            return content

    def get_history(self) -> List[Message]:
        with self._lock:
            return list(self._history)

    def set_history(self, history: List[Message]) -> None:
        with self._lock:
            self._history = list(history)
            self._trim_history()
