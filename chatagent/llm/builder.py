# chatagent/llm/builder.py
"""
Builds rate-limited sessions for the configured model service.
"""

from typing import Optional

import openai

from ..errors import ConfigError
from .openai_session import OpenAISession
from .rate_limit import RateLimitedSession, RateLimiter
from .session import GenerationOptions, LLMSession

SERVICES = ("openai", "groq", "gemini")

SERVICE_BASE_URLS = {
    "openai": None,
    "groq": "https://api.groq.com/openai/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
}


def create_client(service: str, api_key: str) -> "openai.OpenAI":
    if service not in SERVICE_BASE_URLS:
        raise ConfigError(f"invalid programming service type: {service}")
    if not api_key:
        raise ConfigError(f"no API key configured for service '{service}'")
    base_url = SERVICE_BASE_URLS[service]
    if base_url is None:
        return openai.OpenAI(api_key=api_key)
    return openai.OpenAI(api_key=api_key, base_url=base_url)


class SessionBuilder:
    """All sessions built by one builder share the client and the rate limiter."""

    def __init__(
        self,
        service: str,
        api_key: str,
        limiter: RateLimiter,
        max_history_length: int = 100,
        client: Optional["openai.OpenAI"] = None,
    ):
        self.service = service
        self.limiter = limiter
        self.max_history_length = max_history_length
        self.client = client or create_client(service, api_key)

    def build(
        self,
        model: str,
        system_prompt: str,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        json_mode: bool = False,
    ) -> LLMSession:
        options = GenerationOptions(
            temperature=temperature,
            top_p=top_p,
            json_mode=json_mode,
            max_history_length=self.max_history_length,
        )
        session = OpenAISession(self.client, model, system_prompt=system_prompt, options=options)
        return RateLimitedSession(session, self.limiter)
