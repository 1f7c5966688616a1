# chatagent/llm/__init__.py
from .session import LLMSession, GenerationOptions, Message
from .rate_limit import RateLimiter, RateLimitedSession
from .openai_session import OpenAISession
from .builder import SessionBuilder, create_client, SERVICES

__all__ = [
    "LLMSession", "GenerationOptions", "Message",
    "RateLimiter", "RateLimitedSession",
    "OpenAISession", "SessionBuilder", "create_client", "SERVICES",
]
