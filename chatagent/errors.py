# chatagent/errors.py
"""
ChatAgent exception hierarchy.

Callers distinguish failures by type:
- CallError / DecodeError come out of the assistant layer.
- ProtocolError (and its three subclasses) come out of command construction.
- FileSystemError / PreconditionError come out of the repository context.
"""

from typing import Any, Optional


class ChatAgentError(Exception):
    """Base class for every error raised by chatagent."""


class ConfigError(ChatAgentError):
    """Invalid or incomplete configuration."""


class UserInputError(ChatAgentError):
    """The operator prompt failed (EOF, interrupt or terminal error)."""


# --- assistant layer ---

class CallError(ChatAgentError):
    """The underlying model call failed (network, auth, empty response)."""


class RateLimitCancelledError(CallError):
    """A rate-limiter wait was cancelled by the caller."""


class DecodeError(ChatAgentError):
    """Structured instruction output could not be decoded after all retries."""

    def __init__(self, attempts: int, raw_response: str, cause: Optional[BaseException] = None):
        self.attempts = attempts
        self.raw_response = raw_response
        self.cause = cause
        super().__init__(
            f"failed to decode command response as a JSON object after {attempts} attempts. "
            f"Raw response: {raw_response!r}"
        )


# --- command protocol ---

class ProtocolError(ChatAgentError):
    """A decoded payload could not be turned into a command."""


class MissingFieldError(ProtocolError):
    def __init__(self, command: str, field: str):
        self.command = command
        self.field = field
        super().__init__(f"missing '{field}' parameter for {command} command")


class InvalidFieldTypeError(ProtocolError):
    def __init__(self, command: str, field: str, expected: str):
        self.command = command
        self.field = field
        self.expected = expected
        super().__init__(f"invalid '{field}' parameter type for {command} command, expected {expected}")


class UnknownCommandError(ProtocolError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"unknown command: {value}")


# --- repository context ---

class FileSystemError(ChatAgentError):
    """Disk I/O failed while touching the real file tree."""


class PreconditionError(ChatAgentError):
    """An operation was requested on a path that does not exist on disk."""
