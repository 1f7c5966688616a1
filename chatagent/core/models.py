# chatagent/core/models.py
"""
ChatAgent 核心数据模型
"""

from dataclasses import dataclass
from enum import Enum


@dataclass
class AgentRequest:
    directory: str
    query: str


class LoopEventKind(str, Enum):
    """Diagnostics the orchestration loop reports without aborting."""
    PROTOCOL_ERROR = "protocol_error"
    COMMAND_ERROR = "command_error"
    UPDATE_FAILED = "update_failed"
    LOOP_LIMIT = "loop_limit"


@dataclass
class LoopEvent:
    kind: LoopEventKind
    message: str
