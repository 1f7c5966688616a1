# chatagent/llm/session.py
"""
ChatAgent 核心接口 - 模型会话 (LLMSession)
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

Message = Dict[str, str]


@dataclass
class GenerationOptions:
    """Sampling parameters applied to every call of one session."""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    json_mode: bool = False
    max_history_length: int = 100


class LLMSession(ABC):
    """
    抽象基类，一个带历史记录的对话会话。
    Implementations raise CallError when the underlying call fails.
    """

    @abstractmethod
    def send_message(
        self,
        message: str,
        json_mode: Optional[bool] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        pass

    @abstractmethod
    def get_history(self) -> List[Message]:
        pass

    @abstractmethod
    def set_history(self, history: List[Message]) -> None:
        pass

    def clear_history(self) -> None:
        self.set_history([])
