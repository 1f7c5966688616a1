# chatagent/core/__init__.py
from .models import AgentRequest, LoopEvent, LoopEventKind
from .assistants import AnalysisAssistant, InstructionAssistant, GenerateCodeAssistant
from .service import ProgrammingService, STOPPED_BY_USER, UPDATE_FAILED
from .agent import LocalProgrammingAgent, DEFAULT_COMMIT_MESSAGE
from .git_util import GitUtil, RealGitUtil, NoOpGitUtil, default_git_util

__all__ = [
    "AgentRequest", "LoopEvent", "LoopEventKind",
    "AnalysisAssistant", "InstructionAssistant", "GenerateCodeAssistant",
    "ProgrammingService", "STOPPED_BY_USER", "UPDATE_FAILED",
    "LocalProgrammingAgent", "DEFAULT_COMMIT_MESSAGE",
    "GitUtil", "RealGitUtil", "NoOpGitUtil", "default_git_util",
]
