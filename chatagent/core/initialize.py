# chatagent/core/initialize.py
"""
Wires sessions, assistants, the service and the agent from a Config.
"""

import threading
from typing import Optional

from ..config import Config
from ..llm.builder import SessionBuilder
from ..llm.rate_limit import RateLimiter
from ..utils.console import debug
from .agent import LocalProgrammingAgent
from .assistants import AnalysisAssistant, GenerateCodeAssistant, InstructionAssistant
from .git_util import default_git_util
from .prompts import PromptRenderer
from .service import ProgrammingService

# (temperature, top_p) per session role
SAMPLING = {
    "analysis": (0.3, 0.5),
    "generate_code": (0.3, 0.45),
    "patch": (0.2, 0.3),
}


def init_programming_service(
    config: Config,
    builder: Optional[SessionBuilder] = None,
    prompts: Optional[PromptRenderer] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ProgrammingService:
    prompts = prompts or PromptRenderer()
    if builder is None:
        builder = SessionBuilder(
            config.service,
            config.api_key,
            RateLimiter(config.rate_limit_rpm),
            max_history_length=config.max_history_length,
        )
    system = prompts.system_prompts()
    debug(f"Building sessions for service {config.service}")

    def analysis(role):
        temperature, top_p = SAMPLING["analysis"]
        session = builder.build(config.analysis_model, system[role], temperature=temperature, top_p=top_p)
        return AnalysisAssistant(session)

    def instruction(role):
        return InstructionAssistant(builder.build(config.instructions_model, system[role], json_mode=True))

    def generator(role):
        temperature, top_p = SAMPLING[role]
        return GenerateCodeAssistant(
            builder.build(config.generate_code_model, system[role], temperature=temperature, top_p=top_p)
        )

    return ProgrammingService(
        code_analysis=analysis("analysis"),
        ask_analysis=analysis("ask_analysis"),
        code_instruction=instruction("instruction"),
        ask_instruction=instruction("ask_instruction"),
        code_generator=generator("generate_code"),
        patch_generator=generator("patch"),
        max_loops=config.max_process_loops,
        strict_protocol=config.strict_protocol,
        prompts=prompts,
        cancel_event=cancel_event,
    )


def init_agent(config: Config, service: Optional[ProgrammingService] = None) -> LocalProgrammingAgent:
    service = service or init_programming_service(config)
    return LocalProgrammingAgent(
        service,
        git_util=default_git_util(config.directory),
        auto_commit=config.auto_commit,
    )
