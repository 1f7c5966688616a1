# chatagent/core/service.py
"""
ProgrammingService - the orchestration loop.

One request runs analysis -> instruction -> execute repeatedly, feeding each
command's status text back as the next prompt, until a terminal command
(commit/respond) arrives or the operator declines to continue past the
loop bound.
"""

import threading
from typing import Callable, Optional

from ..commands import Command, UpdateFileCommand, is_terminal
from ..errors import CallError, ChatAgentError, DecodeError, ProtocolError, RateLimitCancelledError
from ..repo.context import ProgrammingContext
from ..utils.console import debug, get_user_input, info, is_yes, warning
from ..utils.text import is_unified_diff
from .assistants import AnalysisAssistant, GenerateCodeAssistant, InstructionAssistant
from .models import LoopEvent, LoopEventKind
from .prompts import PromptRenderer

DEFAULT_MAX_LOOPS = 25
STOPPED_BY_USER = "Process stopped by user after loop limit."
UPDATE_FAILED = "File update failed, please retry."


def log_event(event: LoopEvent) -> None:
    warning(f"[{event.kind.value}] {event.message}")


class UpdateFailedError(ChatAgentError):
    """Content generation for an update_file command did not complete."""


class ProgrammingService:

    def __init__(
        self,
        code_analysis: AnalysisAssistant,
        ask_analysis: AnalysisAssistant,
        code_instruction: InstructionAssistant,
        ask_instruction: InstructionAssistant,
        code_generator: GenerateCodeAssistant,
        patch_generator: GenerateCodeAssistant,
        max_loops: int = DEFAULT_MAX_LOOPS,
        input_getter: Callable[[str], str] = get_user_input,
        on_event: Optional[Callable[[LoopEvent], None]] = None,
        strict_protocol: bool = False,
        prompts: Optional[PromptRenderer] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.code_analysis = code_analysis
        self.ask_analysis = ask_analysis
        self.code_instruction = code_instruction
        self.ask_instruction = ask_instruction
        self.code_generator = code_generator
        self.patch_generator = patch_generator
        self.max_loops = max_loops
        self.input_getter = input_getter
        self.on_event = on_event or log_event
        self.strict_protocol = strict_protocol
        self.prompts = prompts or PromptRenderer()
        self.cancel_event = cancel_event

    # --- entry points ---

    def implement_with_context(self, context: ProgrammingContext) -> str:
        info("Starting implementation")
        prompt = self.prompts.render(
            "initial_implement",
            structure=context.get_repo_structure(),
            request=context.get_change_request(),
        )
        return self._run(prompt, context, self.code_analysis, self.code_instruction)

    def ask_with_context(self, context: ProgrammingContext) -> str:
        info("Looking for an answer")
        prompt = self.prompts.render(
            "initial_ask",
            structure=context.get_repo_structure(),
            request=context.get_change_request(),
        )
        return self._run(prompt, context, self.ask_analysis, self.ask_instruction)

    def _run(self, prompt, context, analysis, instruction) -> str:
        try:
            return self.process_request(prompt, context, analysis, instruction)
        finally:
            analysis.clear_history()
            instruction.clear_history()

    # --- loop ---

    def _emit(self, kind: LoopEventKind, message: str) -> None:
        self.on_event(LoopEvent(kind, message))

    def _next_command(self, prompt: str, analysis: AnalysisAssistant, instruction: InstructionAssistant) -> Command:
        guidance = analysis.execute(prompt, cancel_event=self.cancel_event)
        debug(f"Analysis: {guidance}")
        return instruction.instruct(guidance, cancel_event=self.cancel_event)

    def _continue_past_limit(self) -> bool:
        self._emit(LoopEventKind.LOOP_LIMIT, f"the process has run for {self.max_loops} loops")
        try:
            answer = self.input_getter(
                f"The process has run for {self.max_loops} loops. Do you want to continue? [Y]es/[N]o "
            )
        except ChatAgentError as e:
            warning(f"Error getting user input: {e}. Stopping process.")
            return False
        return is_yes(answer)

    def process_request(
        self,
        prompt: str,
        context: ProgrammingContext,
        analysis: AnalysisAssistant,
        instruction: InstructionAssistant,
    ) -> str:
        """
        Run the loop for one request.

        DecodeError and CallError abort the request. Protocol errors and
        command failures are fed back to the model as the next prompt.
        """
        loops = 0
        while True:
            loops += 1
            if loops > self.max_loops:
                if not self._continue_past_limit():
                    return STOPPED_BY_USER
                loops = 1

            try:
                command = self._next_command(prompt, analysis, instruction)
            except ProtocolError as e:
                self._emit(LoopEventKind.PROTOCOL_ERROR, str(e))
                if self.strict_protocol:
                    raise
                prompt = self.prompts.render("protocol_error", error=str(e))
                continue

            info(f"Command: {command.describe()}")
            if is_terminal(command):
                info("Received final command, task complete.")
                return command.process(context)

            prompt = self.execute_command(command, context)

    def execute_command(self, command: Command, context: ProgrammingContext) -> str:
        if isinstance(command, UpdateFileCommand):
            try:
                command = self.handle_file_update(command, context)
            except RateLimitCancelledError:
                raise
            except (CallError, DecodeError, ProtocolError, UpdateFailedError) as e:
                self._emit(LoopEventKind.UPDATE_FAILED, f"{command.file_path}: {e}")
                return UPDATE_FAILED
        try:
            return command.process(context)
        except ChatAgentError as e:
            message = f"error processing command {command.describe()}: {e}"
            self._emit(LoopEventKind.COMMAND_ERROR, message)
            return message

    # --- update_file handling ---

    def handle_file_update(self, command: UpdateFileCommand, context: ProgrammingContext) -> UpdateFileCommand:
        analysis = self.code_analysis.execute(
            self.prompts.render("context_files", file_path=command.file_path),
            cancel_event=self.cancel_event,
        )
        final = self.code_instruction.instruct(
            self.prompts.render(
                "finalize_update",
                file_path=command.file_path,
                implementation_plan=command.implementation_plan,
                analysis=analysis,
            ),
            cancel_event=self.cancel_event,
        )
        if not isinstance(final, UpdateFileCommand):
            raise UpdateFailedError(f"expected an update_file command, got {final.describe()}")

        self.generate_file_content(final, context)
        return final

    def _context_files(self, command: UpdateFileCommand, context: ProgrammingContext):
        files = []
        for path in command.context_files:
            if path == command.file_path:
                continue
            content, found = context.get_file_content(path)
            if not found:
                info(f"Context file does not exist: {path}")
                continue
            files.append((path, content))
        return files

    def generate_file_content(self, command: UpdateFileCommand, context: ProgrammingContext) -> None:
        info(f"Generating content for {command.file_path}")
        existing, exists = context.get_file_content(command.file_path)
        prompt = self.prompts.render(
            "generate_code",
            exists=exists,
            file_path=command.file_path,
            existing_content=existing,
            implementation_plan=command.implementation_plan,
            change_request=context.get_change_request(),
            context_files=self._context_files(command, context),
        )
        generated = self.code_generator.generate_code(prompt, cancel_event=self.cancel_event)

        content = generated
        if is_unified_diff(generated):
            content = self.apply_patch(command.file_path, existing if exists else "", generated)
        context.update_file_content(command.file_path, content)

    def apply_patch(self, file_path: str, existing: str, patch: str) -> str:
        """Resolve a diff-shaped response; falls back to the raw response on any failure."""
        if not existing:
            warning(f"Cannot apply a patch to empty or missing file {file_path}, using the response as content")
            return patch
        info(f"Detected git patch response, applying it to {file_path}")
        try:
            return self.patch_generator.generate_code(
                self.prompts.render("apply_patch", existing_content=existing, patch=patch),
                cancel_event=self.cancel_event,
            )
        except RateLimitCancelledError:
            raise
        except CallError as e:
            warning(f"Error applying patch for {file_path}: {e}. Using the response as content")
            return patch
