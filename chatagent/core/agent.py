# chatagent/core/agent.py
"""
LocalProgrammingAgent - entry points used by the CLI.

implement(): build a context, run the loop, flush, then offer to commit.
ask(): build a context and run the loop with the read-only assistant pair.
"""

from typing import Callable, Optional

import click

from ..errors import ChatAgentError, FileSystemError, UserInputError
from ..repo.file_lister import FileLister
from ..repo.local_context import LocalProgrammingContext
from ..utils.console import ask_yes_no, error, get_user_input, info, success, warning
from ..utils.text import strip_comment_lines
from .git_util import GitUtil, NoOpGitUtil
from .models import AgentRequest
from .service import STOPPED_BY_USER, ProgrammingService

DEFAULT_COMMIT_MESSAGE = "Automated changes by chatagent"
COMMIT_TEMPLATE_HINT = "\n\n# Lines starting with '#' are ignored. An empty message aborts the commit.\n"


class LocalProgrammingAgent:

    def __init__(
        self,
        service: ProgrammingService,
        git_util: Optional[GitUtil] = None,
        input_getter: Callable[[str], str] = get_user_input,
        auto_commit: bool = False,
        file_lister: Optional[FileLister] = None,
        editor: Callable[..., Optional[str]] = click.edit,
    ):
        self.service = service
        self.git_util = git_util or NoOpGitUtil()
        self.input_getter = input_getter
        self.auto_commit = auto_commit
        self.file_lister = file_lister
        self.editor = editor

    def create_context(self, request: AgentRequest) -> LocalProgrammingContext:
        return LocalProgrammingContext(request.directory, request.query, file_lister=self.file_lister)

    # --- implement ---

    def implement(self, request: AgentRequest) -> str:
        if not request.query.strip():
            info("Skipping empty change request.")
            return ""

        context = self.create_context(request)
        info("Working on request...")

        commit_message = ""
        try:
            commit_message = self.service.implement_with_context(context)
        except ChatAgentError as e:
            self._handle_implementation_error(e)

        try:
            context.flush_changes()
        except FileSystemError as e:
            self._handle_flush_error(request.directory, e)
        else:
            success("Changes written to disk.")

        if not commit_message or commit_message == STOPPED_BY_USER:
            commit_message = DEFAULT_COMMIT_MESSAGE
        self.handle_commit(request.directory, commit_message)
        return commit_message

    def _handle_implementation_error(self, cause: ChatAgentError) -> None:
        """Returns to flush anyway; raises to discard the staged changes."""
        warning(f"An error occurred during implementation: {cause}")
        if ask_yes_no("Flush the staged changes to disk anyway? [Y]es/[N]o ", self.input_getter):
            info("Flushing staged changes despite the error.")
            return
        info("Staged changes discarded.")
        raise ChatAgentError(f"error occurred during implementation, staged changes were discarded: {cause}") from cause

    def _handle_flush_error(self, directory: str, cause: FileSystemError) -> None:
        """Returns to keep the partial state; raises after an approved reset."""
        error(f"An error occurred while writing changes to disk: {cause}")
        if not ask_yes_no(
            "Do you want to reset to the last commit and discard the changes made by the agent? [Y]es/[N]o ",
            self.input_getter,
        ):
            warning("Leaving the partially written changes in place.")
            return
        try:
            self.git_util.reset_to_head(directory)
        except ChatAgentError as reset_error:
            raise ChatAgentError(
                f"error resetting repository after flush failure: {reset_error}; original error: {cause}"
            ) from cause
        raise ChatAgentError(f"error writing changes, repository was reset: {cause}") from cause

    # --- commit ---

    def _prompt_for_commit(self) -> str:
        try:
            choice = self.input_getter("Do you want to commit the changes? [Y]es/[N]o/[A]lways/[E]dit ")
        except UserInputError as e:
            warning(f"Error reading commit choice, not committing: {e}")
            return "N"
        return choice.strip().upper()[:1]

    def handle_commit(self, directory: str, message: str) -> None:
        if self.auto_commit:
            info("Auto-committing changes...")
            self._commit(directory, message)
            return

        choice = self._prompt_for_commit()
        if choice == "Y":
            self._commit(directory, message)
        elif choice == "A":
            info("Auto-commit enabled for this session.")
            self.auto_commit = True
            self._commit(directory, message)
        elif choice == "E":
            self._commit(directory, self.edit_commit_message(message))
        elif choice == "N":
            info("Changes not committed.")
        else:
            warning(f"Invalid choice '{choice}', changes not committed.")

    def edit_commit_message(self, message: str) -> str:
        """Open the editor; on failure offer to keep the original message."""
        try:
            edited = self.editor(message + COMMIT_TEMPLATE_HINT)
        except click.ClickException as e:
            edited = None
            error(f"Editor failed: {e.format_message()}")
        edited = strip_comment_lines(edited) if edited else ""
        if edited:
            return edited

        if ask_yes_no("Error editing message. Commit with original message? [Y]es/[N]o ", self.input_getter):
            return message
        raise ChatAgentError("commit message is empty after editing, changes were not committed")

    def _commit(self, directory: str, message: str) -> None:
        self.git_util.add(directory)
        self.git_util.commit(directory, message)

    # --- ask ---

    def ask(self, request: AgentRequest) -> str:
        info(f"Question: {request.query}")
        context = self.create_context(request)
        return self.service.ask_with_context(context)
