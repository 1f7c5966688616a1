# chatagent/commands/commands.py
"""
The closed set of commands a model turn can produce.

Every command exposes process(context) -> str. Expected conditions (missing
file, failed move precondition) are reported in the returned text; only
context-level I/O failures are raised.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from ..errors import PreconditionError
from ..repo.context import ProgrammingContext
from ..utils.console import info, render_markdown


class Command(ABC):
    """Base class for every command variant."""

    name: str = ""

    @abstractmethod
    def process(self, context: ProgrammingContext) -> str:
        pass

    def describe(self) -> str:
        return self.name


@dataclass
class ReadCommand(Command):
    files: List[str]
    name = "read"

    def process(self, context: ProgrammingContext) -> str:
        parts = []
        for path in self.files:
            content, _ = context.get_file_content(context.resolve_path(path))
            parts.append(f"Content of {path}:\n{content}\n\n")
        return "".join(parts)

    def describe(self) -> str:
        return f"read {', '.join(self.files)}"


@dataclass
class CheckStructureCommand(Command):
    name = "check_structure"

    def process(self, context: ProgrammingContext) -> str:
        structure = json.dumps(context.get_repo_structure(), indent=2)
        return f"The current project structure is as follows:\n{structure}"


@dataclass
class SearchCommand(Command):
    query: str
    name = "search"

    def process(self, context: ProgrammingContext) -> str:
        results = context.search_code(self.query)
        return f"Files containing {self.query}:\n{json.dumps(results, indent=2)}"

    def describe(self) -> str:
        return f"search {self.query!r}"


@dataclass
class UpdateFileCommand(Command):
    """
    Reports a completed update step. The file content itself is produced
    by the orchestration loop before process() runs.
    """
    file_path: str
    implementation_plan: str
    context_files: List[str] = field(default_factory=list)
    name = "update_file"

    def process(self, context: ProgrammingContext) -> str:
        render_markdown(self.implementation_plan, title=f"Plan for {self.file_path}")
        return f"The file {self.file_path} was updated, please carry on with the change request."

    def describe(self) -> str:
        return f"update_file {self.file_path}"


@dataclass
class MoveFileCommand(Command):
    old_path: str
    new_path: str
    name = "move_file"

    def process(self, context: ProgrammingContext) -> str:
        try:
            context.move_file(self.old_path, self.new_path)
        except PreconditionError as e:
            return f"error moving file: {e}"
        return f"File moved from {self.old_path} to {self.new_path}"

    def describe(self) -> str:
        return f"move_file {self.old_path} -> {self.new_path}"


@dataclass
class DeleteFileCommand(Command):
    file_path: str
    name = "delete_file"

    def process(self, context: ProgrammingContext) -> str:
        context.delete_file(self.file_path)
        info(f"File deleted: {self.file_path}")
        return f"File deleted: {self.file_path}"

    def describe(self) -> str:
        return f"delete_file {self.file_path}"


@dataclass
class CommitCommand(Command):
    message: str
    name = "commit"

    def process(self, context: ProgrammingContext) -> str:
        return self.message


@dataclass
class RespondCommand(Command):
    answer: str
    name = "respond"

    def process(self, context: ProgrammingContext) -> str:
        return self.answer


TERMINAL_COMMANDS = (CommitCommand, RespondCommand)


def is_terminal(command: Command) -> bool:
    return isinstance(command, TERMINAL_COMMANDS)
