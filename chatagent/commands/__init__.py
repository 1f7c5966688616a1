# chatagent/commands/__init__.py
from .commands import (
    Command, ReadCommand, CheckStructureCommand, SearchCommand,
    UpdateFileCommand, MoveFileCommand, DeleteFileCommand,
    CommitCommand, RespondCommand, TERMINAL_COMMANDS, is_terminal,
)
from .parser import new_command, COMMAND_KEY

__all__ = [
    "Command", "ReadCommand", "CheckStructureCommand", "SearchCommand",
    "UpdateFileCommand", "MoveFileCommand", "DeleteFileCommand",
    "CommitCommand", "RespondCommand", "TERMINAL_COMMANDS", "is_terminal",
    "new_command", "COMMAND_KEY",
]
