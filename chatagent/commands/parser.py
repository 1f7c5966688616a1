# chatagent/commands/parser.py
"""
Builds a Command from the generically decoded JSON object of a model turn.

One parser function per variant, selected by the "command" discriminant.
"""

from typing import Any, Callable, Dict, List, Mapping

from ..errors import InvalidFieldTypeError, MissingFieldError, UnknownCommandError
from .commands import (
    CheckStructureCommand, Command, CommitCommand, DeleteFileCommand,
    MoveFileCommand, ReadCommand, RespondCommand, SearchCommand,
    UpdateFileCommand,
)

COMMAND_KEY = "command"

_MISSING = object()


def _string(data: Mapping[str, Any], command: str, key: str) -> str:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        raise MissingFieldError(command, key)
    if not isinstance(value, str):
        raise InvalidFieldTypeError(command, key, "string")
    return value


def _string_list(data: Mapping[str, Any], command: str, key: str, required: bool = True) -> List[str]:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        if required:
            raise MissingFieldError(command, key)
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidFieldTypeError(command, key, "array of strings")
    return list(value)


def parse_read(data: Mapping[str, Any]) -> Command:
    return ReadCommand(files=_string_list(data, "read", "files"))


def parse_check_structure(data: Mapping[str, Any]) -> Command:
    return CheckStructureCommand()


def parse_search(data: Mapping[str, Any]) -> Command:
    return SearchCommand(query=_string(data, "search", "query"))


def parse_update_file(data: Mapping[str, Any]) -> Command:
    return UpdateFileCommand(
        file_path=_string(data, "update_file", "file_path"),
        implementation_plan=_string(data, "update_file", "implementation_plan"),
        context_files=_string_list(data, "update_file", "context_files", required=False),
    )


def parse_move_file(data: Mapping[str, Any]) -> Command:
    return MoveFileCommand(
        old_path=_string(data, "move_file", "old_path"),
        new_path=_string(data, "move_file", "new_path"),
    )


def parse_delete_file(data: Mapping[str, Any]) -> Command:
    return DeleteFileCommand(file_path=_string(data, "delete_file", "file_path"))


def parse_commit(data: Mapping[str, Any]) -> Command:
    return CommitCommand(message=_string(data, "commit", "message"))


def parse_respond(data: Mapping[str, Any]) -> Command:
    return RespondCommand(answer=_string(data, "respond", "answer"))


PARSERS: Dict[str, Callable[[Mapping[str, Any]], Command]] = {
    "read": parse_read,
    "check_structure": parse_check_structure,
    "search": parse_search,
    "update_file": parse_update_file,
    "move_file": parse_move_file,
    "delete_file": parse_delete_file,
    "commit": parse_commit,
    "respond": parse_respond,
}


def new_command(data: Any) -> Command:
    """
    Construct a command from a decoded mapping.

    Raises MissingFieldError, InvalidFieldTypeError or UnknownCommandError,
    all subclasses of ProtocolError.
    """
    if not isinstance(data, dict):
        raise UnknownCommandError(data)
    name = data.get(COMMAND_KEY)
    parser = PARSERS.get(name) if isinstance(name, str) else None
    if parser is None:
        raise UnknownCommandError(name)
    return parser(data)
