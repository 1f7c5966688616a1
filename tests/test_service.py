# tests/test_service.py
from unittest.mock import MagicMock

import pytest

from chatagent.commands import (
    CheckStructureCommand, CommitCommand, MoveFileCommand, ReadCommand,
    RespondCommand, SearchCommand, UpdateFileCommand,
)
from chatagent.core.models import LoopEventKind
from chatagent.core.service import STOPPED_BY_USER, UPDATE_FAILED, ProgrammingService
from chatagent.errors import (
    CallError, DecodeError, FileSystemError, MissingFieldError, UserInputError,
)

DIFF = "--- a/src/main.py\n+++ b/src/main.py\n@@ -1 +1 @@\n-x\n+y\n"


def make_service(mock_assistants, **kwargs):
    events = []
    service = ProgrammingService(on_event=events.append, **mock_assistants, **kwargs)
    return service, events


def test_terminal_command_ends_loop(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "Commit now."
    mock_assistants['code_instruction'].instruct.return_value = CommitCommand(message="Add greeting")
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "Add greeting"
    first_prompt = mock_assistants['code_analysis'].execute.call_args_list[0][0][0]
    assert "- src/main.py" in first_prompt
    assert "add a greeting" in first_prompt
    mock_assistants['code_analysis'].clear_history.assert_called_once()
    mock_assistants['code_instruction'].clear_history.assert_called_once()
    assert events == []


def test_command_output_becomes_next_prompt(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.side_effect = [
        ReadCommand(files=["README.md"]),
        CommitCommand(message="done"),
    ]
    service, _ = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "done"
    second_prompt = mock_assistants['code_analysis'].execute.call_args_list[1][0][0]
    assert second_prompt == "Content of README.md:\n# demo\n\n\n"


def test_ask_uses_ask_pair(mock_assistants, local_context):
    mock_assistants['ask_analysis'].execute.return_value = "The answer is 42."
    mock_assistants['ask_instruction'].instruct.side_effect = [
        CheckStructureCommand(),
        RespondCommand(answer="42"),
    ]
    service, _ = make_service(mock_assistants)

    assert service.ask_with_context(local_context) == "42"
    mock_assistants['code_analysis'].execute.assert_not_called()
    mock_assistants['ask_instruction'].clear_history.assert_called_once()


def test_protocol_error_is_fed_back(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.side_effect = [
        MissingFieldError("read", "files"),
        CommitCommand(message="done"),
    ]
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "done"
    assert [e.kind for e in events] == [LoopEventKind.PROTOCOL_ERROR]
    corrective = mock_assistants['code_analysis'].execute.call_args_list[1][0][0]
    assert "missing 'files' parameter for read command" in corrective


def test_strict_protocol_aborts(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.side_effect = MissingFieldError("read", "files")
    service, events = make_service(mock_assistants, strict_protocol=True)

    with pytest.raises(MissingFieldError):
        service.implement_with_context(local_context)
    assert len(events) == 1
    mock_assistants['code_instruction'].clear_history.assert_called_once()


def test_decode_error_aborts_request(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.side_effect = DecodeError(3, "garbage")
    service, _ = make_service(mock_assistants)

    with pytest.raises(DecodeError):
        service.implement_with_context(local_context)


def test_initial_call_error_propagates(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.side_effect = CallError("auth failed")
    service, _ = make_service(mock_assistants)

    with pytest.raises(CallError):
        service.implement_with_context(local_context)


def test_loop_limit_stop(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.return_value = ReadCommand(files=["README.md"])
    input_getter = MagicMock(return_value="n")
    service, events = make_service(mock_assistants, max_loops=2, input_getter=input_getter)

    assert service.implement_with_context(local_context) == STOPPED_BY_USER
    assert mock_assistants['code_instruction'].instruct.call_count == 2
    input_getter.assert_called_once()
    assert events[-1].kind == LoopEventKind.LOOP_LIMIT


def test_loop_limit_input_failure_stops(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.return_value = ReadCommand(files=[])
    input_getter = MagicMock(side_effect=UserInputError("EOF"))
    service, _ = make_service(mock_assistants, max_loops=1, input_getter=input_getter)

    assert service.implement_with_context(local_context) == STOPPED_BY_USER


def test_loop_limit_continue_resets_counter(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.side_effect = [
        ReadCommand(files=[]), ReadCommand(files=[]), ReadCommand(files=[]),
        CommitCommand(message="finally"),
    ]
    input_getter = MagicMock(return_value="yes")
    service, _ = make_service(mock_assistants, max_loops=2, input_getter=input_getter)

    assert service.implement_with_context(local_context) == "finally"
    input_getter.assert_called_once()


def test_update_file_generates_content(mock_assistants, local_context):
    plan = UpdateFileCommand(file_path="src/main.py", implementation_plan="print hi")
    final = UpdateFileCommand(file_path="src/main.py", implementation_plan="print hi",
                              context_files=["README.md", "src/main.py", "missing.py"])
    mock_assistants['code_analysis'].execute.return_value = "guidance"
    mock_assistants['code_instruction'].instruct.side_effect = [plan, final, CommitCommand(message="ok")]
    mock_assistants['code_generator'].generate_code.return_value = "print('hi')\n"
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "ok"
    assert local_context.get_file_content("src/main.py") == ("print('hi')\n", True)
    assert local_context.pending_updated == ["src/main.py"]

    gen_prompt = mock_assistants['code_generator'].generate_code.call_args[0][0]
    assert "def main():" in gen_prompt
    assert "File: README.md" in gen_prompt
    assert "File: src/main.py" not in gen_prompt
    assert "missing.py" not in gen_prompt
    status = mock_assistants['code_analysis'].execute.call_args_list[-1][0][0]
    assert status == "The file src/main.py was updated, please carry on with the change request."
    mock_assistants['patch_generator'].generate_code.assert_not_called()
    assert events == []


def test_update_new_file(mock_assistants, local_context):
    cmd = UpdateFileCommand(file_path="src/new.py", implementation_plan="create it")
    mock_assistants['code_analysis'].execute.return_value = "none"
    mock_assistants['code_instruction'].instruct.side_effect = [cmd, cmd, CommitCommand(message="ok")]
    mock_assistants['code_generator'].generate_code.return_value = "x = 1\n"
    service, _ = make_service(mock_assistants)

    service.implement_with_context(local_context)
    gen_prompt = mock_assistants['code_generator'].generate_code.call_args[0][0]
    assert "Create the following file: src/new.py" in gen_prompt
    assert local_context.pending_new == ["src/new.py"]


def test_diff_response_is_patched(mock_assistants, local_context):
    cmd = UpdateFileCommand(file_path="src/main.py", implementation_plan="p")
    mock_assistants['code_analysis'].execute.return_value = "g"
    mock_assistants['code_instruction'].instruct.side_effect = [cmd, cmd, CommitCommand(message="ok")]
    mock_assistants['code_generator'].generate_code.return_value = DIFF
    mock_assistants['patch_generator'].generate_code.return_value = "patched\n"
    service, _ = make_service(mock_assistants)

    service.implement_with_context(local_context)
    assert local_context.get_file_content("src/main.py") == ("patched\n", True)
    patch_prompt = mock_assistants['patch_generator'].generate_code.call_args[0][0]
    assert DIFF.strip() in patch_prompt


def test_patch_failure_falls_back_to_raw_response(mock_assistants, local_context):
    cmd = UpdateFileCommand(file_path="src/main.py", implementation_plan="p")
    mock_assistants['code_analysis'].execute.return_value = "g"
    mock_assistants['code_instruction'].instruct.side_effect = [cmd, cmd, CommitCommand(message="ok")]
    mock_assistants['code_generator'].generate_code.return_value = DIFF
    mock_assistants['patch_generator'].generate_code.side_effect = CallError("patch model down")
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "ok"
    assert local_context.get_file_content("src/main.py") == (DIFF, True)
    assert events == []


def test_diff_for_new_file_skips_patching(mock_assistants, local_context):
    cmd = UpdateFileCommand(file_path="src/new.py", implementation_plan="p")
    mock_assistants['code_analysis'].execute.return_value = "g"
    mock_assistants['code_instruction'].instruct.side_effect = [cmd, cmd, CommitCommand(message="ok")]
    mock_assistants['code_generator'].generate_code.return_value = DIFF
    service, _ = make_service(mock_assistants)

    service.implement_with_context(local_context)
    mock_assistants['patch_generator'].generate_code.assert_not_called()
    assert local_context.get_file_content("src/new.py") == (DIFF, True)


def test_update_generation_failure_is_reported(mock_assistants, local_context):
    cmd = UpdateFileCommand(file_path="src/main.py", implementation_plan="p")
    mock_assistants['code_analysis'].execute.return_value = "g"
    mock_assistants['code_instruction'].instruct.side_effect = [cmd, cmd, CommitCommand(message="ok")]
    mock_assistants['code_generator'].generate_code.side_effect = CallError("timeout")
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "ok"
    assert [e.kind for e in events] == [LoopEventKind.UPDATE_FAILED]
    status = mock_assistants['code_analysis'].execute.call_args_list[-1][0][0]
    assert status == UPDATE_FAILED
    assert local_context.pending_updated == []


def test_finalize_must_return_update_file(mock_assistants, local_context):
    cmd = UpdateFileCommand(file_path="src/main.py", implementation_plan="p")
    mock_assistants['code_analysis'].execute.return_value = "g"
    mock_assistants['code_instruction'].instruct.side_effect = [
        cmd, ReadCommand(files=["a"]), CommitCommand(message="ok"),
    ]
    service, events = make_service(mock_assistants)

    service.implement_with_context(local_context)
    assert events[0].kind == LoopEventKind.UPDATE_FAILED
    mock_assistants['code_generator'].generate_code.assert_not_called()


def test_command_error_is_fed_back(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "g"
    mock_assistants['code_instruction'].instruct.side_effect = [
        MoveFileCommand(old_path="README.md", new_path="docs/README.md"),
        CommitCommand(message="ok"),
    ]
    local_context.move_file = MagicMock(side_effect=FileSystemError("permission denied"))
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "ok"
    assert events[0].kind == LoopEventKind.COMMAND_ERROR
    status = mock_assistants['code_analysis'].execute.call_args_list[-1][0][0]
    assert "permission denied" in status


def test_bracketed_model_text_does_not_break_logging(mock_assistants, local_context):
    mock_assistants['code_analysis'].execute.return_value = "search for [/i] markers"
    mock_assistants['code_instruction'].instruct.side_effect = [
        SearchCommand(query="items[/i]"),
        CommitCommand(message="done [/b]"),
    ]
    service, events = make_service(mock_assistants)

    assert service.implement_with_context(local_context) == "done [/b]"
    status = mock_assistants['code_analysis'].execute.call_args_list[1][0][0]
    assert status.startswith("Files containing items[/i]:")
    assert events == []
