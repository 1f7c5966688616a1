# tests/test_prompts.py
import pytest

from chatagent.core.prompts import ALIASES, PromptRenderer


@pytest.fixture
def renderer():
    return PromptRenderer()


def test_system_prompts_cover_every_role(renderer):
    prompts = renderer.system_prompts()
    assert set(prompts) == set(ALIASES)
    assert all(prompts.values())


def test_instruction_prompt_names_the_commands(renderer):
    text = renderer.render("instruction")
    for name in ("read", "search", "update_file", "move_file", "delete_file", "commit"):
        assert name in text


def test_initial_prompt_lists_structure(renderer):
    text = renderer.render("initial_implement", structure=["a.py", "pkg/b.py"], request="add logging")
    assert "- a.py\n- pkg/b.py" in text
    assert text.endswith("add logging")


def test_generate_code_for_new_and_existing_files(renderer):
    new = renderer.render("generate_code", exists=False, file_path="new.py",
                          implementation_plan="plan", change_request="req", context_files=[])
    assert new.startswith("Create the following file: new.py")
    assert "Content of related files" not in new

    existing = renderer.render("generate_code", exists=True, file_path="a.py", existing_content="x = 1",
                               implementation_plan="plan", change_request="req",
                               context_files=[("b.py", "y = 2")])
    assert existing.startswith("Make the following changes to this file (a.py):\nx = 1")
    assert "File: b.py\ny = 2" in existing


def test_missing_template(renderer):
    with pytest.raises(FileNotFoundError):
        renderer.render("does_not_exist")
