# tests/test_text.py
from chatagent.utils.text import extract_code_block, is_unified_diff, strip_comment_lines


def test_extract_fenced_block():
    assert extract_code_block("```python\nx = 1\n```") == "x = 1\n"


def test_extract_keeps_inner_fences():
    text = "```markdown\n# Title\n```py\ncode\n```\nend\n```"
    assert extract_code_block(text) == "# Title\n```py\ncode\n```\nend\n"


def test_extract_without_fence_is_verbatim():
    assert extract_code_block("plain text\n") == "plain text\n"


def test_extract_single_fence_is_verbatim():
    assert extract_code_block("```python\nunterminated") == "```python\nunterminated"


def test_is_unified_diff():
    assert is_unified_diff("--- a/x.py\n+++ b/x.py\n")
    assert not is_unified_diff("x = 1\n--- a/x.py")


def test_strip_comment_lines():
    assert strip_comment_lines("Fix bug\n\n# comment\n  # indented\nbody\n") == "Fix bug\n\nbody"


def test_markdown_with_code_sample_is_verbatim():
    readme = "# Tool\n\nInstall it:\n\n```sh\npip install tool\n```\n\nThen run it.\n"
    assert extract_code_block(readme) == readme


def test_extract_ignores_leading_whitespace():
    assert extract_code_block("\n  ```\nbody\n```\n") == "body\n"
