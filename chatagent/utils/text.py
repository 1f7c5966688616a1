# chatagent/utils/text.py
"""Helpers for post-processing model-generated text."""

FENCE = "```"
DIFF_HEADER = "--- a/"


def extract_code_block(text: str) -> str:
    """
    Return the body of a response wrapped in a fenced code block.

    Only a response that opens with a fence is unwrapped. Everything between
    the first fence line and the last fence is kept, so nested fences inside
    the body survive. Any other text, including Markdown that merely
    contains code samples, is returned unchanged.
    """
    stripped = text.strip()
    if not stripped.startswith(FENCE):
        return text
    body_start = stripped.find("\n")
    end = stripped.rfind(FENCE)
    if body_start == -1 or end <= body_start:
        return text
    return stripped[body_start + 1:end].strip() + "\n"


def is_unified_diff(text: str) -> bool:
    return text.lstrip().startswith(DIFF_HEADER)


def strip_comment_lines(text: str) -> str:
    """Drop lines starting with '#', as git does for commit message templates."""
    lines = [line for line in text.splitlines() if not line.lstrip().startswith("#")]
    return "\n".join(lines).strip()
