"""
统一的控制台输出工具，基于 rich 实现美观、结构化的 CLI 交互。

All agent logging goes through the helpers below; `set_log_level` gates
what is printed.
"""
from rich.console import Console as RichConsole
from rich.markdown import Markdown
from rich.markup import escape
from rich.theme import Theme
from typing import Any, Optional

from ..errors import UserInputError

# 自定义主题
CUSTOM_THEME = Theme({
    "info": "cyan bold",
    "success": "green bold",
    "warning": "yellow bold",
    "error": "red bold",
    "debug": "dim",
    "heading": "bold underline",
    "path": "magenta",
    "prompt": "red bold",
})

LOG_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}
DEFAULT_LOG_LEVEL = "info"
DEFAULT_CODE_THEME = "monokai"

# 全局控制台实例（单例）
console = RichConsole(theme=CUSTOM_THEME, soft_wrap=True)

_state = {"level": LOG_LEVELS[DEFAULT_LOG_LEVEL], "code_theme": DEFAULT_CODE_THEME}


def set_log_level(level: str):
    """Set the minimum level printed by the logging helpers."""
    if level not in LOG_LEVELS:
        raise ValueError(f"invalid log level: {level}, allowed levels are {', '.join(LOG_LEVELS)}")
    _state["level"] = LOG_LEVELS[level]


def set_code_theme(theme: str):
    _state["code_theme"] = theme


def _enabled(level: str) -> bool:
    return LOG_LEVELS[level] >= _state["level"]


# --- 便捷输出函数 ---

def debug(message: str):
    if _enabled("debug"):
        console.print(f"🐞 [debug]DEBUG[/debug]: {escape(message)}", markup=True, highlight=False)


def info(message: str):
    """蓝色信息提示"""
    if _enabled("info"):
        console.print(f"💡 [info]INFO[/info]: {escape(message)}")


def success(message: str):
    """绿色成功提示"""
    if _enabled("info"):
        console.print(f"✅ [success]SUCCESS[/success]: {escape(message)}")


def warning(message: str):
    """黄色警告提示"""
    if _enabled("warning"):
        console.print(f"⚠️  [warning]WARNING[/warning]: {escape(message)}")


def error(message: str):
    """红色错误提示"""
    if _enabled("error"):
        console.print(f"❌ [error]ERROR[/error]: {escape(message)}")


def heading(title: str):
    """标题输出"""
    console.print(f"\n🎯 [heading]{escape(title)}[/heading]\n")


def print_json(data: Any):
    """美化输出 JSON/字典数据"""
    console.print_json(data=data)


def render_markdown(text: str, title: Optional[str] = None):
    """Render model-written Markdown; falls back to plain text if rich rejects it."""
    if title:
        console.print(f"[path]{escape(title)}[/path]")
    try:
        console.print(Markdown(text, code_theme=_state["code_theme"]))
    except Exception:
        console.print(text, markup=False, highlight=False)


# --- 交互式输入 ---

def get_user_input(prompt: str) -> str:
    """
    Read one line from the operator.

    EOF, Ctrl-C and terminal failures raise UserInputError so callers can
    tell "no answer" apart from an empty answer.
    """
    try:
        return console.input(f"[prompt]>>[/prompt] {escape(prompt)}")
    except (EOFError, KeyboardInterrupt) as e:
        console.print()
        raise UserInputError(f"input aborted: {type(e).__name__}") from e
    except OSError as e:
        raise UserInputError(f"error reading line: {e}") from e


def confirm(prompt: str, default: bool = True) -> bool:
    """确认对话（Y/N），带默认值"""
    yes_no = "[Y/n]" if default else "[y/N]"
    response = console.input(f"❓ {escape(prompt)} {escape(yes_no)}: ").strip().lower()
    if not response:
        return default
    return response in ("y", "yes")


def is_yes(answer: str) -> bool:
    return answer.strip().lower() in ("y", "yes")


def ask_yes_no(prompt: str, input_getter=get_user_input) -> bool:
    """确认对话（Y/N）; an input failure counts as "no"."""
    try:
        answer = input_getter(prompt)
    except UserInputError as e:
        warning(f"Could not read an answer, assuming no: {e}")
        return False
    return is_yes(answer)


# --- 初始化欢迎信息 ---

def show_welcome():
    """显示欢迎横幅"""
    console.print("\n" + "═" * 50, style="bold blue")
    console.print("🚀 [bold green]ChatAgent[/bold green] - AI change requests for your repository", end="")
    console.print(" 🤖", emoji=True)
    console.print("═" * 50 + "\n", style="bold blue")
