# chatagent/cli.py
"""
ChatAgent CLI 主入口
"""
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .config import CONFIG_FILE, Config, load_config, render_default_config
from .core.agent import LocalProgrammingAgent
from .core.initialize import init_agent
from .core.models import AgentRequest
from .errors import ChatAgentError, ConfigError, UserInputError
from .llm.builder import SERVICES
from .utils.console import (
    LOG_LEVELS, confirm, error, get_user_input, heading, info, print_json,
    render_markdown, set_code_theme, set_log_level, show_welcome, success,
)

REPL_PROMPT = "Change request (/ask <question>, /implement <request>, /exit): "

# ------------------------------
# 辅助函数
# ------------------------------


def parse_repl_line(line: str) -> Tuple[str, str]:
    """
    Split an interactive line into (mode, text).

    mode is one of "implement", "ask", "exit", "empty" or "unknown";
    for "unknown" the text is the unrecognized command.
    """
    line = line.strip()
    if not line:
        return "empty", ""
    if not line.startswith("/"):
        return "implement", line
    command, _, rest = line.partition(" ")
    if command in ("/implement", "/ask"):
        return command[1:], rest.strip()
    if command in ("/exit", "/quit"):
        return "exit", ""
    return "unknown", command


def _load_config(ctx: click.Context) -> Config:
    opts = ctx.obj
    try:
        config = load_config(opts["directory"], overrides=opts["overrides"], api_keys=opts["api_keys"])
    except ConfigError as e:
        error(f"Invalid configuration: {e}")
        raise click.Abort()
    set_log_level(config.log_level)
    set_code_theme(config.code_theme)
    return config


def _load_agent(ctx: click.Context) -> Tuple[Config, LocalProgrammingAgent]:
    config = _load_config(ctx)
    try:
        agent = init_agent(config)
    except ConfigError as e:
        error(f"Failed to initialize the agent: {e}")
        raise click.Abort()
    return config, agent


def run_implement(agent: LocalProgrammingAgent, directory: str, request: str) -> bool:
    try:
        message = agent.implement(AgentRequest(directory=directory, query=request))
    except ChatAgentError as e:
        error(f"Implementation failed: {e}")
        return False
    if message:
        success(f"Done: {message}")
    return True


def run_ask(agent: LocalProgrammingAgent, directory: str, question: str) -> bool:
    if not question:
        error("Please provide a question after /ask.")
        return False
    try:
        answer = agent.ask(AgentRequest(directory=directory, query=question))
    except ChatAgentError as e:
        error(f"Ask failed: {e}")
        return False
    render_markdown(answer, title="Answer")
    return True


def run_repl(config: Config, agent: LocalProgrammingAgent) -> None:
    info(f"Working in {config.directory} with service '{config.service}'. Ctrl-D to exit.")
    while True:
        try:
            line = get_user_input(REPL_PROMPT)
        except UserInputError:
            info("Goodbye.")
            return
        mode, text = parse_repl_line(line)
        if mode == "exit":
            info("Goodbye.")
            return
        if mode == "empty":
            continue
        if mode == "unknown":
            error(f"Unknown command: {text}. Use /ask or /implement.")
        elif mode == "ask":
            run_ask(agent, config.directory, text)
        else:
            run_implement(agent, config.directory, text)

# ------------------------------
# CLI 主入口
# ------------------------------


@click.group(invoke_without_command=True)
@click.version_option(__version__, message="ChatAgent CLI v%(version)s")
@click.option("--directory", "-d", type=click.Path(exists=True, file_okay=False), default=".",
              help="Root directory of the repository to work on.")
@click.option("--service", type=click.Choice(SERVICES), default=None, help="Model service to use.")
@click.option("--openai-api-key", default=None, help="OpenAI API key (else OPENAI_API_KEY).")
@click.option("--groq-api-key", default=None, help="Groq API key (else GROQ_API_KEY).")
@click.option("--gemini-api-key", default=None, help="Gemini API key (else GEMINI_API_KEY).")
@click.option("--rate-limit", type=click.IntRange(min=0), default=None,
              help="Requests per minute across all sessions, 0 for no limit.")
@click.option("--log-level", type=click.Choice(list(LOG_LEVELS)), default=None)
@click.option("--max-history-length", type=click.IntRange(min=0), default=None)
@click.option("--max-process-loops", type=click.IntRange(min=0), default=None)
@click.option("--auto-commit/--no-auto-commit", default=None, help="Commit without asking.")
@click.pass_context
def cli(ctx, directory, service, openai_api_key, groq_api_key, gemini_api_key,
        rate_limit, log_level, max_history_length, max_process_loops, auto_commit):
    """🤖 ChatAgent - AI change requests for your repository"""
    ctx.obj = {
        "directory": str(Path(directory).resolve()),
        "overrides": {
            "service": service,
            "rate_limit_rpm": rate_limit,
            "log_level": log_level,
            "max_history_length": max_history_length,
            "max_process_loops": max_process_loops,
            "auto_commit": auto_commit,
        },
        "api_keys": {"openai": openai_api_key, "groq": groq_api_key, "gemini": gemini_api_key},
    }
    if ctx.invoked_subcommand is None:
        show_welcome()
        config, agent = _load_agent(ctx)
        run_repl(config, agent)

# ------------------------------
# 命令: implement / ask
# ------------------------------


@cli.command()
@click.argument("request", nargs=-1, required=True)
@click.pass_context
def implement(ctx, request):
    """🛠  Implement a change request"""
    config, agent = _load_agent(ctx)
    if not run_implement(agent, config.directory, " ".join(request)):
        ctx.exit(1)


@cli.command()
@click.argument("question", nargs=-1, required=True)
@click.pass_context
def ask(ctx, question):
    """❓ Ask a question about the repository"""
    config, agent = _load_agent(ctx)
    if not run_ask(agent, config.directory, " ".join(question)):
        ctx.exit(1)

# ------------------------------
# 命令: init / config
# ------------------------------


@cli.command()
@click.option("--service", "init_service", type=click.Choice(SERVICES), default=None)
def init(init_service: Optional[str]):
    """🔧 Write the default configuration file"""
    heading("Project Initialization")
    if CONFIG_FILE.exists() and not confirm(f"{CONFIG_FILE} already exists. Overwrite?", default=False):
        info("Cancelled.")
        return
    if init_service is None:
        init_service = click.prompt("Model service", type=click.Choice(SERVICES), default="openai")
    try:
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(render_default_config(init_service), encoding="utf-8")
    except OSError as e:
        error(f"Initialization failed: {e}")
        raise click.Abort()
    success(f"Generated: {CONFIG_FILE}")


@cli.command(name="config")
@click.pass_context
def show_config(ctx):
    """📋 Show the effective configuration"""
    config = _load_config(ctx)
    heading("Effective configuration")
    print_json(config.to_display_dict())


if __name__ == '__main__':
    cli()
