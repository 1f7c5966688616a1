# tests/conftest.py
"""
ChatAgent 测试配置和共享 fixtures
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from chatagent.core.assistants import AnalysisAssistant, GenerateCodeAssistant, InstructionAssistant
from chatagent.repo.local_context import LocalProgrammingContext
from chatagent.repo.file_lister import WalkFileLister

CONFIG_ENV_VARS = ("OPENAI_API_KEY", "GROQ_API_KEY", "GEMINI_API_KEY")


@pytest.fixture(scope="function")
def isolated_filesystem():
    """
    提供一个隔离的临时文件系统。
    切换当前工作目录，测试结束后恢复。
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        original_cwd = os.getcwd()
        os.chdir(temp_path)
        yield temp_path
        os.chdir(original_cwd)


@pytest.fixture(scope="function")
def repo_dir(tmp_path):
    """A small non-git tree with a couple of source files."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("def main():\n    print('hello')\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    return tmp_path


@pytest.fixture(scope="function")
def local_context(repo_dir):
    return LocalProgrammingContext(repo_dir, "add a greeting", file_lister=WalkFileLister())


@pytest.fixture(scope="function")
def mock_assistants():
    """MagicMock stand-ins for the six assistants a ProgrammingService needs."""
    return {
        'code_analysis': MagicMock(spec=AnalysisAssistant),
        'ask_analysis': MagicMock(spec=AnalysisAssistant),
        'code_instruction': MagicMock(spec=InstructionAssistant),
        'ask_instruction': MagicMock(spec=InstructionAssistant),
        'code_generator': MagicMock(spec=GenerateCodeAssistant),
        'patch_generator': MagicMock(spec=GenerateCodeAssistant),
    }


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """Remove API keys from the environment so config tests are deterministic."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def runner():
    """提供一个 Click CliRunner 实例用于测试 CLI 命令"""
    from click.testing import CliRunner
    return CliRunner()
