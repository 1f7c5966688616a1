# chatagent/core/git_util.py
"""
Version-control mutations invoked by the agent around a request.
"""

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..errors import ChatAgentError
from ..utils.console import debug, info


class GitError(ChatAgentError):
    """A git command failed."""


class GitUtil(ABC):

    @abstractmethod
    def add(self, directory: str) -> None:
        """ 暂存工作区的全部改动。 """
        pass

    @abstractmethod
    def commit(self, directory: str, message: str) -> None:
        pass

    @abstractmethod
    def reset_to_head(self, directory: str) -> None:
        """ 硬重置到最近一次提交。 """
        pass


class RealGitUtil(GitUtil):
    """Runs the git executable."""

    def _git(self, directory: str, *args: str) -> str:
        cmd: List[str] = ["git", *args]
        try:
            proc = subprocess.run(
                cmd, cwd=directory, capture_output=True, text=True, check=True,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"'{' '.join(cmd)}' failed: {e.stderr.strip() or e}") from e
        return proc.stdout

    def add(self, directory: str) -> None:
        self._git(directory, "add", "--all", ".")
        debug(f"Files added to git staging area in {directory}")

    def is_clean(self, directory: str) -> bool:
        return not self._git(directory, "status", "--porcelain").strip()

    def commit(self, directory: str, message: str) -> None:
        if self.is_clean(directory):
            info("No changes to commit")
            return
        self._git(directory, "commit", "-m", message)
        commit_hash = self._git(directory, "rev-parse", "--short", "HEAD").strip()
        info(f"Changes committed with message: {message}. Commit hash: {commit_hash}")

    def reset_to_head(self, directory: str) -> None:
        self._git(directory, "reset", "--hard", "HEAD")
        info(f"Repository in {directory} reset to HEAD")


class NoOpGitUtil(GitUtil):
    """Used when the working directory is not a git repository."""

    def add(self, directory: str) -> None:
        debug("NoOpGitUtil: add")

    def commit(self, directory: str, message: str) -> None:
        debug("NoOpGitUtil: commit")

    def reset_to_head(self, directory: str) -> None:
        debug("NoOpGitUtil: reset_to_head")


def default_git_util(directory: str) -> GitUtil:
    if (Path(directory) / ".git").exists():
        return RealGitUtil()
    return NoOpGitUtil()
