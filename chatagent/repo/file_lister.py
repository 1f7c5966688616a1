# chatagent/repo/file_lister.py
"""
Tracked-file listers used to seed a repository context.
"""

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..errors import FileSystemError

SKIP_DIRS = {".git", ".chatagent"}


class FileLister(ABC):

    @abstractmethod
    def list_files(self, root: Path) -> List[str]:
        """ 返回 root 下被跟踪文件的相对路径（POSIX 风格，有序、无重复）。 """
        pass


class GitFileLister(FileLister):
    """Tracked files plus untracked files that are not ignored."""

    def _ls_files(self, root: Path, *extra: str) -> List[str]:
        cmd = ["git", "ls-files", "-z", *extra]
        try:
            proc = subprocess.run(cmd, cwd=str(root), capture_output=True, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise FileSystemError(f"failed to list files with git in {root}: {e}") from e
        out = proc.stdout.decode("utf-8", errors="replace")
        return [p for p in out.split("\0") if p]

    def list_files(self, root: Path) -> List[str]:
        files = self._ls_files(root) + self._ls_files(root, "-o", "--exclude-standard")
        # git ls-files keeps deleted-but-unstaged paths in the index listing
        seen = set()
        result = []
        for p in files:
            if p in seen or not (root / p).is_file():
                continue
            seen.add(p)
            result.append(p)
        return result


class WalkFileLister(FileLister):
    """Full directory walk for trees that are not under version control."""

    def list_files(self, root: Path) -> List[str]:
        result = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for name in sorted(filenames):
                rel = Path(dirpath, name).relative_to(root)
                result.append(rel.as_posix())
        return result


def default_file_lister(root: Path) -> FileLister:
    if (Path(root) / ".git").exists():
        return GitFileLister()
    return WalkFileLister()
