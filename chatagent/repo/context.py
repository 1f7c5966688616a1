# chatagent/repo/context.py
"""
ChatAgent 核心接口 - 仓库上下文 (ProgrammingContext)

The capability every command executes against: an in-memory staging
overlay over one real file tree.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

DELETED_MESSAGE = "The file has been deleted."
MISSING_MESSAGE = "The file does not exist or could not be read."


class ProgrammingContext(ABC):
    """
    抽象基类，定义单次变更请求的工作集。
    No method except flush_changes may touch the disk for writing.
    """

    @abstractmethod
    def get_change_request(self) -> str:
        pass

    @abstractmethod
    def get_repo_structure(self) -> List[str]:
        """ 当前跟踪的文件列表（已反映暂存的删除/移动）。 """
        pass

    @abstractmethod
    def get_file_content(self, path: str) -> Tuple[str, bool]:
        """
        Return (content, found).

        When found is False the text is DELETED_MESSAGE or MISSING_MESSAGE.
        """
        pass

    @abstractmethod
    def update_file_content(self, path: str, content: str) -> None:
        pass

    @abstractmethod
    def move_file(self, old_path: str, new_path: str) -> None:
        """ Raises PreconditionError when old_path is absent on disk. """
        pass

    @abstractmethod
    def delete_file(self, path: str) -> None:
        pass

    @abstractmethod
    def resolve_path(self, path: str) -> str:
        """ 解析别名，返回当前规范路径。 """
        pass

    @abstractmethod
    def search_code(self, query: str) -> Dict[str, List[int]]:
        pass

    @abstractmethod
    def flush_changes(self) -> None:
        """ Raises FileSystemError on the first I/O failure. """
        pass
