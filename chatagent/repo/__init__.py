# chatagent/repo/__init__.py
from .context import ProgrammingContext, DELETED_MESSAGE, MISSING_MESSAGE
from .local_context import LocalProgrammingContext
from .file_lister import FileLister, GitFileLister, WalkFileLister, default_file_lister

__all__ = [
    "ProgrammingContext", "DELETED_MESSAGE", "MISSING_MESSAGE",
    "LocalProgrammingContext",
    "FileLister", "GitFileLister", "WalkFileLister", "default_file_lister",
]
