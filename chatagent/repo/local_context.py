# chatagent/repo/local_context.py
"""
本地仓库上下文 (LocalProgrammingContext)

An in-memory overlay over a real file tree. Reads fall through to disk and
are cached; writes, moves and deletes are staged and only materialized by
flush_changes(), in the order deletes, moves, creates, updates.

Moves are tracked by canonical name: after move_file(a, b) every piece of
staged state lives under b, pending_moves[a] == b and aliases[b] == a.
"""

import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import FileSystemError, PreconditionError
from ..utils.console import debug
from .context import DELETED_MESSAGE, MISSING_MESSAGE, ProgrammingContext
from .file_lister import FileLister, default_file_lister


def _replace_item(items: List[str], old: str, new: str) -> None:
    """Rename old to new in place, keeping its position and never duplicating new."""
    if old not in items:
        return
    if new in items:
        items.remove(old)
    else:
        items[items.index(old)] = new


def _discard(items: List[str], path: str) -> None:
    if path in items:
        items.remove(path)


def _add(items: List[str], path: str) -> None:
    if path not in items:
        items.append(path)


class LocalProgrammingContext(ProgrammingContext):
    """
    单次变更请求的工作集。

    Single writer per instance; the alias and move maps are guarded by an
    RLock so read-only queries may run from other threads.
    """

    def __init__(
        self,
        root_path,
        change_request: str,
        file_lister: Optional[FileLister] = None,
        structure: Optional[List[str]] = None,
    ):
        self.root_path = Path(root_path).resolve()
        self.change_request = change_request
        if structure is None:
            lister = file_lister or default_file_lister(self.root_path)
            structure = lister.list_files(self.root_path)
        self.structure: List[str] = []
        for path in structure:
            _add(self.structure, path)
        self.content_cache: Dict[str, str] = {}
        self.pending_new: List[str] = []
        self.pending_updated: List[str] = []
        self.pending_deleted: List[str] = []
        self.pending_moves: Dict[str, str] = {}
        self.aliases: Dict[str, str] = {}
        self._lock = threading.RLock()

    # --- paths ---

    def _disk_path(self, path: str) -> Path:
        """Absolute path under root_path; raises FileSystemError if it escapes the root."""
        full = (self.root_path / path).resolve()
        if full != self.root_path and self.root_path not in full.parents:
            raise FileSystemError(f"path escapes repository root: {path}")
        return full

    def resolve_path(self, path: str) -> str:
        with self._lock:
            return self.pending_moves.get(path, path)

    def _disk_source(self, canonical: str) -> str:
        with self._lock:
            return self.aliases.get(canonical, canonical)

    def _is_deleted(self, path: str, canonical: str) -> bool:
        return path in self.pending_deleted or canonical in self.pending_deleted

    # --- queries ---

    def get_change_request(self) -> str:
        return self.change_request

    def get_repo_structure(self) -> List[str]:
        return list(self.structure)

    def get_file_content(self, path: str) -> Tuple[str, bool]:
        canonical = self.resolve_path(path)
        if self._is_deleted(path, canonical):
            return DELETED_MESSAGE, False
        if canonical in self.content_cache:
            return self.content_cache[canonical], True
        try:
            raw = self._disk_path(self._disk_source(canonical)).read_bytes()
        except (OSError, FileSystemError) as e:
            debug(f"Could not read {path}: {e}")
            return MISSING_MESSAGE, False
        content = raw.decode("utf-8", errors="replace")
        self.content_cache[canonical] = content
        return content, True

    def search_code(self, query: str) -> Dict[str, List[int]]:
        results: Dict[str, List[int]] = {}
        for path in list(self.structure):
            content, found = self.get_file_content(path)
            if not found:
                continue
            lines = [n for n, line in enumerate(content.splitlines(), start=1) if query in line]
            if lines:
                results[path] = lines
        return results

    # --- staging ---

    def update_file_content(self, path: str, content: str) -> None:
        canonical = self.resolve_path(path)
        revived = canonical in self.pending_deleted
        _discard(self.pending_deleted, canonical)
        known = canonical in self.content_cache or canonical in self.structure
        if canonical in self.pending_new:
            pass
        elif known and not revived:
            _add(self.pending_updated, canonical)
        else:
            _add(self.pending_new, canonical)
        _add(self.structure, canonical)
        self.content_cache[canonical] = content

    def move_file(self, old_path: str, new_path: str) -> None:
        with self._lock:
            canonical_old = self.resolve_path(old_path)
            if self._is_deleted(old_path, canonical_old):
                raise PreconditionError(f"cannot move {old_path}: the file has been deleted")
            source = self._disk_source(canonical_old)
            source_path = self._disk_path(source)
            self._disk_path(new_path)
            try:
                os.stat(source_path)
            except (FileNotFoundError, NotADirectoryError) as e:
                raise PreconditionError(f"source file does not exist: {old_path}") from e
            except OSError as e:
                raise FileSystemError(f"cannot access {old_path}: {e}") from e

            if canonical_old == new_path:
                return

            # the moved file replaces whatever was staged under the target name
            self.content_cache.pop(new_path, None)
            _discard(self.pending_updated, new_path)
            _discard(self.pending_new, new_path)

            _replace_item(self.structure, canonical_old, new_path)
            if canonical_old in self.content_cache:
                self.content_cache[new_path] = self.content_cache.pop(canonical_old)
            _replace_item(self.pending_updated, canonical_old, new_path)
            _replace_item(self.pending_new, canonical_old, new_path)
            _discard(self.pending_deleted, new_path)

            # collapse a -> b -> c into a single a -> c entry
            self.aliases.pop(canonical_old, None)
            if source == new_path:
                self.pending_moves.pop(source, None)
            else:
                self.pending_moves[source] = new_path
                self.aliases[new_path] = source
            debug(f"Staged move {source} -> {new_path}")

    def delete_file(self, path: str) -> None:
        with self._lock:
            canonical = self.resolve_path(path)
            linked = [path, canonical, self._disk_source(canonical)]
        for p in linked:
            _add(self.pending_deleted, p)
            _discard(self.structure, p)
            _discard(self.pending_new, p)
            _discard(self.pending_updated, p)
            self.content_cache.pop(p, None)

    # --- flush ---

    def _write(self, path: str) -> None:
        target = self._disk_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.content_cache.get(path, ""), encoding="utf-8")

    def flush_changes(self) -> None:
        with self._lock:
            steps: List[Tuple[str, Callable[[], None]]] = []
            for path in self.pending_deleted:
                steps.append((f"delete {path}", lambda p=path: self._disk_path(p).unlink(missing_ok=True)))
            for old, new in self.pending_moves.items():
                if old in self.pending_deleted:
                    continue
                steps.append((f"move {old} -> {new}", lambda o=old, n=new: self._move_on_disk(o, n)))
            for path in self.pending_new:
                steps.append((f"create {path}", lambda p=path: self._write(p)))
            for path in self.pending_updated:
                steps.append((f"update {path}", lambda p=path: self._write(p)))

            for description, step in steps:
                try:
                    step()
                except OSError as e:
                    raise FileSystemError(f"failed to {description}: {e}") from e
                debug(f"Flushed: {description}")

            self.pending_deleted.clear()
            self.pending_moves.clear()
            self.pending_new.clear()
            self.pending_updated.clear()
            self.aliases.clear()

    def _move_on_disk(self, old: str, new: str) -> None:
        target = self._disk_path(new)
        target.parent.mkdir(parents=True, exist_ok=True)
        self._disk_path(old).replace(target)
