"""Repository source backed by a local checkout."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import structlog

from repo_depgraph.exceptions import InvalidRepositoryError, SourceUnavailableError
from repo_depgraph.sources.models import BLOB, FetchedFile, RepoTree, TreeEntry

log = structlog.get_logger("repo_depgraph.local")

_SKIP_DIRS = {
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "__pycache__",
    ".tox",
    ".venv",
    "venv",
    ".eggs",
    ".mypy_cache",
    ".pytest_cache",
}


class LocalRepositorySource:
    """Walk a directory on disk. No host statistics are available."""

    name = "local"

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).resolve()
        if not self.root.is_dir():
            raise InvalidRepositoryError(str(root), "not a directory")

    async def list_tree(self) -> RepoTree:
        entries = await asyncio.to_thread(self._walk)
        log.info("local.tree_listed", root=str(self.root), entries=len(entries))
        return RepoTree(entries=entries)

    async def get_language_stats(self) -> dict[str, int]:
        raise SourceUnavailableError("local checkouts carry no language statistics")

    async def fetch_file(self, entry: TreeEntry) -> FetchedFile:
        return await asyncio.to_thread(self._read, entry.path)

    def _walk(self) -> list[TreeEntry]:
        entries: list[TreeEntry] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)
            for filename in sorted(filenames):
                full = Path(dirpath) / filename
                try:
                    size = full.stat().st_size
                except OSError:
                    continue
                entries.append(
                    TreeEntry(path=full.relative_to(self.root).as_posix(), kind=BLOB, size=size)
                )
        return entries

    def _read(self, relative: str) -> FetchedFile:
        full = (self.root / relative).resolve()
        if not full.is_relative_to(self.root):
            raise SourceUnavailableError(f"{relative} is outside the repository")
        try:
            data = full.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(f"could not read {relative}: {exc}") from exc
        return FetchedFile(
            path=relative, content=data.decode("utf-8", errors="replace"), size=len(data)
        )
