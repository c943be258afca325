"""Data models for repository listings and fetched files."""

from __future__ import annotations

from dataclasses import dataclass, field

BLOB = "blob"
TREE = "tree"


@dataclass(frozen=True)
class TreeEntry:
    """One entry of a recursive directory listing."""

    path: str
    kind: str = BLOB  # "blob" (file) | "tree" (directory)
    size: int | None = None

    @property
    def is_file(self) -> bool:
        return self.kind == BLOB


@dataclass
class RepoTree:
    """Recursive listing of a repository at one ref."""

    entries: list[TreeEntry] = field(default_factory=list)
    truncated: bool = False
    ref: str | None = None

    def file_entries(self) -> list[TreeEntry]:
        return [entry for entry in self.entries if entry.is_file]

    def file_paths(self) -> list[str]:
        return [entry.path for entry in self.entries if entry.is_file]


@dataclass
class FetchedFile:
    path: str
    content: str
    size: int
