"""Repository source interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from repo_depgraph.sources.models import FetchedFile, RepoTree, TreeEntry


@runtime_checkable
class RepositorySource(Protocol):
    """Where listings, language statistics and file contents come from.

    Every method raises :class:`~repo_depgraph.exceptions.SourceUnavailableError`
    when the data cannot be obtained.
    """

    name: str

    async def list_tree(self) -> RepoTree: ...

    async def get_language_stats(self) -> dict[str, int]: ...

    async def fetch_file(self, entry: TreeEntry) -> FetchedFile: ...
