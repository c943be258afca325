"""Repository sources: where listings and file contents come from."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from repo_depgraph.config import Settings
from repo_depgraph.sources.base import RepositorySource
from repo_depgraph.sources.github import GitHubRepositorySource, parse_repo_url
from repo_depgraph.sources.github_client import GitHubClient, RateLimitError
from repo_depgraph.sources.local import LocalRepositorySource
from repo_depgraph.sources.models import FetchedFile, RepoTree, TreeEntry

__all__ = [
    "FetchedFile",
    "GitHubClient",
    "GitHubRepositorySource",
    "LocalRepositorySource",
    "RateLimitError",
    "RepoTree",
    "RepositorySource",
    "TreeEntry",
    "open_source",
    "parse_repo_url",
]


@asynccontextmanager
async def open_source(
    reference: str, settings: Settings | None = None
) -> AsyncIterator[RepositorySource]:
    """Open *reference* as a local checkout if it is a directory, else as a GitHub repo.

    Raises InvalidRepositoryError when it is neither.
    """
    settings = settings or Settings.from_env()
    if os.path.isdir(reference):
        yield LocalRepositorySource(reference)
        return

    owner, repo = parse_repo_url(reference)
    async with GitHubClient(settings.github_token, timeout=settings.http_timeout) as client:
        yield GitHubRepositorySource(client, owner, repo, branches=settings.branches)
