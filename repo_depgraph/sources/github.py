"""GitHub-backed repository source."""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from repo_depgraph.config import DEFAULT_BRANCHES
from repo_depgraph.exceptions import InvalidRepositoryError, SourceUnavailableError
from repo_depgraph.sources.github_client import GitHubClient, RateLimitError
from repo_depgraph.sources.models import BLOB, FetchedFile, RepoTree, TreeEntry

log = structlog.get_logger("repo_depgraph.github")

_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_HOSTS = ("github.com", "www.github.com")

# A 200 with a non-JSON body (proxy error pages) surfaces as ValueError.
_FETCH_ERRORS = (httpx.HTTPError, RateLimitError, ValueError)


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a GitHub reference.

    Handles:
      - https://github.com/owner/repo (optionally ``.git``, ``/tree/<ref>/...``)
      - github.com/owner/repo
      - git@github.com:owner/repo.git
      - owner/repo

    Raises InvalidRepositoryError if the reference cannot be parsed.
    """
    reference = repo_url.strip()
    path = reference.rstrip("/")

    if path.startswith("git@"):
        host, sep, path = path[4:].partition(":")
        if not sep or host.lower() not in _HOSTS:
            raise InvalidRepositoryError(repo_url)
    else:
        path = re.sub(r"^[a-z][a-z0-9+.-]*://", "", path, flags=re.IGNORECASE)
        head, _, rest = path.partition("/")
        if head.lower() in _HOSTS:
            path = rest
        elif "." in head or ":" in head:
            raise InvalidRepositoryError(repo_url, "not a GitHub repository")

    parts = [part for part in path.split("/") if part]
    if len(parts) < 2:
        raise InvalidRepositoryError(repo_url)

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    if not (_NAME_RE.match(owner) and _NAME_RE.match(repo)):
        raise InvalidRepositoryError(repo_url)
    return owner, repo


class GitHubRepositorySource:
    """Serve listings, language statistics and file contents from the GitHub API."""

    name = "github"

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        *,
        branches: Sequence[str] = DEFAULT_BRANCHES,
    ) -> None:
        self._client = client
        self.owner = owner
        self.repo = repo
        self._branches = tuple(branches)
        self._ref: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def ref(self) -> str | None:
        """Branch the tree was listed from; file fetches use the same ref."""
        return self._ref

    async def list_tree(self) -> RepoTree:
        """Recursive tree of the first branch that exists.

        A rejected token (401) is dropped once and the same branch retried
        unauthenticated; the rest of the run stays unauthenticated.
        """
        for branch in self._branches:
            data = await self._get_tree(branch)
            if data is None:
                continue

            entries = [
                TreeEntry(path=item["path"], kind=item.get("type", BLOB), size=item.get("size"))
                for item in data.get("tree") or []
                if isinstance(item, dict) and item.get("path")
            ]
            tree = RepoTree(entries=entries, truncated=bool(data.get("truncated")), ref=branch)
            self._ref = branch
            log.info(
                "github.tree_listed",
                repo=self.full_name,
                branch=branch,
                entries=len(entries),
                truncated=tree.truncated,
            )
            return tree

        raise SourceUnavailableError(
            f"could not list {self.full_name} on any of the branches {', '.join(self._branches)}"
        )

    async def get_language_stats(self) -> dict[str, int]:
        try:
            data = await self._client.get(f"/repos/{self.owner}/{self.repo}/languages")
        except _FETCH_ERRORS as exc:
            raise SourceUnavailableError(
                f"language statistics unavailable for {self.full_name}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise SourceUnavailableError(f"unexpected /languages payload for {self.full_name}")
        try:
            return {str(name): int(size) for name, size in data.items()}
        except (TypeError, ValueError) as exc:
            raise SourceUnavailableError(
                f"unexpected /languages payload for {self.full_name}: {exc}"
            ) from exc

    async def fetch_file(self, entry: TreeEntry) -> FetchedFile:
        params = {"ref": self._ref} if self._ref else None
        try:
            data = await self._client.get(
                f"/repos/{self.owner}/{self.repo}/contents/{quote(entry.path)}", params=params
            )
        except _FETCH_ERRORS as exc:
            raise SourceUnavailableError(f"could not fetch {entry.path}: {exc}") from exc

        if not isinstance(data, dict):
            # A directory listing comes back as a JSON array.
            raise SourceUnavailableError(f"{entry.path} is not a file")
        content = _decode_content(data, entry.path)
        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError) as exc:
            raise SourceUnavailableError(f"unexpected size for {entry.path}: {exc}") from exc
        return FetchedFile(path=entry.path, content=content, size=size)

    # ── internal ───────────────────────────────────────────────────────────

    async def _get_tree(self, branch: str) -> dict[str, Any] | None:
        path = f"/repos/{self.owner}/{self.repo}/git/trees/{quote(branch, safe='')}"
        params = {"recursive": "1"}
        try:
            return _tree_payload(await self._client.get(path, params=params), branch)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 401 and self._client.authenticated:
                log.warning("github.auth_failed", repo=self.full_name, branch=branch)
                self._client.drop_authorization()
                try:
                    return _tree_payload(await self._client.get(path, params=params), branch)
                except _FETCH_ERRORS as retry_exc:
                    log.info("github.branch_unavailable", branch=branch, error=str(retry_exc))
                    return None
            log.info("github.branch_unavailable", branch=branch, status=exc.response.status_code)
            return None
        except _FETCH_ERRORS as exc:
            log.info("github.branch_unavailable", branch=branch, error=str(exc))
            return None


def _tree_payload(data: Any, branch: str) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        log.info("github.branch_unavailable", branch=branch, error="unexpected tree payload")
        return None
    return data


def _decode_content(data: dict[str, Any], path: str) -> str:
    raw = data.get("content") or ""
    if data.get("encoding", "base64") != "base64":
        return raw
    try:
        return base64.b64decode(raw).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as exc:
        raise SourceUnavailableError(f"could not decode {path}: {exc}") from exc
