"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_BRANCHES: tuple[str, ...] = ("main", "master", "canary", "develop")

# Tokens shorter than this are treated as placeholders, not credentials.
_MIN_TOKEN_LENGTH = 10


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


def _env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(key)
    if raw is None:
        return default
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


def _env_token() -> str | None:
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    if token and len(token) > _MIN_TOKEN_LENGTH:
        return token
    return None


@dataclass(frozen=True)
class Settings:
    """Limits and credentials for one analysis run."""

    github_token: str | None = None
    max_files: int = 200
    max_file_bytes: int = 50_000
    fetch_concurrency: int = 16
    http_timeout: float = 30.0
    branches: tuple[str, ...] = field(default=DEFAULT_BRANCHES)
    isolated_warning_ratio: float = 0.8

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``REPO_DEPGRAPH_*`` and ``GITHUB_TOKEN`` variables."""
        return cls(
            github_token=_env_token(),
            max_files=_env_int("REPO_DEPGRAPH_MAX_FILES", 200),
            max_file_bytes=_env_int("REPO_DEPGRAPH_MAX_FILE_BYTES", 50_000),
            fetch_concurrency=_env_int("REPO_DEPGRAPH_FETCH_CONCURRENCY", 16),
            http_timeout=_env_float("REPO_DEPGRAPH_HTTP_TIMEOUT", 30.0),
            branches=_env_list("REPO_DEPGRAPH_BRANCHES", DEFAULT_BRANCHES),
            isolated_warning_ratio=_env_float("REPO_DEPGRAPH_ISOLATED_RATIO", 0.8),
        )
