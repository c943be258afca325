"""Import parser interface and the profile-backed base class."""

from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from collections.abc import Collection
from typing import Protocol, runtime_checkable

from repo_depgraph.languages.models import LanguageProfile


@runtime_checkable
class ImportParser(Protocol):
    """Interface that every language import parser must satisfy."""

    name: str
    language_id: str

    @property
    def extensions(self) -> tuple[str, ...]: ...

    @property
    def exclude_patterns(self) -> tuple[str, ...]: ...

    def parse_imports(self, content: str, file_path: str) -> list[str]: ...

    def resolve_import_path(self, import_path: str, file_path: str) -> str | None: ...

    def classify(self, path: str) -> str: ...

    def accepts(self, path: str) -> bool: ...


@runtime_checkable
class ImportMatcher(Protocol):
    """Optional capability: fuzzy matching of a candidate against real files."""

    def match_import_to_file(self, candidate: str, available: Collection[str]) -> str | None: ...


class ProfileParser(ABC):
    """Shared behaviour for parsers driven by a :class:`LanguageProfile`.

    Subclasses implement :meth:`parse_imports` and :meth:`resolve_import_path`;
    classification and file filtering come from the profile.
    """

    name: str = ""

    def __init__(self, profile: LanguageProfile) -> None:
        self.profile = profile
        self.language_id = profile.id
        if not self.name:
            self.name = profile.display_name

    @property
    def extensions(self) -> tuple[str, ...]:
        return self.profile.extensions

    @property
    def exclude_patterns(self) -> tuple[str, ...]:
        return self.profile.exclude_patterns

    def classify(self, path: str) -> str:
        return self.profile.classify(path)

    def accepts(self, path: str) -> bool:
        """True when *path* has one of the language's extensions and is not excluded."""
        return self.profile.has_extension(path) and not self.profile.is_excluded(path)

    @abstractmethod
    def parse_imports(self, content: str, file_path: str) -> list[str]:
        """Return candidate repository paths for the imports found in *content*."""

    @abstractmethod
    def resolve_import_path(self, import_path: str, file_path: str) -> str | None:
        """Resolve one import specifier relative to *file_path*, or None if external."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(language_id={self.language_id!r})"


def parent_parts(file_path: str) -> list[str]:
    """Directory segments of a repository-relative *file_path*."""
    return [part for part in posixpath.dirname(file_path).split("/") if part]


def join_relative(base_dir: str, relative: str) -> str:
    """Resolve *relative* against *base_dir*, collapsing ``.`` and ``..``.

    ``..`` never climbs above the repository root; extra levels are ignored.
    """
    parts = [part for part in base_dir.split("/") if part]
    for part in relative.split("/"):
        if part == "..":
            if parts:
                parts.pop()
        elif part and part != ".":
            parts.append(part)
    return "/".join(parts)
