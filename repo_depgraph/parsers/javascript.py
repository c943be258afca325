"""Import parser for JavaScript / TypeScript sources."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Collection

from repo_depgraph.parsers.base import ProfileParser, join_relative

# import x from "p" / import {a, b} from "p" / import * as ns from "p" /
# import type {T} from "p" / import "p" / export {a} from "p" / export * from "p"
_STATIC_RE = re.compile(
    r"(?<![\w$.])(?:import|export)\s+"
    r"(?:type\s+)?"
    r"(?:"
    r"(?:\{[^}]*\}|\*(?:\s+as\s+[\w$]+)?|[\w$]+)"
    r"(?:\s*,\s*(?:\{[^}]*\}|\*\s+as\s+[\w$]+))*"
    r"\s+from\s+"
    r")?"
    r"[\"']([^\"'\n]+)[\"']"
)

# import("p")
_DYNAMIC_RE = re.compile(r"(?<![\w$.])import\s*\(\s*[\"']([^\"'\n]+)[\"']\s*\)")

# require("p")
_REQUIRE_RE = re.compile(r"(?<![\w$.])require\s*\(\s*[\"']([^\"'\n]+)[\"']\s*\)")

# Path aliases that point at the project root (tsconfig "paths" conventions).
ALIAS_PREFIXES: tuple[str, ...] = ("@/", "~/")

WORKSPACE_PREFIX = "packages/"
APPS_PREFIX = "apps/"
_WORKSPACE_MARKERS = (WORKSPACE_PREFIX, APPS_PREFIX)

# Tried in this order when an import omits its extension.
RESOLUTION_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")

_KNOWN_EXTENSION_RE = re.compile(r"\.(?:tsx?|jsx?|mjs|cjs)$")


def _in_workspace(file_path: str) -> bool:
    return any(marker in file_path for marker in _WORKSPACE_MARKERS)


class JavaScriptParser(ProfileParser):
    """Regex-based ES module / CommonJS import extraction.

    Only imports that look internal to the repository are returned:
    relative specifiers, root aliases (``@/``, ``~/``) and, inside a
    ``packages/`` or ``apps/`` workspace, bare unscoped package names.
    """

    name = "JavaScript/TypeScript"

    def parse_imports(self, content: str, file_path: str) -> list[str]:
        imports: list[str] = []
        for pattern in (_STATIC_RE, _DYNAMIC_RE, _REQUIRE_RE):
            for match in pattern.finditer(content):
                specifier = match.group(1).strip()
                if not specifier or not self.is_internal_import(specifier, file_path):
                    continue
                resolved = self.resolve_import_path(specifier, file_path)
                if resolved:
                    imports.append(resolved)
        return imports

    def is_internal_import(self, import_path: str, file_path: str) -> bool:
        if import_path.startswith("."):
            return True
        if import_path.startswith(ALIAS_PREFIXES):
            return True
        if _in_workspace(file_path):
            package_name = import_path.split("/", 1)[0]
            return bool(package_name) and not package_name.startswith("@")
        return False

    def resolve_import_path(self, import_path: str, file_path: str) -> str | None:
        """Turn a specifier into a repository-relative path guess (no extension added)."""
        for prefix in ALIAS_PREFIXES:
            if import_path.startswith(prefix):
                return import_path[len(prefix):]
        if import_path.startswith("."):
            return join_relative(posixpath.dirname(file_path), import_path)
        if _in_workspace(file_path):
            # e.g. "next/server" inside the Next.js monorepo -> packages/next/server
            return WORKSPACE_PREFIX + import_path
        return import_path

    def match_import_to_file(self, candidate: str, available: Collection[str]) -> str | None:
        """Find the real file behind *candidate*, trying extensions and index files."""
        hit = self._match_variants(candidate, available)
        if hit is not None:
            return hit

        if candidate.startswith(WORKSPACE_PREFIX):
            bare = candidate[len(WORKSPACE_PREFIX):]
            hit = self._match_variants(bare, available)
            if hit is None:
                hit = self._match_variants(APPS_PREFIX + bare, available)
        return hit

    @staticmethod
    def _match_variants(path: str, available: Collection[str]) -> str | None:
        if not path:
            return None
        if path in available:
            return path

        stem = _KNOWN_EXTENSION_RE.sub("", path)
        for extension in RESOLUTION_EXTENSIONS:
            variant = stem + extension
            if variant in available:
                return variant
        for extension in RESOLUTION_EXTENSIONS:
            variant = f"{stem}/index{extension}"
            if variant in available:
                return variant
        return None
