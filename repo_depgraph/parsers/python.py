"""Import parser for Python sources."""

from __future__ import annotations

import re
from collections.abc import Collection, Iterator

from repo_depgraph.parsers.base import ProfileParser, parent_parts

# import a.b.c / import a.b as x, c / import a; import b
_IMPORT_RE = re.compile(
    r"(?:^|;)[ \t]*import[ \t]+([\w. \t,]+?)[ \t]*(?=;|#|$)", re.MULTILINE
)

# from a.b import x / from . import x / from ..mod import (x, y)
_FROM_RE = re.compile(
    r"(?:^|;)[ \t]*from[ \t]+(\.+[\w.]*|[A-Za-z_][\w.]*)[ \t]+import[ \t]*(\([^)]*\)|[^\n#;]*)",
    re.MULTILINE,
)

_MODULE_RE = re.compile(r"^[A-Za-z_][\w]*(?:\.[A-Za-z_][\w]*)*$")
_NAME_RE = re.compile(r"^[A-Za-z_]\w*$")

INIT_FILE = "__init__.py"

# "src layout": packages live one directory below the repository root.
SOURCE_ROOTS: tuple[str, ...] = ("src/",)

# Top-level names that are never project-local. Not a resolver, just a
# heuristic filter applied to absolute imports.
STDLIB_MODULES: frozenset[str] = frozenset(
    {
        "__future__", "abc", "argparse", "array", "ast", "asyncio", "atexit", "base64",
        "binascii", "bisect", "builtins", "bz2", "calendar", "cmath", "codecs",
        "collections", "concurrent", "configparser", "contextlib", "contextvars", "copy",
        "csv", "ctypes", "dataclasses", "datetime", "decimal", "difflib", "dis", "email",
        "enum", "errno", "fcntl", "fnmatch", "fractions", "ftplib", "functools", "gc",
        "getpass", "gettext", "glob", "gzip", "hashlib", "heapq", "hmac", "html", "http",
        "imaplib", "importlib", "inspect", "io", "ipaddress", "itertools", "json",
        "keyword", "linecache", "locale", "logging", "lzma", "mailbox", "marshal", "math",
        "mimetypes", "mmap", "multiprocessing", "numbers", "operator", "optparse", "os",
        "pathlib", "pickle", "pkgutil", "platform", "plistlib", "pprint",
        "pstats", "queue", "random", "re", "readline", "reprlib", "resource", "sched",
        "secrets", "select", "selectors", "shelve", "shlex", "shutil", "signal",
        "smtplib", "socket", "socketserver", "sqlite3", "ssl", "stat", "statistics",
        "string", "struct", "subprocess", "sys", "sysconfig", "tarfile", "tempfile",
        "textwrap", "threading", "time", "timeit", "tkinter", "tokenize",
        "tomllib", "traceback", "types", "typing", "unicodedata", "unittest", "urllib",
        "uuid", "venv", "warnings", "wave", "weakref", "webbrowser", "winreg", "wsgiref",
        "xml", "xmlrpc", "zipfile", "zipimport", "zlib", "zoneinfo",
    }
)

THIRD_PARTY_MODULES: frozenset[str] = frozenset(
    {
        "aiohttp", "alembic", "anyio", "attr", "attrs", "boto3", "botocore", "celery",
        "click", "django", "fastapi", "flask", "httpx", "jinja2", "matplotlib", "numpy",
        "pandas", "pydantic", "pytest", "redis", "requests", "scipy", "sklearn",
        "sqlalchemy", "starlette", "structlog", "torch", "typer", "uvicorn", "yaml",
    }
)


def is_external_module(module: str) -> bool:
    """True when *module*'s top-level package is a known stdlib or third-party name."""
    top_level = module.split(".", 1)[0]
    return top_level in STDLIB_MODULES or top_level in THIRD_PARTY_MODULES


def _split_names(raw: str) -> Iterator[str]:
    """Yield bound names from the tail of a ``from ... import`` statement."""
    text = raw.strip().strip("()").replace("\\", " ")
    for chunk in text.split(","):
        chunk = chunk.split("#", 1)[0].strip()
        if not chunk:
            continue
        name = chunk.split()[0]
        if name == "*" or _NAME_RE.match(name):
            yield name


class PythonParser(ProfileParser):
    """Regex-based extraction of ``import`` / ``from ... import`` statements.

    Absolute imports become ``a/b/c.py`` guesses; the matcher also tries the
    package form ``a/b/c/__init__.py``. Relative imports climb ``dots - 1``
    directories from the importing file and are dropped if that would leave
    the repository root.
    """

    name = "Python"

    def parse_imports(self, content: str, file_path: str) -> list[str]:
        imports: list[str] = []
        # Join backslash-continued lines into one logical line.
        content = content.replace("\\\n", " ")

        for match in _IMPORT_RE.finditer(content):
            for chunk in match.group(1).split(","):
                parts = chunk.split()
                if not parts or not _MODULE_RE.match(parts[0]):
                    continue
                module = parts[0]
                if is_external_module(module):
                    continue
                resolved = self.resolve_import_path(module, file_path)
                if resolved:
                    imports.append(resolved)

        for match in _FROM_RE.finditer(content):
            module, names = match.group(1), list(_split_names(match.group(2)))
            if module.startswith("."):
                imports.extend(self._relative_targets(module, names, file_path))
            elif _MODULE_RE.match(module) and not is_external_module(module):
                imports.extend(self._absolute_targets(module, names, file_path))

        return imports

    def resolve_import_path(self, import_path: str, file_path: str) -> str | None:
        """``a.b.c`` -> ``a/b/c.py``; relative paths are resolved against *file_path*."""
        if import_path.startswith("."):
            targets = self._relative_targets(import_path, [], file_path)
            return targets[0] if targets else None
        return import_path.replace(".", "/") + ".py"

    def _absolute_targets(self, module: str, names: list[str], file_path: str) -> list[str]:
        base = self.resolve_import_path(module, file_path)
        if base is None:
            return []
        package_dir = module.replace(".", "/")
        # A bound name may itself be a submodule of the package.
        return [base] + [f"{package_dir}/{name}.py" for name in names if name != "*"]

    def _relative_targets(self, module: str, names: list[str], file_path: str) -> list[str]:
        dot_count = len(module) - len(module.lstrip("."))
        remainder = module[dot_count:]

        directory = parent_parts(file_path)
        levels_up = dot_count - 1
        if levels_up > len(directory):
            return []
        base_parts = directory[: len(directory) - levels_up]

        if remainder:
            package_parts = base_parts + remainder.split(".")
            module_target = "/".join(package_parts) + ".py"
        else:
            package_parts = base_parts
            module_target = "/".join(package_parts + [INIT_FILE])

        prefix = "/".join(package_parts)
        submodules = [
            f"{prefix}/{name}.py" if prefix else f"{name}.py" for name in names if name != "*"
        ]
        return [module_target] + submodules

    def match_import_to_file(self, candidate: str, available: Collection[str]) -> str | None:
        """Match a module guess against real files, trying package and stub forms."""
        hit = self._match_variants(candidate, available)
        if hit is not None:
            return hit
        for root in SOURCE_ROOTS:
            if not candidate.startswith(root):
                hit = self._match_variants(root + candidate, available)
                if hit is not None:
                    return hit
        return None

    @staticmethod
    def _match_variants(path: str, available: Collection[str]) -> str | None:
        if path in available:
            return path
        if path.endswith(".pyi"):
            stem = path[:-4]
        elif path.endswith(".py"):
            stem = path[:-3]
        else:
            stem = path
        variants = (f"{stem}.py", f"{stem}/{INIT_FILE}", f"{stem}.pyi", f"{stem}/__init__.pyi")
        for variant in variants:
            if variant in available:
                return variant
        return None
