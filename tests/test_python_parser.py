"""Tests for the Python import parser."""

from __future__ import annotations

from repo_depgraph.parsers.python import is_external_module

# ── Absolute imports ──


class TestAbsoluteImports:
    def test_plain_import(self, py_parser):
        assert py_parser.parse_imports("import mypkg.utils\n", "main.py") == ["mypkg/utils.py"]

    def test_aliases_and_lists(self, py_parser):
        content = "import a.b as x, c\n"
        assert py_parser.parse_imports(content, "main.py") == ["a/b.py", "c.py"]

    def test_indented_import(self, py_parser):
        content = "def f():\n    import helpers\n    return helpers\n"
        assert py_parser.parse_imports(content, "main.py") == ["helpers.py"]

    def test_trailing_comment(self, py_parser):
        assert py_parser.parse_imports("import helpers  # noqa\n", "main.py") == ["helpers.py"]

    def test_semicolon_separated(self, py_parser):
        content = "import a; import b.c  # both\nx = 1; from d import e\n"
        assert py_parser.parse_imports(content, "main.py") == [
            "a.py",
            "b/c.py",
            "d.py",
            "d/e.py",
        ]

    def test_backslash_continuation(self, py_parser):
        content = "import a, \\\n    b\nfrom c import d, \\\n    e\n"
        assert py_parser.parse_imports(content, "main.py") == [
            "a.py",
            "b.py",
            "c.py",
            "c/d.py",
            "c/e.py",
        ]

    def test_from_import_adds_submodule_candidates(self, py_parser):
        content = "from mypkg.core import engine, Model\n"
        assert py_parser.parse_imports(content, "main.py") == [
            "mypkg/core.py",
            "mypkg/core/engine.py",
            "mypkg/core/Model.py",
        ]

    def test_parenthesized_names(self, py_parser):
        content = "from mypkg import (\n    a,\n    b as c,  # trailing\n)\n"
        assert py_parser.parse_imports(content, "main.py") == [
            "mypkg.py",
            "mypkg/a.py",
            "mypkg/b.py",
        ]

    def test_star_import(self, py_parser):
        assert py_parser.parse_imports("from mypkg.api import *\n", "main.py") == [
            "mypkg/api.py",
        ]

    def test_imports_then_from_imports(self, py_parser):
        content = "from app import models\nimport app.views\n"
        assert py_parser.parse_imports(content, "run.py") == [
            "app/views.py",
            "app.py",
            "app/models.py",
        ]


# ── External modules ──


class TestExternalModules:
    def test_stdlib_skipped(self, py_parser):
        content = "import os.path\nimport sys, json\nfrom typing import Any\nfrom collections import abc\n"
        assert py_parser.parse_imports(content, "main.py") == []

    def test_third_party_skipped(self, py_parser):
        content = "import requests\nfrom pydantic import BaseModel\nimport numpy as np\n"
        assert py_parser.parse_imports(content, "main.py") == []

    def test_mixed_list_keeps_local(self, py_parser):
        assert py_parser.parse_imports("import os, helpers\n", "main.py") == ["helpers.py"]

    def test_is_external_module(self):
        assert is_external_module("os.path")
        assert is_external_module("httpx")
        assert not is_external_module("mypkg.os")


# ── Relative imports ──


class TestRelativeImports:
    def test_from_dot_import_name(self, py_parser):
        assert py_parser.parse_imports("from . import sibling\n", "pkg/mod.py") == [
            "pkg/__init__.py",
            "pkg/sibling.py",
        ]

    def test_from_dot_module(self, py_parser):
        content = "from .mod import y\n"
        assert py_parser.parse_imports(content, "pkg/sub/f.py") == [
            "pkg/sub/mod.py",
            "pkg/sub/mod/y.py",
        ]

    def test_parent_package(self, py_parser):
        assert py_parser.parse_imports("from .. import x\n", "a/b/c.py") == [
            "a/__init__.py",
            "a/x.py",
        ]

    def test_parent_dotted_module(self, py_parser):
        content = "from ..core.engine import run\n"
        assert py_parser.parse_imports(content, "app/api/views.py")[0] == "app/core/engine.py"

    def test_above_root_dropped(self, py_parser):
        assert py_parser.parse_imports("from ... import z\n", "pkg/f.py") == []

    def test_resolve_import_path(self, py_parser):
        assert py_parser.resolve_import_path("a.b.c", "x.py") == "a/b/c.py"
        assert py_parser.resolve_import_path(".", "pkg/mod.py") == "pkg/__init__.py"
        assert py_parser.resolve_import_path("...x", "a.py") is None


# ── Matching ──


class TestMatchImportToFile:
    def test_exact(self, py_parser):
        assert py_parser.match_import_to_file("a/b.py", {"a/b.py"}) == "a/b.py"

    def test_package_init(self, py_parser):
        available = {"pkg/core/__init__.py"}
        assert py_parser.match_import_to_file("pkg/core.py", available) == (
            "pkg/core/__init__.py"
        )

    def test_stub_file(self, py_parser):
        assert py_parser.match_import_to_file("pkg/types.py", {"pkg/types.pyi"}) == (
            "pkg/types.pyi"
        )

    def test_src_layout(self, py_parser):
        available = {"src/mypkg/utils.py"}
        assert py_parser.match_import_to_file("mypkg/utils.py", available) == (
            "src/mypkg/utils.py"
        )

    def test_no_match(self, py_parser):
        assert py_parser.match_import_to_file("nope.py", {"a.py"}) is None


# ── Robustness ──


class TestRobustness:
    def test_no_imports(self, py_parser):
        assert py_parser.parse_imports("x = 1\n", "a.py") == []

    def test_malformed(self, py_parser):
        assert py_parser.parse_imports("from import\nimport\nimport (\n", "a.py") == []

    def test_idempotent(self, py_parser):
        content = "from . import a\nimport b.c\n"
        first = py_parser.parse_imports(content, "p/q.py")
        assert py_parser.parse_imports(content, "p/q.py") == first

    def test_accepts(self, py_parser):
        assert py_parser.accepts("app/main.py")
        assert py_parser.accepts("stubs/x.pyi")
        assert not py_parser.accepts("app/__pycache__/main.py")
        assert not py_parser.accepts("app/main.js")
