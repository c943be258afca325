"""Tests for the end-to-end analysis pipeline (in-memory source)."""

from __future__ import annotations

import base64

import httpx
import pytest

from repo_depgraph.config import Settings
from repo_depgraph.exceptions import InvalidRepositoryError, SourceUnavailableError
from repo_depgraph.languages.models import DetectionMethod
from repo_depgraph.pipeline import (
    NO_FILES_WARNING,
    TREE_UNAVAILABLE_WARNING,
    TRUNCATED_TREE_WARNING,
    RepositoryAnalyzer,
    analyze,
    analyze_repository,
)
from repo_depgraph.sources.github import GitHubRepositorySource
from repo_depgraph.sources.models import FetchedFile, RepoTree, TreeEntry


class FakeSource:
    """In-memory repository: path -> content."""

    name = "fake"

    def __init__(
        self,
        files: dict[str, str],
        *,
        stats: dict[str, int] | None = None,
        truncated: bool = False,
        sizes: dict[str, int | None] | None = None,
        failing: set[str] = frozenset(),
        broken: set[str] = frozenset(),
        list_fails: bool = False,
    ) -> None:
        self.files = files
        self.stats = stats
        self.truncated = truncated
        self.sizes = sizes or {}
        self.failing = failing
        self.broken = broken
        self.list_fails = list_fails
        self.fetched: list[str] = []

    async def list_tree(self) -> RepoTree:
        if self.list_fails:
            raise SourceUnavailableError("no branch")
        entries = [
            TreeEntry(path, size=self.sizes.get(path, len(content)))
            for path, content in self.files.items()
        ]
        return RepoTree(entries=entries, truncated=self.truncated, ref="main")

    async def get_language_stats(self) -> dict[str, int]:
        if self.stats is None:
            raise SourceUnavailableError("no stats")
        return self.stats

    async def fetch_file(self, entry: TreeEntry) -> FetchedFile:
        self.fetched.append(entry.path)
        if entry.path in self.failing:
            raise SourceUnavailableError(f"cannot fetch {entry.path}")
        if entry.path in self.broken:
            raise ValueError(f"garbled response for {entry.path}")
        content = self.files[entry.path]
        return FetchedFile(entry.path, content, len(content.encode()))


def _analyzer(**overrides) -> RepositoryAnalyzer:
    return RepositoryAnalyzer(Settings(**overrides))


# ── Happy path ──


class TestAnalyze:
    @pytest.mark.anyio
    async def test_typescript_repo(self):
        source = FakeSource(
            {
                "package.json": "{}",
                "src/a.ts": 'import { b } from "./b"\nimport pad from "left-pad"\n',
                "src/b.ts": "export const b = 1\n",
                "README.md": "# hi",
            }
        )
        graph = await _analyzer().run(source)

        assert graph.metadata.language == "javascript"
        assert graph.metadata.detection_method is DetectionMethod.MANIFEST_MATCH
        assert set(graph.nodes) == {"src/a.ts", "src/b.ts"}
        assert graph.edge_pairs() == {("src/a.ts", "src/b.ts")}
        assert graph.warnings == []

    @pytest.mark.anyio
    async def test_python_repo_with_stats(self):
        source = FakeSource(
            {
                "pkg/__init__.py": "",
                "pkg/mod.py": "from . import sibling\n",
                "pkg/sibling.py": "import os\n",
            },
            stats={"Python": 300},
        )
        graph = await _analyzer().run(source)

        assert graph.metadata.detection_method is DetectionMethod.PROVIDER_STATISTICS
        assert graph.edge_pairs() == {
            ("pkg/mod.py", "pkg/__init__.py"),
            ("pkg/mod.py", "pkg/sibling.py"),
        }

    @pytest.mark.anyio
    async def test_language_override(self):
        source = FakeSource({"package.json": "{}", "tool.py": "import helper\n", "helper.py": ""})
        graph = await analyze_repository(source, language="py", settings=Settings())

        assert graph.metadata.language == "python"
        assert graph.metadata.confidence == 1.0
        assert graph.edge_pairs() == {("tool.py", "helper.py")}

    @pytest.mark.anyio
    async def test_excluded_files_filtered(self):
        source = FakeSource(
            {
                "src/a.ts": "",
                "src/a.test.ts": 'import a from "./a"\n',
                "node_modules/x/index.js": "",
            }
        )
        graph = await _analyzer().run(source)
        assert set(graph.nodes) == {"src/a.ts"}

    @pytest.mark.anyio
    async def test_unsupported_language_warns(self):
        source = FakeSource({"go.mod": "module x", "main.go": "package main"})
        graph = await _analyzer().run(source)

        assert graph.metadata.language == "go"
        assert graph.metadata.confidence == 0.8
        assert any("No import parser is available for 'go'" in w for w in graph.warnings)
        assert NO_FILES_WARNING in graph.warnings


# ── Degraded sources ──


class TestWarnings:
    @pytest.mark.anyio
    async def test_listing_failure_gives_empty_graph(self):
        graph = await _analyzer().run(FakeSource({}, list_fails=True))

        assert graph.nodes == {}
        assert graph.warnings[0] == TREE_UNAVAILABLE_WARNING
        assert NO_FILES_WARNING in graph.warnings
        assert graph.metadata.language == "javascript"

    @pytest.mark.anyio
    async def test_truncated_listing(self):
        graph = await _analyzer().run(FakeSource({"a.ts": ""}, truncated=True))
        assert TRUNCATED_TREE_WARNING in graph.warnings

    @pytest.mark.anyio
    async def test_file_cap(self):
        files = {f"src/f{i}.ts": "" for i in range(5)}
        graph = await _analyzer(max_files=3).run(FakeSource(files))

        assert len(graph.nodes) == 3
        assert any(w.startswith("Analysis limited to 3 files.") for w in graph.warnings)

    @pytest.mark.anyio
    async def test_exact_cap_not_reported(self):
        files = {f"src/f{i}.ts": "" for i in range(3)}
        graph = await _analyzer(max_files=3).run(FakeSource(files))
        assert not any(w.startswith("Analysis limited") for w in graph.warnings)

    @pytest.mark.anyio
    async def test_large_files_skipped_before_fetch(self):
        source = FakeSource(
            {"a.ts": 'import b from "./b"\n', "b.ts": ""},
            sizes={"a.ts": 60_000},
        )
        graph = await _analyzer().run(source)

        assert source.fetched == ["b.ts"]
        assert "a.ts" in graph.nodes
        assert graph.edges == []
        assert "Skipped 1 large files (>50KB) to improve performance." in graph.warnings

    @pytest.mark.anyio
    async def test_large_content_discarded_after_fetch(self):
        source = FakeSource({"a.ts": "x" * 2_000, "b.ts": ""}, sizes={"a.ts": None})
        graph = await _analyzer(max_file_bytes=1_000).run(source)

        assert "a.ts" in source.fetched
        assert "Skipped 1 large files (>1KB) to improve performance." in graph.warnings

    @pytest.mark.anyio
    async def test_fetch_failures_counted(self):
        source = FakeSource(
            {"a.ts": 'import b from "./b"\n', "b.ts": "", "c.ts": ""},
            failing={"a.ts", "c.ts"},
        )
        graph = await _analyzer().run(source)

        assert set(graph.nodes) == {"a.ts", "b.ts", "c.ts"}
        assert graph.edges == []
        assert (
            "Failed to fetch 2 files. This may be due to rate limiting or permissions."
            in graph.warnings
        )

    @pytest.mark.anyio
    async def test_unexpected_fetch_error_counted(self):
        source = FakeSource(
            {"a.ts": 'import b from "./b"\n', "b.ts": "", "c.ts": ""},
            broken={"c.ts"},
        )
        graph = await _analyzer().run(source)

        assert set(graph.nodes) == {"a.ts", "b.ts", "c.ts"}
        assert graph.edge_pairs() == {("a.ts", "b.ts")}
        assert (
            "Failed to fetch 1 files. This may be due to rate limiting or permissions."
            in graph.warnings
        )

    @pytest.mark.anyio
    async def test_low_concurrency_fetches_everything(self):
        files = {f"f{i}.py": "" for i in range(10)}
        source = FakeSource(files, stats={"Python": 1})
        graph = await _analyzer(fetch_concurrency=1).run(source)

        assert sorted(source.fetched) == sorted(files)
        assert len(graph.nodes) == 10


# ── Reference entry point ──


class TestAnalyzeReference:
    @pytest.mark.anyio
    async def test_local_checkout(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project]\n")
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / "main.py").write_text("from app import models\n")
        (tmp_path / "app" / "models.py").write_text("")

        graph = await analyze(str(tmp_path), settings=Settings())

        assert graph.metadata.language == "python"
        assert graph.edge_pairs() == {("app/main.py", "app/models.py")}

    @pytest.mark.anyio
    async def test_invalid_reference(self):
        with pytest.raises(InvalidRepositoryError):
            await analyze("not a repo", settings=Settings())


# ── GitHub responses ──


def _contents(body: str) -> httpx.Response:
    encoded = base64.b64encode(body.encode()).decode()
    return httpx.Response(
        200, json={"content": encoded, "encoding": "base64", "size": len(body)}
    )


_GITHUB_TREE = httpx.Response(
    200,
    json={
        "tree": [
            {"path": "package.json", "type": "blob", "size": 2},
            {"path": "src", "type": "tree"},
            {"path": "src/a.ts", "type": "blob", "size": 24},
            {"path": "src/b.ts", "type": "blob", "size": 19},
        ],
        "truncated": False,
    },
)


class TestGitHubResponses:
    @pytest.mark.anyio
    async def test_non_json_file_body_degrades(self, routed_github):
        routes = {
            "/repos/o/r/git/trees/main": _GITHUB_TREE,
            "/repos/o/r/languages": httpx.Response(200, json={"TypeScript": 43}),
            "/repos/o/r/contents/src/a.ts": _contents('import { b } from "./b"\n'),
            "/repos/o/r/contents/src/b.ts": httpx.Response(200, text="<html>proxy error</html>"),
        }
        async with routed_github(routes) as client:
            graph = await _analyzer().run(GitHubRepositorySource(client, "o", "r"))

        assert graph.metadata.detection_method is DetectionMethod.PROVIDER_STATISTICS
        assert set(graph.nodes) == {"src/a.ts", "src/b.ts"}
        assert graph.edge_pairs() == {("src/a.ts", "src/b.ts")}
        assert (
            "Failed to fetch 1 files. This may be due to rate limiting or permissions."
            in graph.warnings
        )

    @pytest.mark.anyio
    async def test_non_json_language_stats_falls_back(self, routed_github):
        routes = {
            "/repos/o/r/git/trees/main": _GITHUB_TREE,
            "/repos/o/r/languages": httpx.Response(200, text="not json"),
            "/repos/o/r/contents/src/a.ts": _contents('import { b } from "./b"\n'),
            "/repos/o/r/contents/src/b.ts": _contents("export const b = 1\n"),
        }
        async with routed_github(routes) as client:
            graph = await _analyzer().run(GitHubRepositorySource(client, "o", "r"))

        assert graph.metadata.language == "javascript"
        assert graph.metadata.detection_method is DetectionMethod.MANIFEST_MATCH
        assert graph.edge_pairs() == {("src/a.ts", "src/b.ts")}
        assert graph.warnings == []
