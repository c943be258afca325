"""End-to-end analysis: list, detect, filter, fetch, build."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from repo_depgraph.config import Settings
from repo_depgraph.exceptions import SourceUnavailableError
from repo_depgraph.graph.builder import GraphBuilder
from repo_depgraph.graph.models import DependencyGraph, SourceFile
from repo_depgraph.languages.detector import LanguageDetector
from repo_depgraph.languages.registry import LanguageRegistry, create_default_registry
from repo_depgraph.parsers.base import ImportParser
from repo_depgraph.parsers.registry import ParserRegistry, create_default_parser_registry
from repo_depgraph.sources import open_source
from repo_depgraph.sources.base import RepositorySource
from repo_depgraph.sources.models import RepoTree, TreeEntry

log = structlog.get_logger("repo_depgraph.pipeline")

TREE_UNAVAILABLE_WARNING = (
    "Could not fetch repository tree. The repository may be private, empty, "
    "or the GitHub API may be rate limited."
)
TRUNCATED_TREE_WARNING = (
    "Repository is very large (>7,000 files). Analysis may be incomplete. "
    "Consider analyzing a specific subdirectory or package."
)
NO_FILES_WARNING = (
    "No code files found matching the detected language. "
    "The repository might be empty or use a different structure."
)


@dataclass
class FetchTally:
    fetched: int = 0
    skipped_large: int = 0
    failed: int = 0


class RepositoryAnalyzer:
    """Runs the whole analysis against any :class:`RepositorySource`.

    Registries are built once per analyzer and only read afterwards, so one
    instance can serve many repositories.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        languages: LanguageRegistry | None = None,
        parsers: ParserRegistry | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.languages = languages or create_default_registry()
        self.parsers = parsers or create_default_parser_registry(self.languages)
        self.detector = LanguageDetector(self.languages)
        self.builder = GraphBuilder(
            self.parsers, isolated_warning_ratio=self.settings.isolated_warning_ratio
        )

    async def run(self, source: RepositorySource, *, language: str | None = None) -> DependencyGraph:
        warnings: list[str] = []

        tree = await self._list_tree(source, warnings)
        detection = await self.detector.detect_repository(
            tree.file_paths(),
            stats_provider=source.get_language_stats,
            override=language,
        )

        parser, fallback_warning = self.builder.select_parser(detection.language)
        if fallback_warning:
            warnings.append(fallback_warning)
        log.info("pipeline.parser_selected", language=detection.language, parser=parser.name)

        entries = self._select_entries(tree, parser, warnings)
        files, tally = await self._fetch_all(source, entries)

        if tally.skipped_large:
            warnings.append(
                f"Skipped {tally.skipped_large} large files "
                f"(>{self.settings.max_file_bytes // 1000}KB) to improve performance."
            )
        if tally.failed:
            warnings.append(
                f"Failed to fetch {tally.failed} files. "
                "This may be due to rate limiting or permissions."
            )

        return self.builder.build(
            detection.language,
            files,
            detection=detection,
            parser=parser,
            warnings=warnings,
        )

    # ── steps ─────────────────────────────────────────────────────────────

    async def _list_tree(self, source: RepositorySource, warnings: list[str]) -> RepoTree:
        try:
            tree = await source.list_tree()
        except SourceUnavailableError as exc:
            log.warning("pipeline.tree_unavailable", source=source.name, error=str(exc))
            warnings.append(TREE_UNAVAILABLE_WARNING)
            return RepoTree()

        if tree.truncated:
            log.warning("pipeline.tree_truncated", source=source.name, entries=len(tree.entries))
            warnings.append(TRUNCATED_TREE_WARNING)
        return tree

    def _select_entries(
        self, tree: RepoTree, parser: ImportParser, warnings: list[str]
    ) -> list[TreeEntry]:
        matching = [entry for entry in tree.file_entries() if parser.accepts(entry.path)]
        max_files = self.settings.max_files
        log.info("pipeline.files_selected", matching=len(matching), limit=max_files)

        if not matching:
            warnings.append(NO_FILES_WARNING)
        elif len(matching) > max_files:
            warnings.append(
                f"Analysis limited to {max_files} files. Repository contains more files "
                "than can be efficiently analyzed."
            )
        return matching[:max_files]

    async def _fetch_all(
        self, source: RepositorySource, entries: list[TreeEntry]
    ) -> tuple[list[SourceFile], FetchTally]:
        """Fetch contents concurrently. Every entry still yields a file, possibly empty."""
        tally = FetchTally()
        max_bytes = self.settings.max_file_bytes
        sem = asyncio.Semaphore(self.settings.fetch_concurrency)

        async def _fetch_one(entry: TreeEntry) -> SourceFile:
            if entry.size is not None and entry.size >= max_bytes:
                tally.skipped_large += 1
                return SourceFile(path=entry.path)
            async with sem:
                try:
                    fetched = await source.fetch_file(entry)
                except SourceUnavailableError as exc:
                    log.warning("pipeline.fetch_failed", path=entry.path, error=str(exc))
                    tally.failed += 1
                    return SourceFile(path=entry.path)
                except Exception:
                    # One bad file must not sink the whole graph.
                    log.warning("pipeline.fetch_failed", path=entry.path, exc_info=True)
                    tally.failed += 1
                    return SourceFile(path=entry.path)
            if fetched.size >= max_bytes:
                tally.skipped_large += 1
                return SourceFile(path=entry.path)
            tally.fetched += 1
            return SourceFile(path=entry.path, content=fetched.content)

        files = list(await asyncio.gather(*(_fetch_one(entry) for entry in entries)))
        log.info(
            "pipeline.fetched",
            fetched=tally.fetched,
            skipped_large=tally.skipped_large,
            failed=tally.failed,
        )
        return files, tally


async def analyze_repository(
    source: RepositorySource,
    *,
    language: str | None = None,
    settings: Settings | None = None,
    analyzer: RepositoryAnalyzer | None = None,
) -> DependencyGraph:
    """Analyze an already opened source."""
    analyzer = analyzer or RepositoryAnalyzer(settings)
    return await analyzer.run(source, language=language)


async def analyze(
    reference: str,
    *,
    language: str | None = None,
    settings: Settings | None = None,
) -> DependencyGraph:
    """Open *reference* (local path or GitHub URL) and analyze it.

    Raises InvalidRepositoryError if the reference is neither.
    """
    settings = settings or Settings.from_env()
    async with open_source(reference, settings) as source:
        return await analyze_repository(source, language=language, settings=settings)
