"""Graph builder: parse imports, match them to files, link nodes."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from repo_depgraph.graph.models import (
    DependencyGraph,
    Edge,
    FileNode,
    GraphMetadata,
    GraphStats,
    SourceFile,
)
from repo_depgraph.languages.models import LanguageDetectionResult
from repo_depgraph.parsers.base import ImportMatcher, ImportParser
from repo_depgraph.parsers.registry import ParserRegistry

log = structlog.get_logger("repo_depgraph.graph")

DEFAULT_ISOLATED_RATIO = 0.8


class GraphBuilder:
    """Assemble a :class:`DependencyGraph` from ``(path, content)`` pairs.

    Every supplied path becomes a node, whether or not it has content or
    edges. An import only becomes an edge when it matches a known node;
    everything else is treated as an external dependency and dropped.
    Repeated imports of the same target collapse into one edge, and a file
    never gets an edge to itself.
    """

    def __init__(
        self,
        parser_registry: ParserRegistry,
        *,
        isolated_warning_ratio: float = DEFAULT_ISOLATED_RATIO,
    ) -> None:
        self._parsers = parser_registry
        self._isolated_warning_ratio = isolated_warning_ratio

    def select_parser(self, language_id: str) -> tuple[ImportParser, str | None]:
        """Return the parser for *language_id* plus a warning when it is a fallback."""
        parser = self._parsers.get_parser(language_id)
        if self._parsers.has_parser(language_id):
            return parser, None
        return parser, (
            f"No import parser is available for '{language_id}'; "
            f"used the {parser.name} parser instead. Dependencies may be incomplete."
        )

    def build(
        self,
        language_id: str,
        files: Iterable[SourceFile],
        *,
        detection: LanguageDetectionResult | None = None,
        parser: ImportParser | None = None,
        warnings: Iterable[str] = (),
    ) -> DependencyGraph:
        """Build the graph for *files*, which are already filtered to the language.

        Args:
            language_id: Resolved language; selects the parser unless *parser*
                is given.
            files: Files to include. Empty content yields a node without
                outgoing edges.
            detection: Detection verdict copied into the metadata. Without it
                the language is recorded as a manual override.
            parser: Parser to use instead of a registry lookup.
            warnings: Warnings collected upstream, kept ahead of the builder's own.
        """
        graph_warnings = list(warnings)
        if parser is None:
            parser, fallback_warning = self.select_parser(language_id)
            if fallback_warning:
                graph_warnings.append(fallback_warning)

        files = list(files)
        nodes: dict[str, FileNode] = {}
        for source_file in files:
            if source_file.path not in nodes:
                nodes[source_file.path] = FileNode(
                    path=source_file.path, category=parser.classify(source_file.path)
                )

        available = frozenset(nodes)
        edges: list[Edge] = []
        seen: set[tuple[str, str]] = set()
        unparseable = 0

        for source_file in files:
            if not source_file.content:
                continue
            try:
                targets = self._match_imports(parser, source_file, available)
            except Exception:
                # One bad file must not sink the whole graph.
                log.debug("graph.parse_failed", path=source_file.path, exc_info=True)
                unparseable += 1
                continue

            source_node = nodes[source_file.path]
            for target in targets:
                pair = (source_file.path, target)
                if target == source_file.path or pair in seen:
                    continue
                seen.add(pair)
                source_node.imports.append(target)
                nodes[target].imported_by.append(source_file.path)
                edges.append(Edge(source=source_file.path, target=target))

        stats = GraphStats(
            node_count=len(nodes),
            edge_count=len(edges),
            isolated_count=sum(1 for node in nodes.values() if node.is_isolated),
            nodes_with_imports=sum(1 for node in nodes.values() if node.imports),
            unparseable_count=unparseable,
        )
        log.info(
            "graph.built",
            language=language_id,
            nodes=stats.node_count,
            edges=stats.edge_count,
            isolated=stats.isolated_count,
            with_imports=stats.nodes_with_imports,
        )

        if unparseable:
            graph_warnings.append(f"Could not parse imports in {unparseable} files.")
        if nodes and stats.isolated_count > len(nodes) * self._isolated_warning_ratio:
            graph_warnings.append(
                f"Most files ({stats.isolated_count}/{len(nodes)}) appear isolated. "
                "This might indicate import resolution issues or that the repository "
                "structure is not well-suited for dependency analysis."
            )

        if detection is None:
            detection = LanguageDetectionResult.manual(language_id)

        return DependencyGraph(
            nodes=nodes,
            edges=edges,
            metadata=GraphMetadata.from_detection(detection),
            warnings=graph_warnings,
            stats=stats,
        )

    @staticmethod
    def _match_imports(
        parser: ImportParser, source_file: SourceFile, available: frozenset[str]
    ) -> list[str]:
        """Parse one file and map each candidate to an existing node path."""
        candidates = parser.parse_imports(source_file.content, source_file.path)
        matcher = parser if isinstance(parser, ImportMatcher) else None
        matched: list[str] = []
        for candidate in candidates:
            if matcher is not None:
                target = matcher.match_import_to_file(candidate, available)
            else:
                target = candidate if candidate in available else None
            if target is not None and target in available:
                matched.append(target)
        return matched
