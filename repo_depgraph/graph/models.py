"""Data models for the file dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field

from repo_depgraph.languages.models import (
    DEFAULT_CATEGORY,
    DetectionMethod,
    LanguageDetectionResult,
)


@dataclass
class SourceFile:
    """A file handed to the builder; content is empty when it was not fetched."""

    path: str
    content: str = ""


@dataclass
class FileNode:
    """One repository file in the graph.

    ``imports`` and ``imported_by`` hold paths and are kept free of
    duplicates; their order is first-seen and carries no meaning.
    """

    path: str
    category: str = DEFAULT_CATEGORY
    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)

    @property
    def is_isolated(self) -> bool:
        return not self.imports and not self.imported_by


@dataclass(frozen=True)
class Edge:
    """``source`` imports ``target``."""

    source: str
    target: str


@dataclass
class GraphMetadata:
    language: str
    detection_method: DetectionMethod
    confidence: float

    @classmethod
    def from_detection(cls, detection: LanguageDetectionResult) -> GraphMetadata:
        return cls(
            language=detection.language,
            detection_method=detection.method,
            confidence=detection.confidence,
        )


@dataclass
class GraphStats:
    """Advisory counts; they never change the graph itself."""

    node_count: int = 0
    edge_count: int = 0
    isolated_count: int = 0
    nodes_with_imports: int = 0
    unparseable_count: int = 0


@dataclass
class DependencyGraph:
    """Builder output: nodes keyed by path, directed edges, metadata and warnings."""

    nodes: dict[str, FileNode]
    edges: list[Edge]
    metadata: GraphMetadata
    warnings: list[str] = field(default_factory=list)
    stats: GraphStats = field(default_factory=GraphStats)

    @classmethod
    def empty(
        cls, detection: LanguageDetectionResult, warnings: list[str] | None = None
    ) -> DependencyGraph:
        return cls(
            nodes={},
            edges=[],
            metadata=GraphMetadata.from_detection(detection),
            warnings=list(warnings or []),
        )

    def edge_pairs(self) -> set[tuple[str, str]]:
        return {(edge.source, edge.target) for edge in self.edges}

    def isolated_nodes(self) -> list[str]:
        return [path for path, node in self.nodes.items() if node.is_isolated]
