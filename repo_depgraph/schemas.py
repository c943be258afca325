"""JSON output schemas for a dependency graph."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from repo_depgraph.graph.models import DependencyGraph


class NodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: str
    category: str
    imports: list[str]
    imported_by: list[str]


class EdgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    source: str
    target: str


class MetadataOut(BaseModel):
    language: str
    detection_method: str
    confidence: float


class StatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    node_count: int
    edge_count: int
    isolated_count: int
    nodes_with_imports: int
    unparseable_count: int


class GraphPayload(BaseModel):
    """Serializable form of a :class:`DependencyGraph`."""

    nodes: list[NodeOut]
    edges: list[EdgeOut]
    metadata: MetadataOut
    warnings: list[str]
    stats: StatsOut

    @classmethod
    def from_graph(cls, graph: DependencyGraph) -> GraphPayload:
        return cls(
            nodes=[NodeOut.model_validate(node) for node in graph.nodes.values()],
            edges=[EdgeOut.model_validate(edge) for edge in graph.edges],
            metadata=MetadataOut(
                language=graph.metadata.language,
                detection_method=graph.metadata.detection_method.value,
                confidence=graph.metadata.confidence,
            ),
            warnings=list(graph.warnings),
            stats=StatsOut.model_validate(graph.stats),
        )
