"""Dependency graph models and builder."""

from repo_depgraph.graph.builder import GraphBuilder
from repo_depgraph.graph.models import (
    DependencyGraph,
    Edge,
    FileNode,
    GraphMetadata,
    GraphStats,
    SourceFile,
)

__all__ = [
    "DependencyGraph",
    "Edge",
    "FileNode",
    "GraphBuilder",
    "GraphMetadata",
    "GraphStats",
    "SourceFile",
]
