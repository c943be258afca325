"""repo-depgraph: multi-language import extraction and file dependency graphs."""

__version__ = "0.1.0"

from repo_depgraph.config import Settings
from repo_depgraph.exceptions import (
    DepGraphError,
    InvalidRepositoryError,
    RegistryError,
    SourceUnavailableError,
)
from repo_depgraph.graph import DependencyGraph, Edge, FileNode, GraphBuilder, SourceFile
from repo_depgraph.languages import (
    DetectionMethod,
    LanguageDetectionResult,
    LanguageDetector,
    LanguageProfile,
    LanguageRegistry,
    create_default_registry,
)
from repo_depgraph.parsers import ParserRegistry, create_default_parser_registry
from repo_depgraph.pipeline import RepositoryAnalyzer, analyze, analyze_repository

__all__ = [
    "DepGraphError",
    "DependencyGraph",
    "DetectionMethod",
    "Edge",
    "FileNode",
    "GraphBuilder",
    "InvalidRepositoryError",
    "LanguageDetectionResult",
    "LanguageDetector",
    "LanguageProfile",
    "LanguageRegistry",
    "ParserRegistry",
    "RegistryError",
    "RepositoryAnalyzer",
    "Settings",
    "SourceFile",
    "SourceUnavailableError",
    "analyze",
    "analyze_repository",
    "create_default_parser_registry",
    "create_default_registry",
]
