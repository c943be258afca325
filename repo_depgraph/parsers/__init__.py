"""Per-language import parsers and the registry that selects them."""

from repo_depgraph.parsers.base import ImportMatcher, ImportParser, ProfileParser
from repo_depgraph.parsers.javascript import JavaScriptParser
from repo_depgraph.parsers.python import PythonParser
from repo_depgraph.parsers.registry import ParserRegistry, create_default_parser_registry

__all__ = [
    "ImportMatcher",
    "ImportParser",
    "JavaScriptParser",
    "ParserRegistry",
    "ProfileParser",
    "PythonParser",
    "create_default_parser_registry",
]
