"""Parser registry: maps language ids to import parsers."""

from __future__ import annotations

import structlog

from repo_depgraph.languages.registry import LanguageRegistry
from repo_depgraph.parsers.base import ImportParser, ProfileParser
from repo_depgraph.parsers.javascript import JavaScriptParser
from repo_depgraph.parsers.python import PythonParser

log = structlog.get_logger("repo_depgraph.parsers")

FALLBACK_LANGUAGE = "javascript"

DEFAULT_PARSERS: tuple[tuple[str, type[ProfileParser]], ...] = (
    ("javascript", JavaScriptParser),
    ("python", PythonParser),
)


class ParserRegistry:
    """Case-insensitive map of language id (or alias) to parser instance.

    :meth:`get_parser` never fails: unknown languages get the JavaScript
    parser, and the fallback is logged so callers can surface it.
    """

    def __init__(self) -> None:
        self._parsers: dict[str, ImportParser] = {}

    def register_parser(self, language_id: str, parser: ImportParser) -> None:
        """Add or replace the parser for *language_id* (last write wins)."""
        self._parsers[language_id.strip().lower()] = parser

    def has_parser(self, language_id: str) -> bool:
        return language_id.strip().lower() in self._parsers

    def get_parser(self, language_id: str) -> ImportParser:
        parser = self._parsers.get(language_id.strip().lower())
        if parser is not None:
            return parser

        log.warning("parsers.fallback", language=language_id, fallback=FALLBACK_LANGUAGE)
        fallback = self._parsers.get(FALLBACK_LANGUAGE)
        if fallback is None:
            raise LookupError(
                f"no parser for {language_id!r} and no {FALLBACK_LANGUAGE!r} fallback"
            )
        return fallback

    def supported_languages(self) -> list[str]:
        return list(self._parsers)


def create_default_parser_registry(languages: LanguageRegistry) -> ParserRegistry:
    """Create a registry with the JavaScript and Python parsers under all their names."""
    registry = ParserRegistry()
    for language_id, parser_cls in DEFAULT_PARSERS:
        profile = languages.lookup(language_id)
        if profile is None:
            raise LookupError(f"language {language_id!r} is not in the language registry")
        parser = parser_cls(profile)
        for name in sorted(profile.names()):
            registry.register_parser(name, parser)
    return registry
