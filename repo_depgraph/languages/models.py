"""Data models for language profiles and detection results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_CATEGORY = "other"


class DetectionMethod(str, Enum):
    """How a repository's primary language was decided."""

    PROVIDER_STATISTICS = "provider-statistics"
    MANIFEST_MATCH = "manifest-match"
    EXTENSION_COUNT = "extension-count"
    MANUAL_OVERRIDE = "manual-override"


@dataclass(frozen=True)
class LanguageProfile:
    """Static description of one supported language."""

    id: str
    display_name: str
    aliases: frozenset[str] = frozenset()
    extensions: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    manifest_files: tuple[str, ...] = ()
    # Ordered (category, patterns) pairs; the first category with a matching
    # substring wins.
    classification: tuple[tuple[str, tuple[str, ...]], ...] = ()

    def names(self) -> set[str]:
        """Id plus aliases, lower-cased."""
        return {self.id.lower(), *(alias.lower() for alias in self.aliases)}

    def classify(self, path: str) -> str:
        for category, patterns in self.classification:
            if any(pattern in path for pattern in patterns):
                return category
        return DEFAULT_CATEGORY

    def is_excluded(self, path: str) -> bool:
        return any(pattern in path for pattern in self.exclude_patterns)

    def has_extension(self, path: str) -> bool:
        return path.endswith(self.extensions)


@dataclass
class LanguageDetectionResult:
    """Detection verdict for one graph-build request."""

    language: str
    confidence: float
    method: DetectionMethod
    evidence: dict[str, Any] | None = None
    defaulted: bool = False

    def __post_init__(self) -> None:
        self.confidence = min(max(float(self.confidence), 0.0), 1.0)

    @classmethod
    def manual(cls, language: str) -> LanguageDetectionResult:
        return cls(language=language, confidence=1.0, method=DetectionMethod.MANUAL_OVERRIDE)
