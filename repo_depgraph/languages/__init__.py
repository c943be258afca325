"""Language catalog and primary-language detection."""

from repo_depgraph.languages.detector import LanguageDetector
from repo_depgraph.languages.models import (
    DEFAULT_CATEGORY,
    DetectionMethod,
    LanguageDetectionResult,
    LanguageProfile,
)
from repo_depgraph.languages.registry import (
    BUILTIN_PROFILES,
    LanguageRegistry,
    create_default_registry,
)

__all__ = [
    "BUILTIN_PROFILES",
    "DEFAULT_CATEGORY",
    "DetectionMethod",
    "LanguageDetectionResult",
    "LanguageDetector",
    "LanguageProfile",
    "LanguageRegistry",
    "create_default_registry",
]
