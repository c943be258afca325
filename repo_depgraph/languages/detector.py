"""Language detection: provider stats, then manifests, then extension counts.

Layer 0: explicit override from the caller (confidence 1.0).
Layer 1: byte-count statistics from the repository host.
Layer 2: manifest files at the repository root.
Layer 3: file extension distribution.
Anything left falls back to a fixed default with low confidence.
"""

from __future__ import annotations

import posixpath
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable, Mapping

import structlog

from repo_depgraph.exceptions import SourceUnavailableError
from repo_depgraph.languages.models import DetectionMethod, LanguageDetectionResult
from repo_depgraph.languages.registry import LanguageRegistry

log = structlog.get_logger("repo_depgraph.detector")

DEFAULT_LANGUAGE = "javascript"
DEFAULT_CONFIDENCE = 0.3
MANIFEST_CONFIDENCE = 0.8

# Host language names that differ from any registry id or alias.
HOST_LANGUAGE_ALIASES: dict[str, str] = {
    "typescript": "javascript",
    "tsx": "javascript",
    "jsx": "javascript",
    "c++": "cpp",
    "c": "cpp",
    "golang": "go",
}

StatsProvider = Callable[[], Awaitable[Mapping[str, int]]]


class LanguageDetector:
    """Pick exactly one primary language for a repository. Never raises."""

    def __init__(self, registry: LanguageRegistry) -> None:
        self._registry = registry

    async def detect_repository(
        self,
        file_paths: Iterable[str] | None,
        *,
        stats_provider: StatsProvider | None = None,
        override: str | None = None,
    ) -> LanguageDetectionResult:
        """Like :meth:`detect`, but fetches host statistics first.

        The provider call is skipped entirely when *override* is given. A
        provider failure is logged and detection carries on without stats.
        """
        if override:
            return self.detect(file_paths, override=override)

        language_stats: Mapping[str, int] | None = None
        if stats_provider is not None:
            try:
                language_stats = await stats_provider()
            except SourceUnavailableError as exc:
                log.warning("detector.stats_unavailable", error=str(exc))
            except Exception:
                log.warning("detector.stats_failed", exc_info=True)
        return self.detect(file_paths, language_stats=language_stats)

    def detect(
        self,
        file_paths: Iterable[str] | None,
        *,
        language_stats: Mapping[str, int] | None = None,
        override: str | None = None,
    ) -> LanguageDetectionResult:
        """Detect the primary language from the signals at hand.

        Args:
            file_paths: Repository-relative paths of files (not directories),
                or None when no listing is available.
            language_stats: Host byte counts keyed by host language name.
            override: Language explicitly requested by the user.
        """
        if override:
            return self._from_override(override)

        paths = list(file_paths) if file_paths is not None else []

        for result in (
            self._from_statistics(language_stats),
            self._from_manifests(paths),
            self._from_extensions(paths),
        ):
            if result is not None:
                log.info(
                    "detector.detected",
                    language=result.language,
                    method=result.method.value,
                    confidence=round(result.confidence, 3),
                )
                return result

        log.info("detector.default", language=DEFAULT_LANGUAGE)
        return LanguageDetectionResult(
            language=DEFAULT_LANGUAGE,
            confidence=DEFAULT_CONFIDENCE,
            method=DetectionMethod.EXTENSION_COUNT,
            defaulted=True,
        )

    # ── layers ────────────────────────────────────────────────────────────

    def _from_override(self, override: str) -> LanguageDetectionResult:
        profile = self._registry.lookup(override)
        # Unknown names are kept so the parser fallback stays visible downstream.
        language = profile.id if profile is not None else override.strip().lower()
        return LanguageDetectionResult.manual(language)

    def _from_statistics(
        self, language_stats: Mapping[str, int] | None
    ) -> LanguageDetectionResult | None:
        if not language_stats:
            return None
        total = sum(language_stats.values())
        if total <= 0:
            return None

        host_name, top_bytes = max(language_stats.items(), key=lambda item: item[1])
        language = self.map_host_language(host_name)
        if language is None:
            log.info("detector.unmapped_host_language", host_language=host_name)
            return None

        return LanguageDetectionResult(
            language=language,
            confidence=top_bytes / total,
            method=DetectionMethod.PROVIDER_STATISTICS,
            evidence={"language_stats": dict(language_stats)},
        )

    def _from_manifests(self, paths: list[str]) -> LanguageDetectionResult | None:
        # Only root-level manifests count; nested ones are usually fixtures,
        # examples or tooling for a secondary language.
        present = {path.lower() for path in paths}
        matched: list[tuple[str, str]] = []
        for profile in self._registry.list():
            for manifest in profile.manifest_files:
                if manifest.lower() in present:
                    matched.append((profile.id, manifest))

        if not matched:
            return None

        return LanguageDetectionResult(
            language=matched[0][0],
            confidence=MANIFEST_CONFIDENCE,
            method=DetectionMethod.MANIFEST_MATCH,
            evidence={"manifest_files": [manifest for _, manifest in matched]},
        )

    def _from_extensions(self, paths: list[str]) -> LanguageDetectionResult | None:
        extension_counts: Counter[str] = Counter()
        for path in paths:
            extension = posixpath.splitext(path)[1]
            if extension:
                extension_counts[extension] += 1

        language_counts: Counter[str] = Counter()
        for extension, count in extension_counts.items():
            profile = self._registry.find_by_extension(extension)
            if profile is not None:
                language_counts[profile.id] += count

        if not language_counts:
            return None

        # Ties go to the profile listed first in the registry.
        priority = {
            language_id: index for index, language_id in enumerate(self._registry.supported_ids())
        }
        language, count = min(
            language_counts.items(), key=lambda item: (-item[1], priority[item[0]])
        )
        total = sum(language_counts.values())

        return LanguageDetectionResult(
            language=language,
            confidence=count / total,
            method=DetectionMethod.EXTENSION_COUNT,
            evidence={"file_counts": dict(language_counts)},
        )

    # ── helpers ───────────────────────────────────────────────────────────

    def map_host_language(self, host_name: str) -> str | None:
        """Map a host language name (e.g. ``"TypeScript"``) to a registry id."""
        normalized = host_name.strip().lower()
        profile = self._registry.lookup(normalized)
        if profile is not None:
            return profile.id
        mapped = HOST_LANGUAGE_ALIASES.get(normalized)
        if mapped is not None and self._registry.lookup(mapped) is not None:
            return mapped
        return None
