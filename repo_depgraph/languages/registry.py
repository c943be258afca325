"""Language registry: catalog of supported languages in priority order."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from repo_depgraph.exceptions import RegistryError
from repo_depgraph.languages.models import LanguageProfile

log = structlog.get_logger("repo_depgraph.languages")


def _rules(**categories: list[str]) -> tuple[tuple[str, tuple[str, ...]], ...]:
    # Keyword order is preserved, so declaration order is match order.
    return tuple((name, tuple(patterns)) for name, patterns in categories.items())


# Ordered by priority (most common first). The order is the tie-break for
# manifest and extension detection.
BUILTIN_PROFILES: tuple[LanguageProfile, ...] = (
    LanguageProfile(
        id="javascript",
        display_name="JavaScript/TypeScript",
        aliases=frozenset({"typescript", "tsx", "jsx", "js", "ts"}),
        extensions=(".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"),
        exclude_patterns=(
            "node_modules", ".d.ts", ".test.", ".spec.", "dist/", "build/", ".next/",
        ),
        manifest_files=(
            "package.json", "tsconfig.json", "yarn.lock", "package-lock.json", "pnpm-lock.yaml",
        ),
        classification=_rules(
            component=["/components/", ".tsx", ".jsx"],
            api=["/api/", "route.ts", "route.js"],
            util=["/utils/", "/lib/", "/helpers/"],
            page=["/app/", "/pages/", "page."],
            config=["config", ".config."],
            style=[".css", ".scss", ".sass"],
            hook=["/hooks/", "use"],
            service=["/services/"],
            middleware=["/middleware/", "middleware."],
        ),
    ),
    LanguageProfile(
        id="python",
        display_name="Python",
        aliases=frozenset({"py"}),
        extensions=(".py", ".pyi", ".pyw"),
        exclude_patterns=(
            "__pycache__", ".pyc", ".pyo", ".pyd", "venv/", ".venv/", "env/",
            ".pytest_cache/", "dist/", "build/",
        ),
        manifest_files=(
            "requirements.txt", "setup.py", "pyproject.toml", "Pipfile", "poetry.lock",
            "setup.cfg",
        ),
        classification=_rules(
            model=["/models/", "_model.py", "/entities/"],
            view=["/views/", "_view.py"],
            controller=["/controllers/", "_controller.py"],
            service=["/services/", "_service.py"],
            util=["/utils/", "/helpers/", "_utils.py"],
            test=["/tests/", "_test.py", "test_"],
            config=["config.py", "settings.py"],
            api=["/api/", "/endpoints/"],
            middleware=["/middleware/"],
        ),
    ),
    LanguageProfile(
        id="go",
        display_name="Go",
        aliases=frozenset({"golang"}),
        extensions=(".go",),
        exclude_patterns=("/vendor/", "_test.go", "/testdata/"),
        manifest_files=("go.mod", "go.sum"),
        classification=_rules(
            handler=["/handlers/", "/controllers/", "_handler.go"],
            model=["/models/", "/entities/", "_model.go"],
            service=["/services/", "_service.go"],
            util=["/utils/", "/pkg/"],
            test=["_test.go"],
            middleware=["/middleware/"],
            api=["/api/"],
            config=["config.go"],
        ),
    ),
    LanguageProfile(
        id="rust",
        display_name="Rust",
        aliases=frozenset({"rs"}),
        extensions=(".rs",),
        exclude_patterns=("/target/", "/deps/"),
        manifest_files=("Cargo.toml", "Cargo.lock"),
        classification=_rules(
            model=["/models/", "/entities/"],
            service=["/services/"],
            util=["/utils/", "/helpers/"],
            handler=["/handlers/", "/routes/"],
            api=["/api/"],
            config=["config.rs"],
            test=["/tests/", "_test.rs"],
        ),
    ),
    LanguageProfile(
        id="java",
        display_name="Java",
        extensions=(".java",),
        exclude_patterns=("/target/", "/build/", ".class"),
        manifest_files=("pom.xml", "build.gradle", "build.gradle.kts", "settings.gradle"),
        classification=_rules(
            controller=["/controller/", "Controller.java"],
            service=["/service/", "Service.java"],
            model=["/model/", "/entity/", "Entity.java"],
            repository=["/repository/", "Repository.java"],
            util=["/util/", "Utils.java"],
            config=["/config/", "Config.java"],
            api=["/api/"],
            test=["/test/", "Test.java"],
        ),
    ),
    LanguageProfile(
        id="cpp",
        display_name="C/C++",
        aliases=frozenset({"c", "c++", "cxx"}),
        extensions=(".cpp", ".cc", ".cxx", ".c", ".h", ".hpp", ".hxx"),
        exclude_patterns=("/build/", "/cmake-build-", ".o", ".a", ".so"),
        manifest_files=("CMakeLists.txt", "Makefile", "configure.ac"),
        classification=_rules(
            header=[".h", ".hpp", ".hxx"],
            source=[".cpp", ".cc", ".cxx", ".c"],
            util=["/utils/", "/helpers/"],
            test=["/tests/", "_test."],
            config=["config."],
        ),
    ),
    LanguageProfile(
        id="ruby",
        display_name="Ruby",
        aliases=frozenset({"rb"}),
        extensions=(".rb", ".rake"),
        exclude_patterns=("/vendor/", ".bundle/"),
        manifest_files=("Gemfile", "Gemfile.lock", "Rakefile"),
        classification=_rules(
            controller=["/controllers/", "_controller.rb"],
            model=["/models/", "_model.rb"],
            view=["/views/"],
            service=["/services/", "_service.rb"],
            util=["/lib/", "/helpers/"],
            test=["/test/", "/spec/", "_spec.rb"],
            config=["/config/"],
        ),
    ),
    LanguageProfile(
        id="php",
        display_name="PHP",
        extensions=(".php",),
        exclude_patterns=("/vendor/", "/cache/"),
        manifest_files=("composer.json", "composer.lock"),
        classification=_rules(
            controller=["/Controllers/", "Controller.php"],
            model=["/Models/", "Model.php"],
            service=["/Services/", "Service.php"],
            view=["/views/", "/templates/"],
            util=["/Utils/", "/Helpers/"],
            middleware=["/Middleware/"],
            test=["/tests/", "Test.php"],
            config=["/config/"],
        ),
    ),
)


class LanguageRegistry:
    """Case-insensitive lookup of language profiles by id or alias.

    Profiles keep their registration order, which doubles as detection
    priority. Registration is additive only: a new profile may not reuse an
    existing id or alias, so built-in entries can never be shadowed.
    """

    def __init__(self, profiles: Iterable[LanguageProfile] = ()) -> None:
        self._profiles: list[LanguageProfile] = []
        self._by_name: dict[str, LanguageProfile] = {}
        for profile in profiles:
            self.register(profile)

    def register(self, profile: LanguageProfile) -> None:
        names = profile.names()
        taken = sorted(name for name in names if name in self._by_name)
        if taken:
            raise RegistryError(
                f"cannot register language {profile.id!r}: name(s) already in use: {taken}"
            )
        self._profiles.append(profile)
        for name in names:
            self._by_name[name] = profile
        log.debug("registry.language_registered", language=profile.id)

    def lookup(self, name: str) -> LanguageProfile | None:
        """Find a profile by id or alias, ignoring case."""
        return self._by_name.get(name.strip().lower())

    def list(self) -> list[LanguageProfile]:
        """All profiles in priority order."""
        return list(self._profiles)

    def supported_ids(self) -> list[str]:
        return [profile.id for profile in self._profiles]

    def find_by_extension(self, extension: str) -> LanguageProfile | None:
        """First profile (in priority order) that claims *extension*."""
        for profile in self._profiles:
            if extension in profile.extensions:
                return profile
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._profiles)


def create_default_registry() -> LanguageRegistry:
    """Create a registry holding the built-in language profiles."""
    return LanguageRegistry(BUILTIN_PROFILES)
