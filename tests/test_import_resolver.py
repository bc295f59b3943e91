"""
Tests for the Import Resolver — resolution order, determinism and strict mode.
"""

import pytest

from widgetlens.config import DEFAULT_PACKAGE_ALIASES
from widgetlens.core.import_resolver import (
    ImportResolver,
    ResolverConfig,
    ResolverConfigError,
    UnresolvedImportError,
)
from widgetlens.models.import_models import ImportInfo, ImportOrigin, ResolutionStatus


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src" / "widgets").mkdir(parents=True)
    (tmp_path / "src" / "widgets" / "button.js").write_text("export class Button {}")
    (tmp_path / "lib" / "theme").mkdir(parents=True)
    (tmp_path / "lib" / "theme" / "index.fjs").write_text("export const theme = {};")
    (tmp_path / "cache" / "lodash").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def config(project):
    return ResolverConfig.create(
        package_aliases=dict(DEFAULT_PACKAGE_ALIASES),
        package_mappings={"@company/ui": "vendor/company-ui/index.js"},
        local_search_paths=["src", "lib"],
        package_cache_dirs=[str(project / "cache")],
        project_root=str(project),
    )


def test_framework_alias(config):
    r = ImportResolver(config).resolve("@flutterjs/material")
    assert r.status == ResolutionStatus.RESOLVED
    assert r.origin == ImportOrigin.FRAMEWORK
    assert r.location == DEFAULT_PACKAGE_ALIASES["@flutterjs/material"]


def test_mapping_prefix(config):
    r = ImportResolver(config).resolve("@company/ui/buttons")
    assert r.origin == ImportOrigin.ALIAS
    assert r.location == "vendor/company-ui/index.js/buttons"


def test_local_search_paths(config, project):
    resolver = ImportResolver(config)
    button = resolver.resolve("widgets/button")
    assert button.origin == ImportOrigin.LOCAL
    assert button.location == (project / "src" / "widgets" / "button.js").as_posix()

    theme = resolver.resolve("theme")
    assert theme.origin == ImportOrigin.LOCAL
    assert theme.location.endswith("lib/theme/index.fjs")


def test_relative_import(config, project):
    r = ImportResolver(config).resolve("./src/widgets/button.js")
    assert r.status == ResolutionStatus.RESOLVED
    assert r.origin == ImportOrigin.LOCAL


def test_package_cache(config, project):
    r = ImportResolver(config).resolve("lodash")
    assert r.origin == ImportOrigin.CACHE
    assert r.location == (project / "cache" / "lodash").as_posix()


def test_unresolved_records_searched_candidates(config):
    r = ImportResolver(config).resolve("./missing")
    assert r.status == ResolutionStatus.UNRESOLVED
    assert r.origin is None
    assert r.searched
    assert "missing" in r.reason


def test_malformed_specifier_is_an_error(config):
    r = ImportResolver(config).resolve("  ")
    assert r.status == ResolutionStatus.ERROR


def test_resolution_is_deterministic(config):
    first = ImportResolver(config).resolve("widgets/button")
    second = ImportResolver(config).resolve("widgets/button")
    assert first == second

    resolver = ImportResolver(config)
    assert resolver.resolve("theme") == resolver.resolve("theme")


def test_cache_is_shared_per_run(config):
    cache = {}
    ImportResolver(config, cache=cache).resolve("widgets/button", items=["Button"], line=3)
    assert "widgets/button" in cache
    again = ImportResolver(config, cache=cache).resolve("widgets/button", items=["Other"], line=9)
    assert again.items == ["Other"]
    assert again.line == 9


def test_resolve_imports_permissive(config):
    result = ImportResolver(config).resolve_imports([
        ImportInfo(source="@flutterjs/material", items=["Text"], line=1),
        ImportInfo(source="widgets/button", line=2),
        ImportInfo(source="nowhere", line=3),
    ])
    assert [r.source for r in result.resolved] == ["@flutterjs/material", "widgets/button"]
    assert [r.source for r in result.unresolved] == ["nowhere"]
    assert result.summary.total == 3
    assert result.summary.resolution_rate == 66.7
    assert result.summary.by_origin == {"framework": 1, "local": 1}
    assert [i.type for i in result.issues] == ["import-unresolved"]
    assert result.issues[0].location.line == 3


def test_no_imports_is_fully_resolved(config):
    result = ImportResolver(config).resolve_imports([])
    assert result.summary.total == 0
    assert result.summary.resolution_rate == 100.0


def test_strict_mode_raises(project):
    config = ResolverConfig.create(project_root=str(project), strict=True)
    resolver = ImportResolver(config)
    with pytest.raises(UnresolvedImportError) as exc:
        resolver.resolve_imports([ImportInfo(source="nowhere", line=1)])
    assert exc.value.resolution.source == "nowhere"


@pytest.mark.parametrize("values", [
    {"module_extensions": []},
    {"module_extensions": ["js"]},
    {"local_search_paths": [""]},
    {"package_aliases": {"": "x.js"}},
    {"project_root": " "},
])
def test_invalid_config(values):
    with pytest.raises(ResolverConfigError):
        ResolverConfig.create(**values)


def test_config_is_frozen(config):
    with pytest.raises(Exception):
        config.strict = True
