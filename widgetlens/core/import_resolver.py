"""
Import Resolver — Maps import specifiers to concrete locations.

Resolution order for one specifier:
1. Exact match in the package-alias table             -> origin 'framework'
2. Exact or longest-prefix match in custom mappings   -> origin 'alias'
3. Relative path, or first hit among local search paths -> origin 'local'
4. First hit among package cache directories          -> origin 'cache'
5. Otherwise unresolved

The configuration is frozen after construction. Memoization lives in a cache
dict owned by the caller's analysis run, never in module state.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from widgetlens.models.import_models import (
    ImportInfo,
    ImportOrigin,
    ImportResolution,
    ImportResolutionResult,
    ImportSummary,
    ResolutionStatus,
)
from widgetlens.models.issue_models import Severity, SourceLocation, ValidationResult

logger = logging.getLogger("widgetlens.imports")

RELATIVE_PREFIXES = ("./", "../")
INDEX_FILE = "index"


class ResolverConfigError(ValueError):
    """Raised when a resolver configuration is invalid."""


class UnresolvedImportError(Exception):
    """Raised in strict mode when an import cannot be resolved."""

    def __init__(self, resolution: ImportResolution) -> None:
        super().__init__(
            f"Unresolved import '{resolution.source}': {resolution.reason}"
        )
        self.resolution = resolution


class ResolverConfig(BaseModel):
    """Immutable resolver configuration shared by all analysis runs."""

    package_aliases: dict[str, str] = Field(default_factory=dict)
    package_mappings: dict[str, str] = Field(default_factory=dict)
    local_search_paths: list[str] = Field(default_factory=list)
    package_cache_dirs: list[str] = Field(default_factory=list)
    module_extensions: list[str] = Field(default=[".js", ".fjs"])
    project_root: str = "."
    strict: bool = False

    model_config = {"frozen": True}

    @field_validator("package_aliases", "package_mappings")
    @classmethod
    def _non_empty_keys(cls, value: dict[str, str]) -> dict[str, str]:
        for key, target in value.items():
            if not key.strip() or not target.strip():
                raise ValueError(f"empty specifier or target in mapping: {key!r} -> {target!r}")
        return value

    @field_validator("local_search_paths", "package_cache_dirs")
    @classmethod
    def _non_empty_paths(cls, value: list[str]) -> list[str]:
        if any(not p.strip() for p in value):
            raise ValueError("search paths must be non-empty strings")
        return value

    @field_validator("module_extensions")
    @classmethod
    def _dotted_extensions(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one module extension is required")
        for ext in value:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"module extension must look like '.js', got {ext!r}")
        return value

    @field_validator("project_root")
    @classmethod
    def _non_empty_root(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("project_root must not be empty")
        return value

    @classmethod
    def create(cls, **values) -> ResolverConfig:
        """Build a config, raising ResolverConfigError instead of ValidationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ResolverConfigError(str(e)) from e

    @classmethod
    def from_settings(cls, settings) -> ResolverConfig:
        return cls.create(
            package_aliases=dict(settings.package_aliases),
            package_mappings=dict(settings.package_mappings),
            local_search_paths=list(settings.local_search_paths),
            package_cache_dirs=list(settings.package_cache_dirs),
            module_extensions=list(settings.module_extensions),
            project_root=settings.project_root,
            strict=settings.strict_imports,
        )


class ImportResolver:
    """
    Resolves import specifiers against a ResolverConfig.

    `cache` is the per-run memo (specifier -> resolution); pass the one held by
    the current analysis context so repeated specifiers resolve identically.
    """

    def __init__(
        self,
        config: ResolverConfig,
        cache: dict[str, ImportResolution] | None = None,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else {}
        self._root = Path(config.project_root)
        self._aliases = dict(config.package_aliases)
        # Longest prefix first
        self._mappings = sorted(
            config.package_mappings.items(), key=lambda kv: len(kv[0]), reverse=True
        )

    def resolve_imports(self, imports: list[ImportInfo]) -> ImportResolutionResult:
        """
        Resolve every import.

        Returns:
            ImportResolutionResult partitioned by status.

        Raises:
            UnresolvedImportError: in strict mode, on the first import that is
                unresolved or malformed.
        """
        resolved: list[ImportResolution] = []
        unresolved: list[ImportResolution] = []
        errors: list[ImportResolution] = []
        issues: list[ValidationResult] = []

        for info in imports:
            resolution = self.resolve(info.source, info.items, line=info.line)
            if resolution.status == ResolutionStatus.RESOLVED:
                resolved.append(resolution)
                continue

            if self.config.strict:
                logger.warning(f"Strict mode: unresolved import '{info.source}'")
                raise UnresolvedImportError(resolution)

            if resolution.status == ResolutionStatus.ERROR:
                errors.append(resolution)
                severity = Severity.ERROR
            else:
                unresolved.append(resolution)
                severity = Severity.WARNING
            issues.append(
                ValidationResult(
                    type=f"import-{resolution.status.value}",
                    message=resolution.reason or f"Could not resolve '{info.source}'",
                    severity=severity,
                    location=SourceLocation(line=info.line),
                    suggestion="Add a package mapping or a local search path for this specifier",
                    affected_item=info.source,
                )
            )

        total = len(imports)
        by_origin: dict[str, int] = {}
        for r in resolved:
            by_origin[r.origin.value] = by_origin.get(r.origin.value, 0) + 1

        summary = ImportSummary(
            total=total,
            resolved=len(resolved),
            unresolved=len(unresolved),
            errors=len(errors),
            resolution_rate=round(len(resolved) / total * 100, 1) if total else 100.0,
            by_origin=by_origin,
        )
        logger.debug(
            f"Imports: {summary.resolved}/{total} resolved, "
            f"{summary.unresolved} unresolved, {summary.errors} errors"
        )
        return ImportResolutionResult(
            resolved=resolved,
            unresolved=unresolved,
            errors=errors,
            issues=issues,
            summary=summary,
        )

    def resolve(self, source: str, items: list[str] | None = None, line: int = 0) -> ImportResolution:
        """Resolve one specifier. Results are memoized per specifier."""
        cached = self.cache.get(source)
        if cached is None:
            cached = self._resolve_uncached(source)
            self.cache[source] = cached
        return cached.model_copy(update={"items": list(items or []), "line": line})

    def _resolve_uncached(self, source: str) -> ImportResolution:
        if not source or not source.strip():
            return ImportResolution(
                source=source,
                status=ResolutionStatus.ERROR,
                reason="Empty import specifier",
            )
        if source != source.strip() or "\0" in source or "\\" in source:
            return ImportResolution(
                source=source,
                status=ResolutionStatus.ERROR,
                reason=f"Malformed import specifier {source!r}",
            )

        if source in self._aliases:
            return self._hit(source, ImportOrigin.FRAMEWORK, self._aliases[source], [])

        mapped = self._match_mapping(source)
        if mapped is not None:
            return self._hit(source, ImportOrigin.ALIAS, mapped, [])

        searched: list[str] = []
        if source.startswith(RELATIVE_PREFIXES):
            found = self._first_existing(self._candidates(self._root, source), searched)
            if found:
                return self._hit(source, ImportOrigin.LOCAL, found, searched)
            return self._miss(source, searched)

        # Scoped packages never live in local source folders
        if not source.startswith("@"):
            for base in self.config.local_search_paths:
                found = self._first_existing(
                    self._candidates(self._root / base, source), searched
                )
                if found:
                    return self._hit(source, ImportOrigin.LOCAL, found, searched)

        for cache_dir in self.config.package_cache_dirs:
            base = Path(cache_dir)
            candidates = self._candidates(base, source) + [base / source]
            found = self._first_existing(candidates, searched, allow_dirs=True)
            if found:
                return self._hit(source, ImportOrigin.CACHE, found, searched)

        return self._miss(source, searched)

    def _match_mapping(self, source: str) -> str | None:
        for key, target in self._mappings:
            if source == key:
                return target
            prefix = key.rstrip("/") + "/"
            if source.startswith(prefix):
                return target.rstrip("/") + "/" + source[len(prefix):]
        return None

    def _candidates(self, base: Path, source: str) -> list[Path]:
        target = base / source
        exts = self.config.module_extensions
        candidates = [target / f"{INDEX_FILE}{ext}" for ext in exts]
        if target.name not in ("", ".", ".."):
            candidates += [target.with_name(target.name + ext) for ext in exts]
        if target.suffix in exts:
            candidates.insert(0, target)
        return candidates

    @staticmethod
    def _first_existing(
        candidates: list[Path],
        searched: list[str],
        allow_dirs: bool = False,
    ) -> str | None:
        for candidate in candidates:
            searched.append(candidate.as_posix())
            if candidate.is_file() or (allow_dirs and candidate.is_dir()):
                return candidate.as_posix()
        return None

    @staticmethod
    def _hit(source: str, origin: ImportOrigin, location: str, searched: list[str]) -> ImportResolution:
        return ImportResolution(
            source=source,
            status=ResolutionStatus.RESOLVED,
            origin=origin,
            location=location,
            searched=list(searched),
        )

    @staticmethod
    def _miss(source: str, searched: list[str]) -> ImportResolution:
        chain = ["package aliases", "package mappings"]
        if searched:
            chain.append(f"{len(searched)} path candidates")
        return ImportResolution(
            source=source,
            status=ResolutionStatus.UNRESOLVED,
            reason=f"Could not resolve '{source}' (tried {', '.join(chain)})",
            searched=list(searched),
        )
