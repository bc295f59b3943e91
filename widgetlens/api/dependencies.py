"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

from functools import lru_cache

from widgetlens.audit.logger import DiagnosticSink
from widgetlens.config import settings
from widgetlens.core.import_resolver import ResolverConfig
from widgetlens.engine.pipeline import AnalysisPipeline
from widgetlens.workers.analysis_worker import AnalysisWorker


@lru_cache
def get_resolver_config() -> ResolverConfig:
    """Resolver config snapshot taken from settings at first use."""
    return ResolverConfig.from_settings(settings)


@lru_cache
def get_diagnostic_sink() -> DiagnosticSink | None:
    """Shared diagnostic sink, or None when no diagnostics path is configured."""
    if not settings.diagnostics_path:
        return None
    return DiagnosticSink(settings.diagnostics_path)


@lru_cache
def get_pipeline() -> AnalysisPipeline:
    """Shared analysis pipeline singleton."""
    return AnalysisPipeline(
        resolver_config=get_resolver_config(),
        sink=get_diagnostic_sink(),
        max_tree_depth=settings.max_tree_depth,
        max_tree_nodes=settings.max_tree_nodes,
    )


def get_worker() -> AnalysisWorker:
    """A fresh batch worker per request so cancellation never leaks between batches."""
    return AnalysisWorker(
        pipeline=get_pipeline(),
        max_concurrent=settings.max_concurrent_files,
    )
