"""
Analysis Pipeline — Runs every stage for one source file.

Stages:
1. Lex        → tokens + lexer warnings
2. Parse      → AST + parse errors (statement-level recovery)
3. Widgets    → classification, imports, entry point, widget tree
4. Imports    → import resolution against the shared ResolverConfig
5. State      → state classes, update calls, handlers, dependency graph
6. Context    → providers, lookups, dependencies
7. SSR        → render-safety score, hydration, migration path

Each run gets fresh stage instances and its own AnalysisContext. Any exception
escaping a stage aborts the file with an AnalysisStageError naming the stage.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar

from widgetlens.audit.logger import DiagnosticSink
from widgetlens.core.context_analyzer import ContextAnalyzer
from widgetlens.core.import_resolver import ImportResolver, ResolverConfig
from widgetlens.core.lexer import Lexer
from widgetlens.core.parser import Parser
from widgetlens.core.ssr_analyzer import SSRAnalyzer
from widgetlens.core.state_analyzer import StateAnalyzer
from widgetlens.core.widget_analyzer import (
    DEFAULT_MAX_TREE_DEPTH,
    DEFAULT_MAX_TREE_NODES,
    WidgetAnalyzer,
)
from widgetlens.models.analysis_models import AnalysisResult
from widgetlens.models.ast_nodes import count_nodes
from widgetlens.models.import_models import ImportResolution

logger = logging.getLogger("widgetlens.pipeline")

T = TypeVar("T")


class AnalysisStageError(Exception):
    """A stage failed fatally; analysis of this file was aborted."""

    def __init__(self, stage: str, file_path: str, cause: BaseException) -> None:
        self.stage = stage
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"{stage} stage failed for '{file_path}': {type(cause).__name__}: {cause}")


@dataclass
class AnalysisContext:
    """Mutable scratch state owned by exactly one pipeline run."""

    file_path: str
    resolution_cache: dict[str, ImportResolution] = field(default_factory=dict)
    stage_durations: dict[str, float] = field(default_factory=dict)


class AnalysisPipeline:
    """
    Single-file orchestrator.

    The resolver config and diagnostic sink are shared read-only across runs;
    everything else is created per call, so one pipeline may serve many threads.
    """

    def __init__(
        self,
        resolver_config: ResolverConfig | None = None,
        sink: DiagnosticSink | None = None,
        max_tree_depth: int = DEFAULT_MAX_TREE_DEPTH,
        max_tree_nodes: int = DEFAULT_MAX_TREE_NODES,
    ) -> None:
        self.resolver_config = resolver_config or ResolverConfig()
        self.sink = sink
        self.max_tree_depth = max_tree_depth
        self.max_tree_nodes = max_tree_nodes

    def analyze_file(self, path: str | Path) -> AnalysisResult:
        """Read a UTF-8 file and analyze it. Unreadable files fail in the 'read' stage."""
        file_path = Path(path).as_posix()
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._fail("read", file_path, e)
        return self.analyze_source(source, file_path)

    def analyze_source(self, source: str, file_path: str = "<source>") -> AnalysisResult:
        """
        Run all stages over one source text.

        Args:
            source: Program text.
            file_path: Name used in reports and diagnostics.

        Returns:
            Fully realized AnalysisResult.

        Raises:
            AnalysisStageError: when any stage fails fatally.
        """
        start = time.monotonic()
        ctx = AnalysisContext(file_path=file_path)
        logger.info(f"[{file_path}] Analysis starting ({len(source)} chars)")

        # ── Step 1: Lex ──
        tokens, warnings = self._stage("lex", ctx, lambda: Lexer(source).tokenize())
        for w in warnings:
            self._diagnose(file_path, "lex", "warning", f"{w.line}:{w.column} {w.message}")

        # ── Step 2: Parse ──
        program, parse_errors = self._stage("parse", ctx, lambda: Parser(tokens).parse())
        for err in parse_errors:
            self._diagnose(
                file_path, "parse", "warning", f"{err.line}:{err.column} {err.message} ({err.context})"
            )
        node_count = count_nodes(program)
        logger.info(
            f"[{file_path}] Parsed {len(tokens)} tokens into {node_count} nodes, "
            f"{len(parse_errors)} parse errors"
        )

        # ── Step 3: Widgets ──
        widgets = self._stage(
            "widgets",
            ctx,
            lambda: WidgetAnalyzer(program, self.max_tree_depth, self.max_tree_nodes).analyze(),
        )
        logger.info(
            f"[{file_path}] Widgets: {widgets.summary.widgets} "
            f"(root={widgets.root_widget or '-'})"
        )

        # ── Step 4: Imports ──
        resolver = ImportResolver(self.resolver_config, cache=ctx.resolution_cache)
        imports = self._stage("imports", ctx, lambda: resolver.resolve_imports(widgets.imports))

        # ── Step 5: State ──
        state = self._stage("state", ctx, lambda: StateAnalyzer(program, widgets).analyze())
        logger.info(
            f"[{file_path}] State: {state.summary.state_classes} classes, "
            f"health={state.summary.health_score}"
        )

        # ── Step 6: Context ──
        context = self._stage("context", ctx, lambda: ContextAnalyzer(program, widgets).analyze())

        # ── Step 7: SSR ──
        ssr = self._stage("ssr", ctx, lambda: SSRAnalyzer(state, context).analyze())

        elapsed = round((time.monotonic() - start) * 1000, 2)
        logger.info(
            f"[{file_path}] Analysis complete: ssr={ssr.summary.score} "
            f"({ssr.summary.compatibility.value}) in {elapsed:.1f}ms"
        )

        return AnalysisResult(
            file_path=file_path,
            token_count=len(tokens),
            ast_node_count=node_count,
            lexer_warnings=warnings,
            parse_errors=parse_errors,
            widgets=widgets,
            imports=imports,
            state=state,
            context=context,
            ssr=ssr,
            stage_durations=dict(ctx.stage_durations),
            duration_ms=elapsed,
        )

    def _stage(self, stage: str, ctx: AnalysisContext, run: Callable[[], T]) -> T:
        started = time.monotonic()
        try:
            result = run()
        except Exception as e:
            logger.exception(f"[{ctx.file_path}] Stage '{stage}' failed")
            self._fail(stage, ctx.file_path, e)
        ctx.stage_durations[stage] = round((time.monotonic() - started) * 1000, 2)
        return result

    def _fail(self, stage: str, file_path: str, cause: BaseException) -> None:
        self._diagnose(file_path, stage, "error", f"{type(cause).__name__}: {cause}")
        raise AnalysisStageError(stage, file_path, cause) from cause

    def _diagnose(self, file_path: str, stage: str, level: str, message: str) -> None:
        if self.sink is not None:
            self.sink.record(file_path, stage, level, message)
