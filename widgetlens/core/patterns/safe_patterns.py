"""
Render-safe Patterns — Shapes that render identically on server and client.

These carry no penalty; they are counted so reports can show what already works.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.issue_models import SourceLocation
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PROP_DRIVEN_ID = "prop-driven-state"
STATIC_INITIAL_ID = "static-initial-state"
CONTEXT_READ_ID = "render-time-context-read"

LITERAL_TYPES = frozenset({"number", "string", "boolean", "null", "array", "object"})
SETUP_METHODS = frozenset({"constructor", "initState"})


def check_prop_driven(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    patterns: list[SSRPattern] = []
    for cls in state.state_classes:
        mutated_later = any(
            m not in SETUP_METHODS
            for f in cls.state_fields
            for m in f.mutated_in_methods
        )
        if mutated_later:
            continue
        patterns.append(
            SSRPattern(
                pattern_id=PROP_DRIVEN_ID,
                description=f"'{cls.name}' renders purely from props and initial state",
                safe=True,
                affected=[cls.managed_widget or cls.name],
                location=SourceLocation(line=cls.line),
            )
        )
    return patterns


def check_static_initial(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=STATIC_INITIAL_ID,
            description=f"'{cls.name}.{f.name}' starts from a literal value used by build()",
            safe=True,
            affected=[cls.managed_widget or cls.name],
            location=SourceLocation(line=f.line),
        )
        for cls in state.state_classes
        for f in cls.state_fields
        if f.type in LITERAL_TYPES and f.used_in_build
    ]


def check_context_reads(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=CONTEXT_READ_ID,
            description=f"'{u.widget}.{u.method}' reads {u.lookup_type or 'context'} once",
            safe=True,
            affected=[u.widget],
            location=u.location,
        )
        for u in context.usages
        if u.ssr_safe
    ]
