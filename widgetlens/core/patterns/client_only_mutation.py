"""
Client-only State Mutation Pattern — Fields changed only from event handlers.

Such a field renders with its initial value on the server and diverges as soon
as the user interacts, so its widget must be hydrated.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.issue_models import SourceLocation
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "client-only-state-mutation"
PENALTY = 5

SERVER_SIDE_METHODS = frozenset({"constructor", "initState", "didUpdateWidget"})


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    patterns: list[SSRPattern] = []
    for cls in state.state_classes:
        handler_fields = {
            name
            for fields in cls.dependency_graph.event_to_state.values()
            for name in fields
        }
        for f in cls.state_fields:
            if f.name not in handler_fields:
                continue
            if any(m in SERVER_SIDE_METHODS for m in f.mutated_in_methods):
                continue
            patterns.append(
                SSRPattern(
                    pattern_id=PATTERN_ID,
                    description=f"'{cls.name}.{f.name}' changes only in response to user events",
                    safe=False,
                    penalty=PENALTY,
                    affected=[cls.managed_widget or cls.name],
                    location=SourceLocation(line=f.line),
                    suggestion="Hydrate this widget so its handlers are re-attached on the client",
                )
            )
    return patterns
