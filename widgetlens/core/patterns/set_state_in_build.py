"""
setState-in-build Pattern — State updates triggered while rendering.

A server render runs build() exactly once; an update scheduled from inside it
either loops on the client or is silently lost on the server.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "set-state-in-build"
PENALTY = 20


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    patterns: list[SSRPattern] = []
    for cls in state.state_classes:
        for call in cls.state_update_calls:
            if not call.called_during_build:
                continue
            patterns.append(
                SSRPattern(
                    pattern_id=PATTERN_ID,
                    description=f"'{cls.name}.build' calls setState()",
                    safe=False,
                    penalty=PENALTY,
                    critical=True,
                    affected=[cls.name],
                    location=call.location,
                    suggestion="Compute derived values in build() without setState()",
                )
            )
    return patterns
