"""
initState Side-effect Pattern — Setup hooks that do work beyond super.initState().

Timers, listeners and fetches started in initState() run on the server too.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.issue_models import SourceLocation
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "init-state-side-effects"
PENALTY = 4


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    patterns: list[SSRPattern] = []
    for cls in state.state_classes:
        for hook in cls.lifecycle_methods:
            if hook.name != "initState" or not hook.has_side_effects:
                continue
            patterns.append(
                SSRPattern(
                    pattern_id=PATTERN_ID,
                    description=f"'{cls.name}.initState' performs side effects",
                    safe=False,
                    penalty=PENALTY,
                    affected=[cls.managed_widget or cls.name],
                    location=SourceLocation(line=hook.line, method=hook.name),
                    suggestion="Start timers and listeners from a client-only hook",
                )
            )
    return patterns
