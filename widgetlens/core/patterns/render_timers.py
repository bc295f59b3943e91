"""
Render Timer Pattern — setTimeout()/setInterval() started from build().

build() runs on the server too, where the timer outlives the render and its
callback fires against a tree that is never hydrated. Timers in initState()
are covered by the init-state side-effect pattern.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "render-timer"
PENALTY = 6


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=PATTERN_ID,
            description=f"'{c.widget}.build' starts a timer with {c.call}()",
            safe=False,
            penalty=PENALTY,
            affected=[c.widget],
            location=c.location,
            suggestion="Start timers from a client-only hook and cancel them in dispose()",
        )
        for c in state.render_path_calls
        if c.category == "timer" and c.method == "build"
    ]
