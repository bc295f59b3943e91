"""
Nondeterministic Render Pattern — Random values and timestamps computed while rendering.

The server and the client each produce their own value, so the hydrated markup
no longer matches what the server sent.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "nondeterministic-render"
PENALTY = 10


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=PATTERN_ID,
            description=f"'{c.widget}' calls {c.call}() while rendering ({c.method})",
            safe=False,
            penalty=PENALTY,
            affected=[c.widget],
            location=c.location,
            suggestion="Compute the value once on the server and pass it down as a prop",
        )
        for c in state.render_path_calls
        if c.category == "nondeterministic"
    ]
