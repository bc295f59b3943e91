"""
Navigation Access Pattern — Navigator.of(context) lookups.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult, UsagePattern
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "navigation-access"
PENALTY = 5


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=PATTERN_ID,
            description=f"'{u.widget}.{u.method}' looks up the Navigator",
            safe=False,
            penalty=PENALTY,
            affected=[u.widget],
            location=u.location,
            suggestion="Only navigate from event handlers that run after hydration",
        )
        for u in context.usages
        if u.pattern == UsagePattern.NAVIGATION_ACCESS
    ]
