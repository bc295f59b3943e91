"""
Notifier Mutation Pattern — notifyListeners() calls.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult, UsagePattern
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

PATTERN_ID = "notifier-mutation"
PENALTY = 6


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=PATTERN_ID,
            description=f"'{u.widget}.{u.method}' notifies listeners of a change",
            safe=False,
            penalty=PENALTY,
            affected=[u.widget],
            location=u.location,
            suggestion="Serialize the notifier's initial value so the client starts in sync",
        )
        for u in context.usages
        if u.pattern == UsagePattern.NOTIFY_LISTENERS
    ]
