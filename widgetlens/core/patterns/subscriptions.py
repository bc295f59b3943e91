"""
Subscription Patterns — Render-time subscriptions to context values.

watch/select lookups and Consumer widgets re-render on change, which only
happens once the page is hydrated. One module, three pattern ids.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult, UsagePattern
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult

WATCH_PATTERN_ID = "provider-watch"
SELECT_PATTERN_ID = "provider-select"
CONSUMER_PATTERN_ID = "consumer-subscription"

PENALTIES: dict[str, int] = {
    WATCH_PATTERN_ID: 8,
    SELECT_PATTERN_ID: 8,
    CONSUMER_PATTERN_ID: 6,
}

_BY_USAGE: dict[UsagePattern, str] = {
    UsagePattern.PROVIDER_WATCH: WATCH_PATTERN_ID,
    UsagePattern.PROVIDER_SELECT: SELECT_PATTERN_ID,
    UsagePattern.CONSUMER_WIDGET: CONSUMER_PATTERN_ID,
}


def _check(pattern_id: str, context: ContextAnalysisResult) -> list[SSRPattern]:
    patterns: list[SSRPattern] = []
    for usage in context.usages:
        if _BY_USAGE.get(usage.pattern) != pattern_id:
            continue
        target = usage.lookup_type or "an untyped value"
        patterns.append(
            SSRPattern(
                pattern_id=pattern_id,
                description=f"'{usage.widget}.{usage.method}' subscribes to {target}",
                safe=False,
                penalty=PENALTIES[pattern_id],
                affected=[usage.widget],
                location=usage.location,
                suggestion="Use a one-time read for the first render and subscribe after hydration",
            )
        )
    return patterns


def check_watch(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return _check(WATCH_PATTERN_ID, context)


def check_select(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return _check(SELECT_PATTERN_ID, context)


def check_consumer(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return _check(CONSUMER_PATTERN_ID, context)
