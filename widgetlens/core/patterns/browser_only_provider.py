"""
Browser-only Provider Pattern — Context values that need browser globals.

A provider whose value touches window/document/localStorage cannot be created
on the server.
"""

from __future__ import annotations

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.ssr_models import SSRPattern
from widgetlens.models.state_models import StateAnalysisResult
from widgetlens.models.issue_models import SourceLocation

PATTERN_ID = "browser-only-provider"
PENALTY = 15


def check(state: StateAnalysisResult, context: ContextAnalysisResult) -> list[SSRPattern]:
    return [
        SSRPattern(
            pattern_id=PATTERN_ID,
            description=(
                f"Provider '{p.name}' depends on browser APIs: {', '.join(p.browser_apis)}"
            ),
            safe=False,
            penalty=PENALTY,
            critical=True,
            affected=[p.name, *p.provided_by],
            location=SourceLocation(line=p.line),
            suggestion="Create the value lazily on the client or guard it with a platform check",
        )
        for p in context.providers
        if p.requires_browser
    ]
