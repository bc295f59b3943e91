"""
SSR Analyzer — Scores how safely a file can be rendered on the server.

Runs every registered pattern check against the state and context results,
turns unsafe occurrences into a 0-100 score and compatibility label, lists the
widgets that must be hydrated on the client, and orders the migration work.
Rarely used inherited widgets and large notifiers are reported as lazy-load
opportunities.
"""

from __future__ import annotations

import logging
from typing import Callable

from widgetlens.core.patterns import (
    browser_only_provider,
    client_only_mutation,
    init_state_side_effects,
    navigation_access,
    nondeterministic_render,
    notifier_mutation,
    render_timers,
    safe_patterns,
    set_state_in_build,
    subscriptions,
)
from widgetlens.core.scorer import calculate_ssr_score
from widgetlens.models.context_models import ContextAnalysisResult, ProviderKind
from widgetlens.models.issue_models import Severity, ValidationResult
from widgetlens.models.ssr_models import (
    Compatibility,
    Effort,
    EstimatedEffort,
    HydrationRequirement,
    LazyLoadOpportunity,
    MigrationStep,
    SSRAnalysisResult,
    SSRPattern,
    SSRSummary,
)
from widgetlens.models.state_models import StateAnalysisResult

logger = logging.getLogger("widgetlens.ssr")

PatternCheckFn = Callable[[StateAnalysisResult, ContextAnalysisResult], list[SSRPattern]]

PATTERN_REGISTRY: dict[str, PatternCheckFn] = {
    set_state_in_build.PATTERN_ID: set_state_in_build.check,
    browser_only_provider.PATTERN_ID: browser_only_provider.check,
    subscriptions.WATCH_PATTERN_ID: subscriptions.check_watch,
    subscriptions.SELECT_PATTERN_ID: subscriptions.check_select,
    subscriptions.CONSUMER_PATTERN_ID: subscriptions.check_consumer,
    notifier_mutation.PATTERN_ID: notifier_mutation.check,
    client_only_mutation.PATTERN_ID: client_only_mutation.check,
    navigation_access.PATTERN_ID: navigation_access.check,
    nondeterministic_render.PATTERN_ID: nondeterministic_render.check,
    render_timers.PATTERN_ID: render_timers.check,
    init_state_side_effects.PATTERN_ID: init_state_side_effects.check,
    safe_patterns.PROP_DRIVEN_ID: safe_patterns.check_prop_driven,
    safe_patterns.STATIC_INITIAL_ID: safe_patterns.check_static_initial,
    safe_patterns.CONTEXT_READ_ID: safe_patterns.check_context_reads,
}

COMPATIBILITY_THRESHOLDS: list[tuple[int, Compatibility]] = [
    (85, Compatibility.FULL),
    (60, Compatibility.PARTIAL),
    (30, Compatibility.LIMITED),
]

EFFORT_POINTS = {Effort.LOW: 1, Effort.MEDIUM: 2, Effort.HIGH: 3}

# Inherited widgets looked up at most this often can be split out
LAZY_INHERITED_MAX_USES = 1
# Change notifiers with more methods than this are worth creating lazily
LAZY_NOTIFIER_MAX_METHODS = 10

# (priority, action, description, pattern ids addressed)
MIGRATION_PLAN: list[tuple[str, str, str, tuple[str, ...]]] = [
    (
        "critical",
        "remove-build-updates",
        "Move setState() calls out of build()",
        (set_state_in_build.PATTERN_ID,),
    ),
    (
        "critical",
        "isolate-browser-providers",
        "Create browser-dependent provider values on the client only",
        (browser_only_provider.PATTERN_ID,),
    ),
    (
        "high",
        "defer-subscriptions",
        "Replace render-time subscriptions with one-time reads until hydration",
        (
            subscriptions.WATCH_PATTERN_ID,
            subscriptions.SELECT_PATTERN_ID,
            subscriptions.CONSUMER_PATTERN_ID,
        ),
    ),
    (
        "high",
        "make-render-deterministic",
        "Compute random values and timestamps once on the server and pass them down",
        (nondeterministic_render.PATTERN_ID,),
    ),
    (
        "medium",
        "add-hydration-layer",
        "Hydrate widgets whose state changes only on the client",
        (client_only_mutation.PATTERN_ID, notifier_mutation.PATTERN_ID),
    ),
    (
        "medium",
        "defer-navigation",
        "Only access the Navigator from post-hydration event handlers",
        (navigation_access.PATTERN_ID,),
    ),
    (
        "medium",
        "defer-render-timers",
        "Start timers from a client-only hook instead of build()",
        (render_timers.PATTERN_ID,),
    ),
    (
        "low",
        "move-init-effects",
        "Start timers, listeners and fetches from a client-only hook",
        (init_state_side_effects.PATTERN_ID,),
    ),
]


def compatibility_for(score: int) -> Compatibility:
    for threshold, label in COMPATIBILITY_THRESHOLDS:
        if score >= threshold:
            return label
    return Compatibility.NONE


def step_effort(touches: int) -> Effort:
    if touches <= 1:
        return Effort.LOW
    if touches <= 3:
        return Effort.MEDIUM
    return Effort.HIGH


def estimate_effort(steps: list[MigrationStep]) -> EstimatedEffort:
    """Sum effort points of every step: ≤3 minimal, ≤6 moderate, ≤9 significant."""
    points = sum(EFFORT_POINTS[s.effort] for s in steps)
    if points <= 3:
        return EstimatedEffort.MINIMAL
    if points <= 6:
        return EstimatedEffort.MODERATE
    if points <= 9:
        return EstimatedEffort.SIGNIFICANT
    return EstimatedEffort.MAJOR_REWRITE


class SSRAnalyzer:
    """
    Server-rendering readiness check.

    Pattern checks are pure functions of the state and context results.
    A failing check is logged and reported as an issue; the others still run.
    """

    def __init__(
        self,
        state: StateAnalysisResult,
        context: ContextAnalysisResult,
        patterns: dict[str, PatternCheckFn] | None = None,
    ) -> None:
        self.state = state
        self.context = context
        self.patterns = PATTERN_REGISTRY if patterns is None else patterns

    def analyze(self) -> SSRAnalysisResult:
        safe: list[SSRPattern] = []
        unsafe: list[SSRPattern] = []
        issues: list[ValidationResult] = []
        executed: list[str] = []

        for pattern_id, check_fn in self.patterns.items():
            executed.append(pattern_id)
            try:
                found = check_fn(self.state, self.context)
            except Exception as e:
                logger.exception(f"Pattern check '{pattern_id}' failed")
                issues.append(
                    ValidationResult(
                        type="pattern-check-failed",
                        message=f"Pattern '{pattern_id}' failed: {type(e).__name__}: {e}",
                        severity=Severity.WARNING,
                        affected_item=pattern_id,
                    )
                )
                continue
            for p in found:
                (safe if p.safe else unsafe).append(p)

        score = calculate_ssr_score([p.penalty for p in unsafe if p.penalty > 0])
        hydration = self._hydration_requirements()
        lazy = self._lazy_load_opportunities()
        migration = self._migration_path(unsafe, lazy)

        for p in unsafe:
            if p.critical:
                issues.append(
                    ValidationResult(
                        type=p.pattern_id,
                        message=p.description,
                        severity=Severity.ERROR,
                        location=p.location,
                        suggestion=p.suggestion,
                        affected_item=p.affected[0] if p.affected else None,
                    )
                )

        logger.debug(
            f"SSR: score={score} safe={len(safe)} unsafe={len(unsafe)} "
            f"hydrate={len(hydration)} lazy={len(lazy)}"
        )

        return SSRAnalysisResult(
            safe_patterns=safe,
            unsafe_patterns=unsafe,
            hydration_requirements=hydration,
            migration_path=migration,
            lazy_load_opportunities=lazy,
            issues=issues,
            patterns_executed=executed,
            summary=SSRSummary(
                compatibility=compatibility_for(score),
                score=score,
                safe_pattern_count=len(safe),
                unsafe_pattern_count=len(unsafe),
                hydration_count=len(hydration),
                migration_steps=len(migration),
                lazy_load_count=len(lazy),
                estimated_effort=estimate_effort(migration),
            ),
        )

    # ── Hydration ──

    def _hydration_requirements(self) -> list[HydrationRequirement]:
        """Distinct widgets needing client hydration, each at its lowest order.

        0: widgets providing a notifier that has consumers
        1: widgets subscribing to context values
        2: widgets whose state changes through handlers or setState()
        """
        managed = {
            cls.name: cls.managed_widget or cls.name for cls in self.state.state_classes
        }
        chosen: dict[str, HydrationRequirement] = {}

        def want(widget: str, reason: str, order: int) -> None:
            current = chosen.get(widget)
            if current is None or order < current.order:
                chosen[widget] = HydrationRequirement(widget=widget, reason=reason, order=order)

        consumed = {d.provider_name for d in self.context.dependencies}
        for provider in self.context.providers:
            if provider.provider_kind != ProviderKind.CHANGE_NOTIFIER:
                continue
            if provider.name not in consumed:
                continue
            for widget in provider.provided_by:
                want(widget, f"Provides change notifier '{provider.name}'", 0)

        for usage in self.context.usages:
            if usage.usage_type != "subscribe":
                continue
            widget = managed.get(usage.widget, usage.widget)
            want(widget, f"Subscribes to {usage.lookup_type or 'a context value'}", 1)

        for cls in self.state.state_classes:
            if cls.event_handlers or cls.state_update_calls:
                want(managed[cls.name], "Updates state in response to user events", 2)

        return sorted(chosen.values(), key=lambda r: (r.order, r.widget))

    # ── Lazy loading ──

    def _lazy_load_opportunities(self) -> list[LazyLoadOpportunity]:
        """Inherited widgets looked up at most once and notifiers with many methods."""
        uses: dict[str, int] = {}
        for usage in self.context.usages:
            if usage.lookup_type:
                uses[usage.lookup_type] = uses.get(usage.lookup_type, 0) + 1

        found: list[LazyLoadOpportunity] = []
        for provider in self.context.providers:
            if provider.provider_kind == ProviderKind.INHERITED_WIDGET:
                count = uses.get(provider.name, 0)
                if count <= LAZY_INHERITED_MAX_USES:
                    found.append(
                        LazyLoadOpportunity(
                            target=provider.name,
                            type="widget",
                            reason=f"'{provider.name}' is looked up {count} time(s); "
                                   "it is not needed for the first render",
                            recommendation="Load it with a dynamic import() when its route is opened",
                        )
                    )
            elif provider.provider_kind == ProviderKind.CHANGE_NOTIFIER:
                if provider.method_count > LAZY_NOTIFIER_MAX_METHODS:
                    found.append(
                        LazyLoadOpportunity(
                            target=provider.name,
                            type="notifier",
                            reason=f"'{provider.name}' has {provider.method_count} methods "
                                   "and is only needed once its feature is used",
                            recommendation="Create it lazily inside the provider's create callback",
                        )
                    )
        return found

    # ── Migration ──

    def _migration_path(
        self, unsafe: list[SSRPattern], lazy: list[LazyLoadOpportunity]
    ) -> list[MigrationStep]:
        steps: list[MigrationStep] = []
        for priority, action, description, pattern_ids in MIGRATION_PLAN:
            hits = [p for p in unsafe if p.pattern_id in pattern_ids]
            if not hits:
                continue
            affected = sorted({name for p in hits for name in p.affected})
            steps.append(
                MigrationStep(
                    order=len(steps) + 1,
                    action=action,
                    description=description,
                    touches=len(hits),
                    affected=affected,
                    effort=step_effort(len(hits)),
                    priority=priority,
                )
            )
        if lazy:
            steps.append(
                MigrationStep(
                    order=len(steps) + 1,
                    action="lazy-load-providers",
                    description="Split rarely used providers into separately loaded chunks",
                    touches=len(lazy),
                    affected=sorted(o.target for o in lazy),
                    effort=step_effort(len(lazy)),
                    priority="low",
                )
            )
        steps.append(
            MigrationStep(
                order=len(steps) + 1,
                action="verify-server-render",
                description="Render each page on the server and compare with the hydrated client output",
                touches=0,
                effort=Effort.LOW,
                priority="low",
            )
        )
        return steps
