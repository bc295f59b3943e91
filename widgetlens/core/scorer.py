"""
WidgetLens — Complexity, health and SSR score calculators.

All scores are integers clamped to 0-100.
"""

from __future__ import annotations

COMPLEXITY_PENALTY_THRESHOLD = 70
COMPLEXITY_HEALTH_PENALTY = 10


def clamp(raw: float) -> int:
    return min(100, max(0, int(round(raw))))


def calculate_complexity(fields: int, update_calls: int, event_handlers: int) -> int:
    """Capped weighted sum of state surface.

    fields × 10 (max 40) + update calls × 5 (max 30) + handlers × 2 (max 20)
    """
    return clamp(
        min(fields * 10, 40)
        + min(update_calls * 5, 30)
        + min(event_handlers * 2, 20)
    )


def calculate_health(errors: int, warnings: int, complexity: int) -> int:
    """100 − 10 × errors − 2 × warnings, minus a flat penalty above 70 complexity."""
    raw = 100 - 10 * errors - 2 * warnings
    if complexity > COMPLEXITY_PENALTY_THRESHOLD:
        raw -= COMPLEXITY_HEALTH_PENALTY
    return clamp(raw)


def calculate_ssr_score(penalties: list[int]) -> int:
    """100 minus the sum of per-pattern penalties, floored at 0.

    Penalties must be positive, so adding a pattern never raises the score.
    """
    if any(p <= 0 for p in penalties):
        raise ValueError("SSR penalties must be positive")
    return clamp(100 - sum(penalties))
