"""
Tests for the score calculators — caps, the complexity penalty and clamping.
"""

import pytest

from widgetlens.core.scorer import calculate_complexity, calculate_health


@pytest.mark.parametrize("fields, updates, handlers, expected", [
    (0, 0, 0, 0),
    (1, 1, 1, 17),
    (4, 0, 0, 40),
    (9, 0, 0, 40),
    (0, 6, 0, 30),
    (0, 50, 0, 30),
    (0, 0, 10, 20),
    (0, 0, 99, 20),
    (10, 10, 20, 90),
])
def test_complexity_components_are_capped(fields, updates, handlers, expected):
    assert calculate_complexity(fields, updates, handlers) == expected


def test_health_penalty_applies_only_above_threshold():
    assert calculate_health(0, 0, 70) == 100
    assert calculate_health(0, 0, 71) == 90
    assert calculate_health(1, 2, 90) == 76


def test_health_is_floored_at_zero():
    assert calculate_health(12, 0, 0) == 0
    assert calculate_health(9, 10, 90) == 0
