"""
Priority scoring: tier bands, unknown values and the display resolver.
"""

import itertools

import pytest

from recruitops.services.priority import (
    RANK_TABLES, AccountHealth, ClientPainLevel, StrategicValue, TimeCriticality,
    calculate_priority, display_priority_for, get_display_priority, highest_priority,
    priority_score,
)

DIMENSION_ORDER = ("client_pain_level", "time_criticality", "strategic_value", "account_health")


def _value(dimension, rank):
    """Dimension value with the given rank (0 = absent)."""
    if rank == 0:
        return None
    return next(v for v, r in RANK_TABLES[dimension].items() if r == rank)


def _values(*ranks):
    return [_value(d, r) for d, r in zip(DIMENSION_ORDER, ranks)]


@pytest.mark.parametrize("ranks, expected_score, expected_tier", [
    ((0, 0, 0, 0), 0, "Green"),
    ((1, 1, 1, 1), 4, "Green"),
    ((2, 2, 1, 1), 6, "Green"),
    ((2, 2, 2, 1), 7, "Orange"),
    ((3, 3, 2, 1), 9, "Orange"),
    ((3, 3, 3, 1), 10, "Red"),
    ((3, 3, 3, 3), 12, "Red"),
])
def test_tier_bands(ranks, expected_score, expected_tier):
    values = _values(*ranks)
    assert priority_score(*values) == expected_score
    assert calculate_priority(*values) == expected_tier


def test_every_combination_lands_in_its_band():
    for ranks in itertools.product(range(4), repeat=4):
        total = sum(ranks)
        expected = "Red" if total >= 10 else "Orange" if total >= 7 else "Green"
        assert calculate_priority(*_values(*ranks)) == expected, ranks


def test_enum_members_rank_like_their_values():
    assert calculate_priority(
        ClientPainLevel.ja, TimeCriticality.einde_samenwerking,
        StrategicValue.a_klant, AccountHealth.churn,
    ) == "Red"


def test_unknown_values_count_as_absent():
    assert priority_score("Heel erg", 42, None, "Kans op churn") == 3
    assert calculate_priority("Heel erg", "Heel erg", "Heel erg", "Heel erg") == "Green"


def test_display_priority_prefers_override():
    assert get_display_priority("Green", "Red") == "Red"
    assert get_display_priority("Orange", None) == "Orange"
    assert get_display_priority(None, None) == "Green"


def test_display_priority_for_annotation_rows():
    assert display_priority_for(None) == "Green"
    assert display_priority_for({"calculated_priority": "Orange", "manual_override": None}) == "Orange"
    assert display_priority_for({"calculated_priority": "Orange", "manual_override": "Green"}) == "Green"


def test_highest_priority():
    assert highest_priority([]) == "Green"
    assert highest_priority(["Green", "Orange", "Green"]) == "Orange"
    assert highest_priority(["Orange", "Red"]) == "Red"
