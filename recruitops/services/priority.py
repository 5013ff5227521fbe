"""
Vacancy Priority Scoring

PURPOSE:
Turn the four categorical annotations recruiters set on a vacancy into a
traffic-light tier, and decide which tier the dashboard shows.

HOW IT WORKS:
1. Each dimension value maps to a rank 1 / 2 / 3 (absent or unknown = 0)
2. The four ranks are summed (0 - 12)
3. The sum falls into a tier band:
   - 0       -> Green (nothing annotated yet)
   - 1 - 6   -> Green
   - 7 - 9   -> Orange
   - 10 - 12 -> Red
4. A manual override, when set, wins over the calculated tier

Everything here is pure: no I/O, never raises.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Optional


# ============================================================
# DIMENSION VALUES
# ============================================================

class ClientPainLevel(str, Enum):
    nee = "Nee"
    beginnend = "Beginnend"
    ja = "Ja"


class TimeCriticality(str, Enum):
    net_begonnen = "Net begonnen"
    lopend = "Lopend"
    einde_samenwerking = "Tegen het einde van samenwerking"


class StrategicValue(str, Enum):
    c_klant = "C-klant"
    b_klant = "B-klant"
    a_klant = "A-klant"


class AccountHealth(str, Enum):
    tevreden = "Tevreden stakeholder"
    onrustig = "Onrustige stakeholder"
    churn = "Kans op churn"


class PriorityLevel(str, Enum):
    red = "Red"
    orange = "Orange"
    green = "Green"


# Rank of every accepted value per dimension
RANK_TABLES: Dict[str, Dict[str, int]] = {
    "client_pain_level": {"Nee": 1, "Beginnend": 2, "Ja": 3},
    "time_criticality": {
        "Net begonnen": 1,
        "Lopend": 2,
        "Tegen het einde van samenwerking": 3,
    },
    "strategic_value": {"C-klant": 1, "B-klant": 2, "A-klant": 3},
    "account_health": {
        "Tevreden stakeholder": 1,
        "Onrustige stakeholder": 2,
        "Kans op churn": 3,
    },
}

# (minimum score, tier), checked top to bottom
TIER_BANDS = (
    (10, PriorityLevel.red.value),
    (7, PriorityLevel.orange.value),
    (0, PriorityLevel.green.value),
)

DEFAULT_PRIORITY = PriorityLevel.green.value

# Sort order used by the dashboard: Red first
PRIORITY_ORDER: Dict[str, int] = {
    PriorityLevel.red.value: 0,
    PriorityLevel.orange.value: 1,
    PriorityLevel.green.value: 2,
}


# ============================================================
# CALCULATION
# ============================================================

def _rank(dimension: str, value: Any) -> int:
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        return 0
    return RANK_TABLES[dimension].get(value, 0)


def priority_score(
    client_pain_level: Any = None,
    time_criticality: Any = None,
    strategic_value: Any = None,
    account_health: Any = None,
) -> int:
    """Sum of the four dimension ranks, 0 - 12."""
    return (
        _rank("client_pain_level", client_pain_level)
        + _rank("time_criticality", time_criticality)
        + _rank("strategic_value", strategic_value)
        + _rank("account_health", account_health)
    )


def calculate_priority(
    client_pain_level: Any = None,
    time_criticality: Any = None,
    strategic_value: Any = None,
    account_health: Any = None,
) -> str:
    """
    Calculate the priority tier from the four annotation dimensions.

    Unrecognized values count as absent, so the function is total.

    Example:
        calculate_priority("Ja", "Lopend", "A-klant", "Kans op churn")  # "Red"
    """
    score = priority_score(client_pain_level, time_criticality, strategic_value, account_health)
    for minimum, tier in TIER_BANDS:
        if score >= minimum:
            return tier
    return DEFAULT_PRIORITY


# ============================================================
# DISPLAY
# ============================================================

def get_display_priority(calculated_priority: Any, manual_override: Any = None) -> str:
    """Manual override when set, otherwise the calculated tier."""
    if isinstance(manual_override, Enum):
        manual_override = manual_override.value
    if manual_override:
        return manual_override
    if isinstance(calculated_priority, Enum):
        calculated_priority = calculated_priority.value
    return calculated_priority or DEFAULT_PRIORITY


def display_priority_for(annotation: Optional[dict]) -> str:
    """Displayed tier for a stored annotation row, Green when there is none."""
    if not annotation:
        return DEFAULT_PRIORITY
    return get_display_priority(
        annotation.get("calculated_priority"), annotation.get("manual_override")
    )


def highest_priority(priorities: Iterable[str]) -> str:
    """Most urgent tier in the iterable, Green when empty."""
    best = DEFAULT_PRIORITY
    for priority in priorities:
        if PRIORITY_ORDER.get(priority, 99) < PRIORITY_ORDER[best]:
            best = priority
    return best
