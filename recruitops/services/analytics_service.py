"""
Hiring Analytics

Aggregations over the cached hires and vacancies:
- hires per company over a rolling window (default 90 days)
- hires per month for a year
- period filtering of any record list
- distribution of displayed priority tiers
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from recruitops.services.ats_parsing import Candidate
from recruitops.services.priority import PriorityLevel


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse the timestamp formats Recruitee uses into an aware UTC datetime.

    "2024-03-01T09:30:00Z", "2024-03-01 09:30:00 UTC", "2024-03-01"
    """
    if not value or not isinstance(value, str):
        return None
    cleaned = value.strip()
    if cleaned.endswith(" UTC"):
        cleaned = cleaned[:-4] + "+00:00"
    elif cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def filter_by_period(
    records: Iterable, month: Optional[int] = None, year: Optional[int] = None,
    field: str = "hire_date",
) -> List:
    """Records whose `field` timestamp falls in the given month and/or year."""
    if month is None and year is None:
        return list(records)

    result = []
    for record in records:
        value = record.get(field) if isinstance(record, dict) else getattr(record, field, None)
        stamp = parse_timestamp(value)
        if stamp is None:
            continue
        if year is not None and stamp.year != year:
            continue
        if month is not None and stamp.month != month:
            continue
        result.append(record)
    return result


def hire_company(hire: Candidate) -> Optional[str]:
    """offer_company, company_name, or the "Company - Job" prefix of the offer title."""
    name = hire.offer_company or hire.company_name
    if not name and hire.offer_title and " - " in hire.offer_title:
        name = hire.offer_title.split(" - ")[0]
    if not name:
        return None
    name = " ".join(name.split())
    if name.endswith("."):
        name = name[:-1].strip()
    return name or None


def hires_per_company(
    hires: Iterable[Candidate], days: int = 90, now: Optional[datetime] = None
) -> dict:
    now = now or datetime.now(timezone.utc)
    start = now - timedelta(days=days)

    counts: Counter = Counter()
    for hire in hires:
        stamp = parse_timestamp(hire.hire_date)
        if stamp is None or not start <= stamp <= now:
            continue
        company = hire_company(hire)
        if company:
            counts[company] += 1

    return {
        "company_hires": dict(counts.most_common()),
        "total_hires": sum(counts.values()),
        "days": days,
        "start_date": start,
        "end_date": now,
    }


def hires_per_month(hires: Iterable[Candidate], year: int) -> Dict[int, int]:
    counts = {month: 0 for month in range(1, 13)}
    for hire in hires:
        stamp = parse_timestamp(hire.hire_date)
        if stamp is not None and stamp.year == year:
            counts[stamp.month] += 1
    return counts


def priority_distribution(rows: Iterable[dict]) -> Dict[str, int]:
    """Count of dashboard rows per displayed tier."""
    counts = {level.value: 0 for level in PriorityLevel}
    for row in rows:
        counts[row["display_priority"]] = counts.get(row["display_priority"], 0) + 1
    return counts
