"""
Silver Medalists

A silver medalist is a candidate who reached a late stage of a previous
process (hiring manager interview, final round, offer) but was not hired.
They are the first people to re-engage for a similar vacancy.

Pure functions over parsed Candidate records.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from recruitops.services.ats_parsing import Candidate, Stage, Vacancy

LATE_STAGE_KEYWORDS = (
    "hiring manager",
    "hiring manager interview",
    "final interview",
    "final round",
    "offer",
    "aanbod",
    "eindgesprek",
    "laatste ronde",
    "beslissing",
    "decision",
)

UNKNOWN_OFFER_TITLE = "Onbekende vacature"


class SilverMedalist(BaseModel):
    candidate_id: int
    name: str
    email: Optional[str] = None
    furthest_stage: Stage
    furthest_stage_date: Optional[str] = None
    previous_offer_id: Optional[int] = None
    previous_offer_title: Optional[str] = None
    previous_offer_company: Optional[str] = None
    tags: List[str] = []
    updated_at: Optional[str] = None


def is_late_stage(stage_name: Optional[str]) -> bool:
    if not stage_name:
        return False
    name = stage_name.lower()
    return any(keyword in name for keyword in LATE_STAGE_KEYWORDS)


def _is_newer(date: Optional[str], current: Optional[str]) -> bool:
    # ISO-8601 timestamps compare correctly as strings
    return bool(date) and (not current or date > current)


def furthest_late_stage(candidate: Candidate) -> Tuple[Optional[Stage], Optional[str]]:
    """Most recent late stage over the placements and the current stage."""
    furthest: Optional[Stage] = None
    furthest_date: Optional[str] = None

    for placement in candidate.placements:
        if placement.stage and is_late_stage(placement.stage.name):
            if furthest is None or _is_newer(placement.updated_at, furthest_date):
                furthest = placement.stage
                furthest_date = placement.updated_at or placement.created_at

    if candidate.stage and is_late_stage(candidate.stage.name):
        if furthest is None or _is_newer(candidate.updated_at, furthest_date):
            furthest = candidate.stage
            furthest_date = candidate.updated_at or candidate.created_at

    return furthest, furthest_date


def find_silver_medalists(
    candidates: Iterable[Candidate], offers: Optional[Dict[int, Vacancy]] = None
) -> List[SilverMedalist]:
    """
    Not-hired candidates with at least one late stage.

    When a candidate id appears more than once, the record with the most
    recent late stage is kept. Results are ordered newest first.
    """
    offers = offers or {}
    by_id: Dict[int, SilverMedalist] = {}

    for candidate in candidates:
        if candidate.is_hired:
            continue

        stage, stage_date = furthest_late_stage(candidate)
        if stage is None:
            continue

        existing = by_id.get(candidate.candidate_id)
        if existing and not _is_newer(stage_date, existing.furthest_stage_date):
            continue

        offer = offers.get(candidate.offer_id) if candidate.offer_id is not None else None
        by_id[candidate.candidate_id] = SilverMedalist(
            candidate_id=candidate.candidate_id,
            name=candidate.name,
            email=candidate.email,
            furthest_stage=stage,
            furthest_stage_date=stage_date,
            previous_offer_id=candidate.offer_id,
            previous_offer_title=candidate.offer_title or (offer.title if offer else UNKNOWN_OFFER_TITLE),
            previous_offer_company=candidate.offer_company or (offer.company.name if offer else None),
            tags=candidate.tags,
            updated_at=candidate.updated_at,
        )

    return sorted(by_id.values(), key=lambda s: s.furthest_stage_date or "", reverse=True)
