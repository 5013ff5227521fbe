"""
ATS Parsing Layer

Recruitee payloads are loosely shaped: lists arrive bare or wrapped, ids
hide under several keys, and stage information sits on the candidate or on
its placements. Everything the rest of the app touches goes through this
module first and comes out as a strict pydantic record:

- Vacancy    <- offer
- Candidate  <- candidate (with Placement / Stage children)

Missing or malformed values get a deterministic default here, so no code
downstream needs to check whether a field is present.
"""

from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field

from recruitops.services.company_names import (
    TAG_FIELDS, UNKNOWN_COMPANY, company_slug, extract_company_from_tags,
    extract_company_from_title,
)


# ============================================================
# RECORDS
# ============================================================

class CompanyRef(BaseModel):
    id: int
    name: str


class Vacancy(BaseModel):
    job_id: int
    title: str
    company_id: int
    company: CompanyRef
    company_slug: str
    status: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Stage(BaseModel):
    id: Optional[int] = None
    name: str = ""
    category: Optional[str] = None


class Placement(BaseModel):
    offer_id: Optional[int] = None
    stage: Optional[Stage] = None
    hired_at: Optional[str] = None
    hired_in_this_placement: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Candidate(BaseModel):
    candidate_id: int
    name: str = ""
    email: Optional[str] = None
    offer_id: Optional[int] = None
    offer_title: Optional[str] = None
    offer_company: Optional[str] = None
    company_name: Optional[str] = None
    stage: Optional[Stage] = None
    placements: List[Placement] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_hired: bool = False
    hire_reason: Optional[str] = None
    hire_date: Optional[str] = None
    hired_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ============================================================
# PRIMITIVES
# ============================================================

def extract_items(payload: Any, key: str) -> List[dict]:
    """
    Pull the list of records out of a Recruitee response.

    Accepts a bare list, {key: [...]} or {"data": {key: [...]}};
    anything else yields [].
    """
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = payload.get(key)
        if items is None and isinstance(payload.get("data"), dict):
            items = payload["data"].get(key)
    else:
        items = None

    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first_int(*values: Any) -> Optional[int]:
    for value in values:
        parsed = _as_int(value)
        if parsed is not None:
            return parsed
    return None


def _first_str(*values: Any) -> Optional[str]:
    for value in values:
        parsed = _as_str(value)
        if parsed is not None:
            return parsed
    return None


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _tag_names(raw: dict) -> List[str]:
    for field in TAG_FIELDS:
        tags = raw.get(field)
        if isinstance(tags, list) and tags:
            names = []
            for tag in tags:
                if isinstance(tag, dict):
                    tag = tag.get("name") or tag.get("label") or tag.get("title")
                name = _as_str(tag)
                if name:
                    names.append(name)
            return names
    return []


# ============================================================
# OFFERS
# ============================================================

def resolve_offer_company_name(raw: dict, known_companies: Iterable[str] = ()) -> str:
    """
    Client company for an offer.

    Order: tags, title extraction, the company name embedded in the payload,
    then "Onbekend Bedrijf".
    """
    from_tags = extract_company_from_tags(
        next((raw[f] for f in TAG_FIELDS if isinstance(raw.get(f), list) and raw[f]), None)
    )
    if from_tags:
        return from_tags

    from_title = extract_company_from_title(_as_str(raw.get("title")) or "", known_companies)
    if from_title != UNKNOWN_COMPANY:
        return from_title

    company = _dict(raw.get("company"))
    department = _dict(raw.get("department"))
    return _first_str(
        company.get("name"),
        raw.get("company_name"),
        raw.get("companyName"),
        _dict(department.get("company")).get("name"),
    ) or UNKNOWN_COMPANY


def parse_offer(raw: dict, default_company_id: int, known_companies: Iterable[str] = ()) -> Vacancy:
    """
    Map a Recruitee offer to a Vacancy.

    The company id falls back to the account id, since offers of an agency
    account often carry no company of their own.
    """
    job_id = _as_int(raw.get("id"))
    if job_id is None:
        raise ValueError("Offer without a numeric id")

    company = _dict(raw.get("company"))
    company_id = _first_int(
        company.get("id"),
        raw.get("company_id"),
        raw.get("companyId"),
        _dict(raw.get("department")).get("company_id"),
        default_company_id,
    )
    company_name = resolve_offer_company_name(raw, known_companies)

    return Vacancy(
        job_id=job_id,
        title=_as_str(raw.get("title")) or "",
        company_id=company_id,
        company=CompanyRef(id=company_id, name=company_name),
        company_slug=company_slug(company_name),
        status=_as_str(raw.get("status")),
        description=_first_str(raw.get("description"), raw.get("requirements")),
        tags=_tag_names(raw),
        created_at=_as_str(raw.get("created_at")),
        updated_at=_as_str(raw.get("updated_at")),
    )


def parse_offers(
    payload: Any, default_company_id: int, known_companies: Iterable[str] = ()
) -> List[Vacancy]:
    """Parse every offer in a response, skipping records without an id."""
    known_companies = list(known_companies)
    return [
        parse_offer(raw, default_company_id, known_companies)
        for raw in extract_items(payload, "offers")
        if _as_int(raw.get("id")) is not None
    ]


# ============================================================
# CANDIDATES
# ============================================================

def parse_stage(raw: Any) -> Optional[Stage]:
    if not isinstance(raw, dict):
        return None
    name = _as_str(raw.get("name")) or ""
    category = _as_str(raw.get("category"))
    stage_id = _as_int(raw.get("id"))
    if not name and not category and stage_id is None:
        return None
    return Stage(id=stage_id, name=name, category=category)


def parse_placement(raw: dict) -> Placement:
    offer = _dict(raw.get("offer"))
    return Placement(
        offer_id=_first_int(raw.get("offer_id"), raw.get("offerId"), offer.get("id")),
        stage=parse_stage(raw.get("stage")),
        hired_at=_as_str(raw.get("hired_at")),
        hired_in_this_placement=raw.get("hired_in_this_placement") is True,
        created_at=_as_str(raw.get("created_at")),
        updated_at=_as_str(raw.get("updated_at")),
    )


def detect_hire(
    raw: dict, stage: Optional[Stage], placements: List[Placement]
) -> Optional[str]:
    """
    Reason the candidate counts as hired, or None.

    Checked in order: explicit is_hired flag, a placement hired_at, a
    placement hired_in_this_placement flag, candidate hired_at, a "hire"
    stage category, then a stage named like "aangenomen" / "hire".
    """
    if raw.get("is_hired") is True:
        return "is_hired"
    if any(p.hired_at for p in placements):
        return "placement_hired_at"
    if any(p.hired_in_this_placement for p in placements):
        return "hired_in_this_placement"
    if _as_str(raw.get("hired_at")):
        return "hired_at"

    stages = [s for s in [stage, *(p.stage for p in placements)] if s]
    if any((s.category or "").lower() == "hire" for s in stages):
        return "stage_category"
    for s in stages:
        name = s.name.lower()
        if "aangenomen" in name or "hire" in name:
            return "stage_name"
    return None


def parse_candidate(raw: dict) -> Candidate:
    """Map a Recruitee candidate to a Candidate record."""
    candidate_id = _as_int(raw.get("id"))
    if candidate_id is None:
        raise ValueError("Candidate without a numeric id")

    placements = [
        parse_placement(p) for p in raw.get("placements") or [] if isinstance(p, dict)
    ]
    stage = parse_stage(raw.get("stage"))
    if stage is None:
        stage = parse_stage(raw.get("current_stage"))

    current_placement = _dict(raw.get("current_placement"))
    offer_id = _first_int(
        raw.get("offer_id"),
        raw.get("offerId"),
        raw.get("current_offer_id"),
        *(p.offer_id for p in placements),
        current_placement.get("offer_id"),
        _dict(current_placement.get("offer")).get("id"),
    )

    hire_reason = detect_hire(raw, stage, placements)
    hired_at = _as_str(raw.get("hired_at"))
    hire_date = None
    if hire_reason:
        hire_date = _first_str(
            next((p.hired_at for p in placements if p.hired_at), None),
            hired_at,
            raw.get("updated_at"),
        )

    emails = raw.get("emails")
    email = _first_str(raw.get("email"), emails[0] if isinstance(emails, list) and emails else None)

    return Candidate(
        candidate_id=candidate_id,
        name=_as_str(raw.get("name")) or "",
        email=email,
        offer_id=offer_id,
        offer_title=_first_str(raw.get("offer_title"), raw.get("previous_offer_title")),
        offer_company=_first_str(raw.get("offer_company"), raw.get("previous_offer_company")),
        company_name=_as_str(raw.get("company_name")),
        stage=stage,
        placements=placements,
        tags=_tag_names(raw),
        is_hired=hire_reason is not None,
        hire_reason=hire_reason,
        hire_date=hire_date,
        hired_at=hired_at,
        created_at=_as_str(raw.get("created_at")),
        updated_at=_as_str(raw.get("updated_at")),
    )


def parse_candidates(payload: Any) -> List[Candidate]:
    """Parse every candidate in a response, skipping records without an id."""
    return [
        parse_candidate(raw)
        for raw in extract_items(payload, "candidates")
        if _as_int(raw.get("id")) is not None
    ]


def with_offer_details(candidate: Candidate, offers: dict) -> Candidate:
    """Fill offer title and company from the offer map (job_id -> Vacancy)."""
    offer = offers.get(candidate.offer_id) if candidate.offer_id is not None else None
    if offer is None:
        return candidate
    return candidate.model_copy(update={
        "offer_title": candidate.offer_title or offer.title,
        "offer_company": candidate.offer_company or offer.company.name,
    })
