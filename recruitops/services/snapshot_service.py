"""
ATS Snapshot Cache

Fetching every offer and candidate from Recruitee takes a while, so the
parsed result is cached per user in MongoDB (ats_snapshots) and reused
until it is older than the TTL (5 minutes by default).

Snapshot document:
{
  "user_id": 1,
  "cached_at": datetime,
  "jobs": [Vacancy, ...],
  "hires": [Candidate, ...],
  "applications": [Candidate, ...],
  "stats": {...}
}

Admin corrections (assigning vacancies to a company, merging companies)
rewrite the cached snapshot; the next refresh re-extracts company names.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, Field

from recruitops.core.log import get_logger
from recruitops.db.mongodb import DocumentStore
from recruitops.services.ats_client import RecruiteeClient
from recruitops.services.ats_parsing import (
    Candidate, Vacancy, parse_candidates, parse_offers, with_offer_details,
)
from recruitops.services.company_names import company_slug, normalize_company_name

logger = get_logger(__name__)


class Snapshot(BaseModel):
    user_id: int
    cached_at: datetime
    jobs: List[Vacancy] = Field(default_factory=list)
    hires: List[Candidate] = Field(default_factory=list)
    applications: List[Candidate] = Field(default_factory=list)
    stats: dict = Field(default_factory=dict)

    def job(self, job_id: int) -> Optional[Vacancy]:
        return next((j for j in self.jobs if j.job_id == job_id), None)

    @property
    def candidates(self) -> List[Candidate]:
        return [*self.hires, *self.applications]


def _utc(value: datetime) -> datetime:
    # pymongo returns naive datetimes in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SnapshotService:
    """
    Builds, caches and edits ATS snapshots.

    Usage:
        service = SnapshotService(documents, ats_client, known_companies=names)
        snapshot = service.get_or_refresh(user_id)
    """

    def __init__(
        self,
        documents: DocumentStore,
        ats_client: RecruiteeClient,
        known_companies: Iterable[str] = (),
        ttl_minutes: int = 5,
        page_size: int = 100,
        max_pages: int = 50,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.collection = documents.collection("ats_snapshots")
        self.ats_client = ats_client
        self.known_companies = list(known_companies)
        self.ttl = timedelta(minutes=ttl_minutes)
        self.page_size = page_size
        self.max_pages = max_pages
        self.clock = clock

    # ============================================================
    # READ
    # ============================================================

    def load(self, user_id: int) -> Optional[Snapshot]:
        doc = self.collection.find_one({"user_id": user_id}, {"_id": 0})
        if not doc:
            return None
        doc["cached_at"] = _utc(doc["cached_at"])
        return Snapshot.model_validate(doc)

    def _age(self, snapshot: Snapshot) -> timedelta:
        return self.clock() - snapshot.cached_at

    def is_valid(self, snapshot: Optional[Snapshot]) -> bool:
        return snapshot is not None and self._age(snapshot) < self.ttl

    def status(self, user_id: int) -> dict:
        snapshot = self.load(user_id)
        if snapshot is None:
            return {"cached": False, "valid": False, "age_minutes": None,
                    "cached_at": None, "jobs": 0, "hires": 0, "applications": 0}
        return {
            "cached": True,
            "valid": self.is_valid(snapshot),
            "age_minutes": round(self._age(snapshot).total_seconds() / 60, 1),
            "cached_at": snapshot.cached_at,
            "jobs": len(snapshot.jobs),
            "hires": len(snapshot.hires),
            "applications": len(snapshot.applications),
        }

    def get_or_refresh(self, user_id: int) -> Snapshot:
        """Cached snapshot while it is fresh, otherwise a new one."""
        snapshot = self.load(user_id)
        if self.is_valid(snapshot):
            return snapshot
        return self.refresh(user_id)

    # ============================================================
    # REFRESH
    # ============================================================

    def build(self, user_id: int) -> Snapshot:
        """Fetch and parse everything from Recruitee without storing it."""
        raw_offers = self.ats_client.fetch_all_offers(per_page=self.page_size, max_pages=self.max_pages)
        jobs = parse_offers(raw_offers, self.ats_client.account_id, self.known_companies)
        offers = {job.job_id: job for job in jobs}

        raw_candidates = self.ats_client.fetch_all_candidates(
            per_page=self.page_size, max_pages=self.max_pages
        )
        candidates = [with_offer_details(c, offers) for c in parse_candidates(raw_candidates)]

        hires = [c for c in candidates if c.is_hired]
        applications = [c for c in candidates if not c.is_hired]
        stats = {
            "jobs": len(jobs),
            "candidates": len(candidates),
            "hires": len(hires),
            "applications": len(applications),
            "hire_reasons": dict(Counter(c.hire_reason for c in hires)),
        }
        return Snapshot(
            user_id=user_id, cached_at=self.clock(),
            jobs=jobs, hires=hires, applications=applications, stats=stats,
        )

    def save(self, snapshot: Snapshot) -> Snapshot:
        self.collection.replace_one(
            {"user_id": snapshot.user_id}, snapshot.model_dump(), upsert=True
        )
        return snapshot

    def refresh(self, user_id: int) -> Snapshot:
        snapshot = self.save(self.build(user_id))
        logger.info(
            "ATS snapshot refreshed for user %s: %s jobs, %s hires, %s applications",
            user_id, len(snapshot.jobs), len(snapshot.hires), len(snapshot.applications),
        )
        return snapshot

    # ============================================================
    # ADMIN CORRECTIONS
    # ============================================================

    @staticmethod
    def _rename_job(job: Vacancy, company_name: str) -> Vacancy:
        company = job.company.model_copy(update={"name": company_name})
        return job.model_copy(update={"company": company, "company_slug": company_slug(company_name)})

    @staticmethod
    def _rename_candidates(candidates: List[Candidate], job_ids: set, company_name: str) -> List[Candidate]:
        return [
            c.model_copy(update={"offer_company": company_name}) if c.offer_id in job_ids else c
            for c in candidates
        ]

    def _apply(self, snapshot: Snapshot, job_ids: set, company_name: str) -> Snapshot:
        return snapshot.model_copy(update={
            "jobs": [self._rename_job(j, company_name) if j.job_id in job_ids else j for j in snapshot.jobs],
            "hires": self._rename_candidates(snapshot.hires, job_ids, company_name),
            "applications": self._rename_candidates(snapshot.applications, job_ids, company_name),
        })

    def assign_company(self, user_id: int, job_ids: Iterable[int], company_name: str) -> int:
        """Point the given vacancies at another company; returns how many changed."""
        name = company_name.strip()
        snapshot = self.get_or_refresh(user_id)
        wanted = set(job_ids)
        matched = {j.job_id for j in snapshot.jobs if j.job_id in wanted}
        if matched:
            self.save(self._apply(snapshot, matched, name))
        logger.info("Assigned %s vacancies to %s", len(matched), name)
        return len(matched)

    def rename_company(self, user_id: int, source_name: str, target_name: str) -> int:
        """Move every vacancy of one company name to another (merge)."""
        snapshot = self.get_or_refresh(user_id)
        source = normalize_company_name(source_name)
        matched = {j.job_id for j in snapshot.jobs if normalize_company_name(j.company.name) == source}
        if matched:
            self.save(self._apply(snapshot, matched, target_name.strip()))
        logger.info("Merged %s vacancies from %s into %s", len(matched), source_name, target_name)
        return len(matched)
