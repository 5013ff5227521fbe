"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from recruitops.services.ats_parsing import Candidate, Placement, Vacancy
from recruitops.services.priority import (
    AccountHealth, ClientPainLevel, PriorityLevel, StrategicValue, TimeCriticality,
)
from recruitops.services.silver_medalists import SilverMedalist


def required_name(value: str) -> str:
    """Trimmed company name; whitespace-only names are rejected with a 422."""
    value = value.strip()
    if not value:
        raise ValueError("company name must not be blank")
    return value


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "admin"
    viewer = "viewer"


class MatchMode(str, Enum):
    ai = "ai"
    keyword = "keyword"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    role: str
    is_active: bool
    created_at: datetime

class RoleUpdate(BaseModel):
    role: UserRole


# ============================================================
# PRIORITY SCHEMAS
# ============================================================

class PriorityUpdate(BaseModel):
    """
    Annotation sent by an admin. calculated_priority is derived on the
    server and cannot be set.
    """
    client_pain_level: Optional[ClientPainLevel] = None
    time_criticality: Optional[TimeCriticality] = None
    strategic_value: Optional[StrategicValue] = None
    account_health: Optional[AccountHealth] = None
    manual_override: Optional[PriorityLevel] = None
    notes: Optional[str] = Field(None, max_length=5000)

class PriorityResponse(BaseModel):
    recruitee_job_id: int
    recruitee_company_id: int
    client_pain_level: Optional[str] = None
    time_criticality: Optional[str] = None
    strategic_value: Optional[str] = None
    account_health: Optional[str] = None
    calculated_priority: str
    manual_override: Optional[str] = None
    display_priority: str
    priority_score: int
    notes: Optional[str] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class VacancyRow(BaseModel):
    job_id: int
    title: str
    company_id: int
    company_name: str
    status: Optional[str] = None
    tags: List[str] = []
    display_priority: str
    priority: Optional[PriorityResponse] = None
    is_visible: bool = True

class CompanyGroup(BaseModel):
    company_id: int
    company_name: str
    company_slug: str
    priority: str
    vacancy_count: int
    vacancies: List[VacancyRow]

class DashboardResponse(BaseModel):
    companies: List[CompanyGroup]
    total_vacancies: int
    cached_at: datetime

class KanbanResponse(BaseModel):
    columns: Dict[str, List[VacancyRow]]
    cached_at: datetime


# ============================================================
# ATS SCHEMAS
# ============================================================

class SnapshotStatus(BaseModel):
    cached: bool
    valid: bool
    age_minutes: Optional[float] = None
    cached_at: Optional[datetime] = None
    jobs: int = 0
    hires: int = 0
    applications: int = 0

class RefreshResponse(BaseModel):
    cached_at: datetime
    stats: dict

class JobListResponse(BaseModel):
    jobs: List[Vacancy]
    total: int

class HireListResponse(BaseModel):
    hires: List[Candidate]
    total: int
    month: Optional[int] = None
    year: Optional[int] = None

class ApplicantListResponse(BaseModel):
    job_id: int
    applicants: List[Candidate]
    total: int

class PlacementListResponse(BaseModel):
    job_id: int
    placements: List[Placement]
    total: int

class RecruiteeCompanyListResponse(BaseModel):
    companies: List[dict]
    total: int


# ============================================================
# VISIBILITY SCHEMAS
# ============================================================

class CompanyVisibilityUpdate(BaseModel):
    company_id: int
    company_name: str = Field(..., min_length=1)
    is_visible: bool

    @field_validator("company_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return required_name(value)

class CompanyVisibilityResponse(BaseModel):
    recruitee_company_id: int
    company_name: str
    is_visible: bool

class JobKey(BaseModel):
    job_id: int
    company_id: int
    company_name: Optional[str] = None

class JobVisibilityUpdate(JobKey):
    is_visible: bool

class BulkJobVisibilityUpdate(BaseModel):
    jobs: List[JobKey] = Field(..., min_length=1)
    is_visible: bool

class JobVisibilityResponse(BaseModel):
    recruitee_job_id: int
    recruitee_company_id: int
    company_name: Optional[str] = None
    is_visible: bool

class RestoreAllResponse(BaseModel):
    restored: int
    jobs: List[JobKey]


# ============================================================
# COMPANY MANAGEMENT SCHEMAS
# ============================================================

class KnownCompanyCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("company_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return required_name(value)

class KnownCompanyResponse(BaseModel):
    known_company_id: Optional[int] = None
    company_name: str
    built_in: bool = False

class AssignVacanciesRequest(BaseModel):
    job_ids: List[int] = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)

class MergeCompaniesRequest(BaseModel):
    source_company_id: int
    source_company_name: str = Field(..., min_length=1)
    target_company_name: str = Field(..., min_length=1)

    @field_validator("source_company_name", "target_company_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        return required_name(value)

class CompanyUpdateResponse(BaseModel):
    success: bool = True
    message: str
    updated: int

class CompanyHoursUpdate(BaseModel):
    company_id: int
    company_name: str = Field(..., min_length=1)
    week_start_date: date
    total_hours: float = Field(..., ge=0)
    spent_hours: float = Field(..., ge=0)

    @field_validator("company_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return required_name(value)

class CompanyHoursEntry(BaseModel):
    recruitee_company_id: int
    company_name: str
    week_start_date: str
    total_hours: float
    spent_hours: float
    remaining_hours: float

class CompanyHoursResponse(BaseModel):
    current_week: str
    previous_week: str
    current: List[CompanyHoursEntry]
    previous: List[CompanyHoursEntry]


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class CompanyHiresResponse(BaseModel):
    company_hires: Dict[str, int]
    total_hires: int
    days: int
    start_date: datetime
    end_date: datetime

class AnalyticsSummary(BaseModel):
    total_vacancies: int
    total_companies: int
    total_hires: int
    total_applications: int
    priority_distribution: Dict[str, int]
    hires_per_month: Dict[int, int]
    year: int


# ============================================================
# SILVER MEDALIST SCHEMAS
# ============================================================

class SilverMedalistMatch(BaseModel):
    candidate: SilverMedalist
    score: int
    reasoning: str
    method: str

class SilverMedalistResponse(BaseModel):
    job_id: int
    job_title: str
    matching_method: str
    total_candidates: int
    matches: List[SilverMedalistMatch]


# ============================================================
# GENERIC
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
