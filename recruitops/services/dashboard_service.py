"""
Dashboard Assembly

Joins vacancies from the ATS snapshot with the locally stored priority
annotations and visibility flags, then groups them per client company.

- A vacancy without an annotation displays Green
- Company groups are formed with fuzzy name matching (are_companies_same)
- A group's priority is its most urgent vacancy
- Groups sort Red -> Orange -> Green, then by name; vacancies by tier, then title
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from recruitops.services.ats_parsing import Vacancy
from recruitops.services.company_names import are_companies_same, company_slug
from recruitops.services.priority import (
    DEFAULT_PRIORITY, PRIORITY_ORDER, PriorityLevel, display_priority_for, highest_priority,
)

AnnotationMap = Dict[Tuple[int, int], dict]


def vacancy_row(job: Vacancy, annotation: Optional[dict], is_visible: bool = True) -> dict:
    return {
        "job_id": job.job_id,
        "title": job.title,
        "company_id": job.company_id,
        "company_name": job.company.name,
        "status": job.status,
        "tags": job.tags,
        "display_priority": display_priority_for(annotation),
        "priority": annotation,
        "is_visible": is_visible,
    }


def _vacancy_sort_key(row: dict):
    return (PRIORITY_ORDER.get(row["display_priority"], 99), row["title"].lower())


def join_vacancies(
    jobs: Iterable[Vacancy],
    annotations: AnnotationMap,
    hidden_jobs: Set[Tuple[int, int]] = frozenset(),
    hidden_companies: Set[Tuple[int, str]] = frozenset(),
    include_hidden: bool = False,
) -> List[dict]:
    """Vacancy rows with their annotation, hidden ones dropped unless asked for."""
    rows = []
    for job in jobs:
        visible = (
            (job.job_id, job.company_id) not in hidden_jobs
            and (job.company_id, job.company.name) not in hidden_companies
        )
        if not visible and not include_hidden:
            continue
        rows.append(vacancy_row(job, annotations.get((job.job_id, job.company_id)), visible))
    return rows


def group_by_company(rows: List[dict]) -> List[dict]:
    """
    Group vacancy rows per company.

    A row joins the first existing group whose name matches fuzzily,
    otherwise it starts a new group under its own company name.
    """
    groups: List[dict] = []
    for row in rows:
        group = next(
            (g for g in groups if are_companies_same(g["company_name"], row["company_name"])),
            None,
        )
        if group is None:
            group = {
                "company_id": row["company_id"],
                "company_name": row["company_name"],
                "company_slug": company_slug(row["company_name"]),
                "vacancies": [],
            }
            groups.append(group)
        group["vacancies"].append(row)

    for group in groups:
        group["vacancies"].sort(key=_vacancy_sort_key)
        group["priority"] = highest_priority(v["display_priority"] for v in group["vacancies"])
        group["vacancy_count"] = len(group["vacancies"])

    groups.sort(key=lambda g: (PRIORITY_ORDER.get(g["priority"], 99), g["company_name"].lower()))
    return groups


def build_dashboard(
    jobs: Iterable[Vacancy],
    annotations: AnnotationMap,
    hidden_jobs: Set[Tuple[int, int]] = frozenset(),
    hidden_companies: Set[Tuple[int, str]] = frozenset(),
    include_hidden: bool = False,
) -> List[dict]:
    rows = join_vacancies(jobs, annotations, hidden_jobs, hidden_companies, include_hidden)
    return group_by_company(rows)


def build_kanban(rows: List[dict]) -> Dict[str, List[dict]]:
    """Vacancy rows bucketed by displayed tier."""
    columns: Dict[str, List[dict]] = {level.value: [] for level in PriorityLevel}
    for row in rows:
        columns.setdefault(row["display_priority"] or DEFAULT_PRIORITY, []).append(row)
    for column in columns.values():
        column.sort(key=lambda r: r["title"].lower())
    return columns
