"""
CSV Exports

- vacancies:      one line per dashboard vacancy with its annotation
- companies:      one line per company group with tier counts
- companies-jobs: title extraction audit (extracted vs. cached company name)
"""

import csv
import io
from typing import Iterable, List

from recruitops.services.ats_parsing import Vacancy
from recruitops.services.company_names import extract_company_from_title
from recruitops.services.priority import PriorityLevel

VACANCY_COLUMNS = [
    "company", "job_title", "priority", "client_pain_level", "time_criticality",
    "strategic_value", "account_health", "manual_override", "notes", "job_id", "company_id",
]
COMPANY_COLUMNS = [
    "company", "company_id", "priority", "vacancies",
    "red_vacancies", "orange_vacancies", "green_vacancies",
]
COMPANY_JOB_COLUMNS = [
    "job_id", "job_title", "extracted_company", "original_company", "company_id",
]


def _to_csv(columns: List[str], rows: Iterable[dict]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def vacancies_csv(rows: Iterable[dict]) -> str:
    """Dashboard vacancy rows (see dashboard_service.vacancy_row)."""
    def line(row: dict) -> dict:
        annotation = row.get("priority") or {}
        return {
            "company": row["company_name"],
            "job_title": row["title"],
            "priority": row["display_priority"],
            "client_pain_level": annotation.get("client_pain_level") or "-",
            "time_criticality": annotation.get("time_criticality") or "-",
            "strategic_value": annotation.get("strategic_value") or "-",
            "account_health": annotation.get("account_health") or "-",
            "manual_override": annotation.get("manual_override") or "-",
            "notes": annotation.get("notes") or "-",
            "job_id": row["job_id"],
            "company_id": row["company_id"],
        }

    return _to_csv(VACANCY_COLUMNS, (line(row) for row in rows))


def companies_csv(groups: Iterable[dict]) -> str:
    def line(group: dict) -> dict:
        tiers = [v["display_priority"] for v in group["vacancies"]]
        return {
            "company": group["company_name"],
            "company_id": group["company_id"],
            "priority": group["priority"],
            "vacancies": len(tiers),
            "red_vacancies": tiers.count(PriorityLevel.red.value),
            "orange_vacancies": tiers.count(PriorityLevel.orange.value),
            "green_vacancies": tiers.count(PriorityLevel.green.value),
        }

    return _to_csv(COMPANY_COLUMNS, (line(group) for group in groups))


def companies_jobs_csv(jobs: Iterable[Vacancy], known_companies: Iterable[str] = ()) -> str:
    known_companies = list(known_companies)
    return _to_csv(COMPANY_JOB_COLUMNS, (
        {
            "job_id": job.job_id,
            "job_title": job.title,
            "extracted_company": extract_company_from_title(job.title, known_companies),
            "original_company": job.company.name,
            "company_id": job.company_id,
        }
        for job in jobs
    ))
