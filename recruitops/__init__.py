"""
RecruitOps Dashboard
Recruitment-operations backend on top of the Recruitee ATS.

Architecture:
- PostgreSQL: Annotations and admin state (priorities, visibility, hours, users)
- MongoDB: ATS snapshots and silver medalist match runs
- Recruitee: Source of vacancies and candidates (read-only)
- OpenAI-compatible LLM: Silver medalist matching only
"""

__version__ = "1.0.0"
