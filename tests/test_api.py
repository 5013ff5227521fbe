"""
HTTP API end to end: SQLite + mongomock + mocked Recruitee + stubbed LLM.
"""

import httpx
from fastapi.testclient import TestClient

from recruitops.main import create_app
from recruitops.services.ats_client import RecruiteeClient
from recruitops.services.llm_client import LLMClient, LLMError

from conftest import ACCOUNT_ID, _register_and_login, recruitee_handler

RED_ANNOTATION = {
    "client_pain_level": "Ja",
    "time_criticality": "Tegen het einde van samenwerking",
    "strategic_value": "A-klant",
    "account_health": "Kans op churn",
    "notes": "Escalatie bij de klant",
}


# ============================================================
# HEALTH & AUTH
# ============================================================

def test_health(client):
    body = client.get("/health").json()
    assert body["database"] == "connected"
    assert body["recruitee"] == "configured"


def test_first_user_is_admin_and_later_users_are_viewers(client, admin_headers, viewer_headers):
    assert client.get("/api/auth/me", headers=admin_headers).json()["role"] == "admin"
    me = client.get("/api/auth/me", headers=viewer_headers).json()
    assert me["role"] == "viewer"
    assert me["email"] == "viewer@example.com"


def test_register_rejects_duplicate_email(client, admin_headers):
    response = client.post("/api/auth/register", json={
        "email": "admin@example.com", "password": "another-password",
    })
    assert response.status_code == 400


def test_login_with_wrong_password(client, admin_headers):
    response = client.post("/api/auth/login", json={
        "email": "admin@example.com", "password": "wrong-password",
    })
    assert response.status_code == 401


def test_requests_without_valid_token_are_rejected(client):
    assert client.get("/api/dashboard").status_code in (401, 403)
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/dashboard", headers=bad).status_code == 401


def test_admin_assigns_roles(client, admin_headers, viewer_headers):
    viewer_id = client.get("/api/auth/me", headers=viewer_headers).json()["user_id"]
    admin_id = client.get("/api/auth/me", headers=admin_headers).json()["user_id"]

    assert client.put(f"/api/auth/users/{viewer_id}/role", json={"role": "admin"},
                      headers=viewer_headers).status_code == 403

    response = client.put(f"/api/auth/users/{viewer_id}/role", json={"role": "admin"},
                          headers=admin_headers)
    assert response.status_code == 200
    assert client.get("/api/auth/me", headers=viewer_headers).json()["role"] == "admin"

    assert client.put(f"/api/auth/users/{admin_id}/role", json={"role": "viewer"},
                      headers=admin_headers).status_code == 400
    assert client.put("/api/auth/users/999/role", json={"role": "viewer"},
                      headers=admin_headers).status_code == 404


# ============================================================
# PRIORITIES & DASHBOARD
# ============================================================

def test_priority_roundtrip_drives_dashboard(client, admin_headers):
    response = client.put(f"/api/priorities/101/{ACCOUNT_ID}", json=RED_ANNOTATION, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["calculated_priority"] == "Red"
    assert body["display_priority"] == "Red"
    assert body["priority_score"] == 12

    stored = client.get(f"/api/priorities/101/{ACCOUNT_ID}", headers=admin_headers).json()
    assert stored["notes"] == "Escalatie bij de klant"

    dashboard = client.get("/api/dashboard", headers=admin_headers).json()
    assert dashboard["total_vacancies"] == 4
    assert [g["company_name"] for g in dashboard["companies"]] == ["Van Wijnen", "Kader Group", "Taxperience"]
    assert dashboard["companies"][0]["priority"] == "Red"
    assert dashboard["companies"][1]["vacancy_count"] == 2


def test_client_cannot_set_the_calculated_tier(client, admin_headers):
    body = client.put(f"/api/priorities/101/{ACCOUNT_ID}", headers=admin_headers, json={
        **RED_ANNOTATION, "calculated_priority": "Green", "priority_score": 1,
    }).json()
    assert body["calculated_priority"] == "Red"
    assert body["priority_score"] == 12

    stored = client.get(f"/api/priorities/101/{ACCOUNT_ID}", headers=admin_headers).json()
    assert stored["calculated_priority"] == "Red"
    assert stored["display_priority"] == "Red"


def test_priority_override(client, admin_headers):
    client.put(f"/api/priorities/101/{ACCOUNT_ID}",
               json={**RED_ANNOTATION, "manual_override": "Green"}, headers=admin_headers)

    kanban = client.get("/api/dashboard/kanban", headers=admin_headers).json()
    assert kanban["columns"]["Red"] == []
    assert len(kanban["columns"]["Green"]) == 4


def test_priority_validation_and_permissions(client, admin_headers, viewer_headers):
    assert client.put(f"/api/priorities/101/{ACCOUNT_ID}", json={"client_pain_level": "Heel erg"},
                      headers=admin_headers).status_code == 422
    assert client.put(f"/api/priorities/101/{ACCOUNT_ID}", json=RED_ANNOTATION,
                      headers=viewer_headers).status_code == 403
    assert client.get(f"/api/priorities/555/{ACCOUNT_ID}", headers=viewer_headers).status_code == 404
    assert client.get("/api/priorities", headers=viewer_headers).json() == []


# ============================================================
# VISIBILITY & COMPANIES
# ============================================================

def test_hidden_vacancies_leave_the_dashboard(client, admin_headers):
    response = client.put("/api/visibility/jobs", headers=admin_headers, json={
        "job_id": 101, "company_id": ACCOUNT_ID, "company_name": "Van Wijnen", "is_visible": False,
    })
    assert response.status_code == 200

    dashboard = client.get("/api/dashboard", headers=admin_headers).json()
    assert dashboard["total_vacancies"] == 3

    everything = client.get("/api/dashboard?include_hidden=true", headers=admin_headers).json()
    assert everything["total_vacancies"] == 4

    restored = client.post("/api/visibility/jobs/restore-all", headers=admin_headers).json()
    assert restored["restored"] == 1
    assert restored["jobs"][0]["job_id"] == 101
    assert client.get("/api/dashboard", headers=admin_headers).json()["total_vacancies"] == 4


def test_hidden_company_and_bulk_update(client, admin_headers, viewer_headers):
    client.put("/api/visibility/companies", headers=admin_headers, json={
        "company_id": ACCOUNT_ID, "company_name": "Taxperience", "is_visible": False,
    })
    names = [g["company_name"] for g in client.get("/api/dashboard", headers=admin_headers).json()["companies"]]
    assert "Taxperience" not in names

    response = client.put("/api/visibility/jobs/bulk", headers=admin_headers, json={
        "jobs": [{"job_id": 103, "company_id": ACCOUNT_ID}, {"job_id": 104, "company_id": ACCOUNT_ID}],
        "is_visible": False,
    })
    assert len(response.json()) == 2
    assert len(client.get("/api/visibility/jobs", headers=viewer_headers).json()) == 2
    assert client.put("/api/visibility/jobs/bulk", headers=viewer_headers, json={
        "jobs": [{"job_id": 103, "company_id": ACCOUNT_ID}], "is_visible": True,
    }).status_code == 403


def test_known_companies(client, admin_headers):
    response = client.post("/api/companies/known", json={"company_name": "Zuidzorg"}, headers=admin_headers)
    assert response.status_code == 201

    assert client.post("/api/companies/known", json={"company_name": "zuidzorg"},
                       headers=admin_headers).status_code == 409
    assert client.post("/api/companies/known", json={"company_name": "Kader Group"},
                       headers=admin_headers).status_code == 409
    assert client.post("/api/companies/known", json={"company_name": "   "},
                       headers=admin_headers).status_code == 422

    known = client.get("/api/companies/known", headers=admin_headers).json()
    added = [c for c in known if not c["built_in"]]
    assert [c["company_name"] for c in added] == ["Zuidzorg"]


def test_assign_and_merge_companies(client, admin_headers):
    response = client.post("/api/companies/assign-vacancies", headers=admin_headers,
                           json={"job_ids": [102], "company_name": "Nieuwe Klant"})
    assert response.json()["updated"] == 1
    assert client.post("/api/companies/assign-vacancies", headers=admin_headers,
                       json={"job_ids": [999], "company_name": "Nieuwe Klant"}).status_code == 404

    response = client.post("/api/companies/merge", headers=admin_headers, json={
        "source_company_id": ACCOUNT_ID, "source_company_name": "Nieuwe Klant",
        "target_company_name": "Van Wijnen",
    })
    assert response.json()["updated"] == 1

    groups = client.get("/api/dashboard", headers=admin_headers).json()["companies"]
    van_wijnen = next(g for g in groups if g["company_name"] == "Van Wijnen")
    assert {v["job_id"] for v in van_wijnen["vacancies"]} == {101, 102}

    assert client.post("/api/companies/merge", headers=admin_headers, json={
        "source_company_id": ACCOUNT_ID, "source_company_name": "Owow", "target_company_name": "Owow",
    }).status_code == 400


def test_blank_company_names_are_rejected(client, admin_headers):
    blank_requests = [
        ("post", "/api/companies/merge", {
            "source_company_id": ACCOUNT_ID, "source_company_name": "Van Wijnen",
            "target_company_name": "   ",
        }),
        ("post", "/api/companies/merge", {
            "source_company_id": ACCOUNT_ID, "source_company_name": "  ",
            "target_company_name": "Van Wijnen",
        }),
        ("put", "/api/companies/hours", {
            "company_id": ACCOUNT_ID, "company_name": "   ",
            "week_start_date": "2026-10-12", "total_hours": 8, "spent_hours": 2,
        }),
        ("put", "/api/visibility/companies", {
            "company_id": ACCOUNT_ID, "company_name": " \t ", "is_visible": False,
        }),
    ]
    for method, url, payload in blank_requests:
        response = getattr(client, method)(url, json=payload, headers=admin_headers)
        assert response.status_code == 422, url

    groups = client.get("/api/dashboard", headers=admin_headers).json()["companies"]
    assert {g["company_name"] for g in groups} == {"Van Wijnen", "Kader Group", "Taxperience"}
    assert client.get("/api/companies/hours?on=2026-10-12", headers=admin_headers).json()["current"] == []


def test_company_names_are_trimmed(client, admin_headers):
    response = client.put("/api/visibility/companies", headers=admin_headers, json={
        "company_id": ACCOUNT_ID, "company_name": "  Taxperience ", "is_visible": False,
    })
    assert response.json()["company_name"] == "Taxperience"

    groups = client.get("/api/dashboard", headers=admin_headers).json()["companies"]
    assert "Taxperience" not in {g["company_name"] for g in groups}


def test_company_hours(client, admin_headers, viewer_headers):
    response = client.put("/api/companies/hours", headers=admin_headers, json={
        "company_id": ACCOUNT_ID, "company_name": "Van Wijnen",
        "week_start_date": "2026-10-14", "total_hours": 10, "spent_hours": 4,
    })
    assert response.status_code == 200
    assert response.json()["week_start_date"] == "2026-10-12"
    assert response.json()["remaining_hours"] == 6

    weeks = client.get("/api/companies/hours?on=2026-10-15", headers=viewer_headers).json()
    assert weeks["current_week"] == "2026-10-12"
    assert weeks["current"][0]["company_name"] == "Van Wijnen"

    assert client.put("/api/companies/hours", headers=admin_headers, json={
        "company_id": ACCOUNT_ID, "company_name": "Van Wijnen",
        "week_start_date": "2026-10-14", "total_hours": -1, "spent_hours": 0,
    }).status_code == 422


# ============================================================
# ATS DATA & ANALYTICS
# ============================================================

def test_ats_endpoints(client, viewer_headers):
    refreshed = client.post("/api/ats/refresh", headers=viewer_headers).json()
    assert refreshed["stats"]["jobs"] == 4

    status = client.get("/api/ats/status", headers=viewer_headers).json()
    assert status["cached"] and status["valid"]

    assert client.get("/api/ats/jobs", headers=viewer_headers).json()["total"] == 4

    hires = client.get("/api/ats/hires?month=9&year=2026", headers=viewer_headers).json()
    assert [h["candidate_id"] for h in hires["hires"]] == [1]
    assert client.get("/api/ats/hires?month=8&year=2026", headers=viewer_headers).json()["total"] == 0

    applicants = client.get("/api/ats/jobs/103/applicants", headers=viewer_headers).json()
    assert [a["candidate_id"] for a in applicants["applicants"]] == [2]
    assert client.get("/api/ats/jobs/999/applicants", headers=viewer_headers).status_code == 404


def test_live_recruitee_lookups(client, viewer_headers):
    offer = client.get("/api/ats/offers/101", headers=viewer_headers).json()
    assert offer["job_id"] == 101
    assert offer["company_id"] == ACCOUNT_ID
    assert offer["company"]["name"] == "Van Wijnen"
    assert client.get("/api/ats/offers/999", headers=viewer_headers).status_code == 404

    placements = client.get("/api/ats/jobs/103/placements", headers=viewer_headers).json()
    assert placements["total"] == 1
    assert placements["placements"][0]["stage"]["name"] == "Hiring Manager Interview"
    assert client.get("/api/ats/jobs/104/placements", headers=viewer_headers).json()["total"] == 0

    companies = client.get("/api/ats/companies", headers=viewer_headers).json()
    assert [c["name"] for c in companies["companies"]] == ["Recruitment Bureau"]


def test_analytics_summary(client, viewer_headers):
    summary = client.get("/api/analytics/summary?year=2026", headers=viewer_headers).json()
    assert summary["total_vacancies"] == 4
    assert summary["total_companies"] == 3
    assert summary["total_hires"] == 1
    assert summary["hires_per_month"]["9"] == 1
    assert summary["priority_distribution"] == {"Red": 0, "Orange": 0, "Green": 4}

    hires = client.get("/api/analytics/company-hires?days=90", headers=viewer_headers).json()
    assert hires["days"] == 90


# ============================================================
# SILVER MEDALISTS
# ============================================================

def test_silver_medalists_fall_back_when_llm_matches_nobody(client, viewer_headers, llm):
    body = client.get("/api/silver-medalists?job_id=104", headers=viewer_headers).json()

    assert body["matching_method"] == "fallback"
    assert body["total_candidates"] == 2
    assert [m["candidate"]["candidate_id"] for m in body["matches"]] == [2, 4]
    assert {m["score"] for m in body["matches"]} == {50}
    assert len(llm.calls) == 1


def test_silver_medalists_ai_scores(client, viewer_headers, llm):
    llm.responses = [{"results": [{"index": 0, "score": 81, "reasoning": "Marketing achtergrond"}]}]

    body = client.get("/api/silver-medalists?job_id=104&mode=ai", headers=viewer_headers).json()

    assert body["matching_method"] == "ai"
    assert [(m["candidate"]["name"], m["score"]) for m in body["matches"]] == [("Bram", 81)]


def test_silver_medalists_keyword_mode(client, viewer_headers, llm, documents):
    body = client.get("/api/silver-medalists?job_id=103&mode=keyword", headers=viewer_headers).json()

    assert body["matching_method"] == "keyword"
    assert [(m["candidate"]["candidate_id"], m["score"]) for m in body["matches"]] == [(2, 50)]
    assert llm.calls == []
    assert documents.collection("match_runs").count_documents({"job_id": 103}) == 1


def test_silver_medalists_unknown_job(client, viewer_headers):
    assert client.get("/api/silver-medalists?job_id=999", headers=viewer_headers).status_code == 404


# ============================================================
# EXPORT
# ============================================================

def test_export_vacancies_csv(client, admin_headers):
    client.put(f"/api/priorities/101/{ACCOUNT_ID}", json=RED_ANNOTATION, headers=admin_headers)

    response = client.get("/api/export/vacancies.csv", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("company,job_title,priority")
    assert len(lines) == 5
    assert "Van Wijnen,Monteur bij Van Wijnen,Red" in response.text


def test_export_companies_csv(client, admin_headers):
    response = client.get("/api/export/companies.csv", headers=admin_headers)
    assert len(response.text.strip().splitlines()) == 4

    response = client.get("/api/export/companies-jobs.csv", headers=admin_headers)
    assert "extracted_company" in response.text.splitlines()[0]


# ============================================================
# UPSTREAM FAILURES
# ============================================================

def build_client(settings, database, documents, ats_client, llm_client):
    app = create_app(settings, database=database, documents=documents,
                     ats_client=ats_client, llm_client=llm_client)
    return TestClient(app)


def test_shutdown_releases_connections(settings, database, documents, ats_client, llm, monkeypatch):
    released = []
    monkeypatch.setattr(database, "dispose", lambda: released.append("database"))
    monkeypatch.setattr(documents, "close", lambda: released.append("documents"))

    with build_client(settings, database, documents, ats_client, llm) as client:
        assert client.get("/health").status_code == 200
        assert released == []

    assert sorted(released) == ["database", "documents"]
    assert ats_client.http.is_closed


def test_ats_outage_maps_to_502(settings, database, documents, llm):
    failing = RecruiteeClient.from_settings(
        settings, transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    )
    with build_client(settings, database, documents, failing, llm) as client:
        headers = _register_and_login(client, "admin@example.com")
        response = client.get("/api/dashboard", headers=headers)

    assert response.status_code == 502
    assert "Recruitee API error" in response.json()["detail"]


def test_missing_ats_credentials_map_to_503(settings, database, documents, llm):
    unconfigured = RecruiteeClient(api_key="", company_id="")
    with build_client(settings, database, documents, unconfigured, llm) as client:
        headers = _register_and_login(client, "admin@example.com")
        assert client.get("/api/ats/jobs", headers=headers).status_code == 503


def test_llm_failures_map_to_502_and_503(settings, database, documents, ats_client, llm):
    llm.responses = [LLMError("model overloaded")]
    with build_client(settings, database, documents, ats_client, llm) as client:
        headers = _register_and_login(client, "admin@example.com")
        assert client.get("/api/silver-medalists?job_id=104", headers=headers).status_code == 502

    # shutdown of the first app closed the shared ATS client and reset the in-memory database
    fresh_ats = RecruiteeClient.from_settings(settings, transport=httpx.MockTransport(recruitee_handler))
    with build_client(settings, database, documents, fresh_ats, LLMClient(api_key="")) as client:
        headers = _register_and_login(client, "viewer@example.com")
        assert client.get("/api/silver-medalists?job_id=104", headers=headers).status_code == 503
