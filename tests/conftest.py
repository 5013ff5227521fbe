"""
Shared fixtures.

The app runs against in-memory SQLite, mongomock, a mocked Recruitee
transport and a stubbed LLM, so no external service is touched.
"""

import json

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from recruitops.core.config import Settings
from recruitops.db.mongodb import DocumentStore
from recruitops.db.postgres import Database
from recruitops.db.schema import init_schema
from recruitops.main import create_app
from recruitops.services.ats_client import RecruiteeClient
from recruitops.services.llm_client import LLMClient

ACCOUNT_ID = 4242

OFFERS = [
    {"id": 101, "title": "Monteur bij Van Wijnen", "status": "published",
     "description": "Onderhoud aan installaties"},
    {"id": 102, "title": "Allround Secretaresse (M/V) - Taxperience", "status": "published"},
    {"id": 103, "title": "Marketing Associate", "status": "published",
     "tags": [{"name": "Kader Group"}]},
    {"id": 104, "title": "Content Marketeer - Kader", "status": "published",
     "description": "Content en campagnes"},
]

CANDIDATES = [
    {
        "id": 1, "name": "Anna", "updated_at": "2026-09-02T08:00:00Z",
        "placements": [{
            "offer_id": 101, "hired_at": "2026-09-01T10:00:00Z",
            "stage": {"id": 9, "name": "Aangenomen", "category": "hire"},
        }],
    },
    {
        "id": 2, "name": "Bram", "updated_at": "2026-08-01T09:00:00Z",
        "placements": [{
            "offer_id": 103, "updated_at": "2026-08-01T09:00:00Z",
            "stage": {"id": 7, "name": "Hiring Manager Interview"},
        }],
    },
    {
        "id": 3, "name": "Carla", "offer_id": 104, "updated_at": "2026-08-05T09:00:00Z",
        "stage": {"id": 1, "name": "Applied"},
    },
    {
        "id": 4, "name": "Dirk", "offer_id": 102, "updated_at": "2026-07-01T12:00:00Z",
        "stage": {"id": 8, "name": "Offer"},
    },
]


def recruitee_handler(request: httpx.Request) -> httpx.Response:
    """Minimal Recruitee API for one account."""
    base = f"/c/{ACCOUNT_ID}"
    path = request.url.path
    page = int(request.url.params.get("page", "1"))

    if path == f"{base}/offers":
        return httpx.Response(200, json={"meta": {}, "offers": OFFERS if page == 1 else []})
    if path == f"{base}/candidates":
        return httpx.Response(200, json={"candidates": CANDIDATES if page == 1 else []})
    if path == f"{base}/companies":
        return httpx.Response(200, json={"companies": [{"id": ACCOUNT_ID, "name": "Recruitment Bureau"}]})
    if path == f"{base}/offers/103/placements":
        return httpx.Response(200, json={"placements": CANDIDATES[1]["placements"]})
    for offer in OFFERS:
        if path == f"{base}/offers/{offer['id']}":
            return httpx.Response(200, json={"offer": offer})
    return httpx.Response(404, json={"error": "Not found"})


class StubLLM(LLMClient):
    """LLMClient whose API call returns canned answers."""

    def __init__(self, responses=None):
        super().__init__(api_key="test-key")
        self.responses = list(responses or [])
        self.calls = []

    def _call_api(self, system_prompt, user_content, max_tokens=2000):
        self.calls.append(user_content)
        response = self.responses.pop(0) if self.responses else {"results": []}
        if isinstance(response, Exception):
            raise response
        return response if isinstance(response, str) else json.dumps(response)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        recruitee_api_key="test-key",
        recruitee_company_id=str(ACCOUNT_ID),
        openai_api_key="test-key",
        jwt_secret_key="test-secret",
    )


@pytest.fixture
def database():
    db = Database("sqlite://")
    init_schema(db)
    yield db
    db.dispose()


@pytest.fixture
def documents():
    return DocumentStore(mongomock.MongoClient(), "recruitops_test")


@pytest.fixture
def ats_client(settings):
    client = RecruiteeClient.from_settings(settings, transport=httpx.MockTransport(recruitee_handler))
    yield client
    client.close()


@pytest.fixture
def llm():
    return StubLLM()


@pytest.fixture
def app(settings, database, documents, ats_client, llm):
    return create_app(
        settings, database=database, documents=documents, ats_client=ats_client, llm_client=llm
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _register_and_login(client, email):
    password = "correct-horse-battery"
    response = client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _register_and_login(client, "admin@example.com")


@pytest.fixture
def viewer_headers(client, admin_headers):
    return _register_and_login(client, "viewer@example.com")
