import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_engine
from config import settings
from main import app
from models.schemas.profile import Profile
from services.signal_builder import build_profile_signal

from fakes import FakeEmbeddingClient

client = TestClient(app)

PROFILE = {
    "title": "Account Executive",
    "seniority_hint": "Mid",
    "functions": ["Sales"],
    "hard_skills": ["Salesforce", "Excel"],
    "languages": [{"name": "German", "proficiency": "Native"}, "English"],
    "education": {"level": "Bachelor", "field": "Business"},
    "yoe": 6,
    "achievements": [{"text": "Grew territory revenue 40%"}],
}

JOB = {
    "title": "Account Executive",
    "seniority_hint": "Mid",
    "functions": ["Sales"],
    "hard_skills": ["Salesforce", "Excel"],
    "languages": ["German", "English"],
    "yoe_min": 5,
    "education_min": "Bachelor",
    "key_outcomes": ["Grew territory revenue 40%"],
    "work_mode": "Hybrid",
}


@pytest.fixture
def use_engine(make_engine):
    """Route the API through a fake-backed engine for one test."""
    def _use(client=None, **kwargs):
        engine = make_engine(client or FakeEmbeddingClient(constant=True), **kwargs)
        app.dependency_overrides[get_engine] = lambda: engine
        return engine
    yield _use
    app.dependency_overrides.pop(get_engine, None)


def test_health(use_engine):
    use_engine()
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["embedding_model"] == "fake-embed-v1"
    assert data["cache_entries"] == 0


def test_match(use_engine):
    use_engine()
    response = client.post("/match", json={"profile": PROFILE, "job_requirement": JOB})
    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 100
    assert data["cosine_similarity"] == 1.0
    assert data["gate_outcomes"] == []
    assert {b["category"] for b in data["boosts"]} == {"functions", "skills", "languages", "outcomes"}
    assert data["overlaps"]["skills"][0]["kind"] == "exact"
    assert data["signals"]["profile"].startswith("TITLE Account Executive")


def test_match_gated(use_engine):
    use_engine()
    profile = {**PROFILE, "yoe": 3}
    response = client.post("/match", json={"profile": profile, "job_requirement": JOB})
    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 0
    assert data["gate_outcomes"][0]["type"] == "yoe_below_min"
    assert data["gate_outcomes"][0]["yoe_min"] == 5


def test_match_rejects_malformed_body(use_engine):
    fake = FakeEmbeddingClient()
    use_engine(fake)
    response = client.post("/match", json={"profile": {"yoe": "plenty"}, "job_requirement": JOB})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "MALFORMED_INPUT"
    assert "profile.yoe" in detail["message"]
    assert fake.calls == []


def test_match_rejects_missing_job(use_engine):
    use_engine()
    response = client.post("/match", json={"profile": PROFILE})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "MALFORMED_INPUT"


def test_match_provider_failure(use_engine):
    signal = build_profile_signal(Profile.model_validate(PROFILE))
    use_engine(FakeEmbeddingClient(fail_on={signal}))
    response = client.post("/match", json={"profile": PROFILE, "job_requirement": JOB})
    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "PROVIDER_ERROR"


def test_match_connection_failure_is_provider_error(use_engine):
    signal = build_profile_signal(Profile.model_validate(PROFILE))
    use_engine(FakeEmbeddingClient(fail_on={signal}, error=ConnectionError))
    response = client.post("/match", json={"profile": PROFILE, "job_requirement": JOB})
    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "PROVIDER_ERROR"


def test_match_timeout(use_engine):
    use_engine(FakeEmbeddingClient(delay=5.0), timeout=0.05)
    response = client.post("/match", json={"profile": PROFILE, "job_requirement": JOB})
    assert response.status_code == 504
    assert response.json()["detail"]["code"] == "MATCH_TIMEOUT"


def test_batch_ranks_by_score(use_engine):
    use_engine()
    gated = {**PROFILE, "yoe": 1}
    no_languages = {**PROFILE, "languages": []}
    response = client.post(
        "/match/batch",
        json={"profiles": [gated, no_languages, PROFILE], "job_requirement": JOB},
    )
    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["index"] for r in results] == [2, 1, 0]
    scores = [r["result"]["score"] for r in results]
    assert scores == sorted(scores, reverse=True)
    assert scores[-1] == 0


def test_batch_requires_profiles(use_engine):
    use_engine()
    response = client.post("/match/batch", json={"profiles": [], "job_requirement": JOB})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "MALFORMED_INPUT"


def test_batch_too_many_profiles(use_engine, monkeypatch):
    use_engine()
    monkeypatch.setattr(settings, "max_request_profiles", 2)
    response = client.post(
        "/match/batch",
        json={"profiles": [PROFILE, PROFILE, PROFILE], "job_requirement": JOB},
    )
    assert response.status_code == 400
    assert "Max per request: 2" in response.json()["detail"]
