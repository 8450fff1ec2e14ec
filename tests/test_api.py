"""API tests against an in-memory database with the model client faked."""
import copy
from unittest.mock import patch
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.api.routes_configs import get_generator
from app.core.errors import GenerationTimeout, GenerationUpstreamFailure
from app.core.workflow import GenerationStage, ProjectStatus
from app.db.models import CRMProject
from app.db.session import Base, get_db
from app.generators.config_gen.generator import ConfigGenerator
from app.main import app
from app.tasks.generation import generate_project
from tests.conftest import CLEANING_CONFIG, FakeClient

PROMPT = "I run a home cleaning business and need to track clients, jobs and cleaners"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    app.dependency_overrides[get_db] = lambda: db_session
    with patch("app.api.routes_projects.run_generation") as task:
        test_client = TestClient(app)
        test_client.task = task
        yield test_client
    app.dependency_overrides.clear()


def _use_generator(*responses):
    fake = FakeClient(*responses)
    app.dependency_overrides[get_generator] = lambda: ConfigGenerator(fake)
    return fake


def _generated_project(client, db_session, *responses) -> str:
    project_id = client.post("/v1/projects", json={"prompt": PROMPT}).json()["id"]
    generate_project(db_session, project_id, ConfigGenerator(FakeClient(*responses)))
    return project_id


def test_health(client):
    response = client.get("/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_validate_endpoint(client):
    ok = client.post("/v1/configs/validate", json=CLEANING_CONFIG)
    assert ok.json() == {"valid": True, "errors": []}

    broken = copy.deepcopy(CLEANING_CONFIG)
    broken["views"][0]["entityId"] = "ghosts"
    result = client.post("/v1/configs/validate", json=broken).json()
    assert result["valid"] is False
    assert result["errors"][0]["path"] == "views[0].entityId"


def test_generate_returns_config(client):
    fake = _use_generator(CLEANING_CONFIG)
    response = client.post("/v1/configs/generate", json={"prompt": PROMPT, "hints": {"industry": "Home services"}})
    assert response.status_code == 200
    assert [e["id"] for e in response.json()["entities"]] == ["clients", "cleaners", "jobs"]
    assert fake.requests[0].hints.industry == "Home services"


def test_generate_rejects_short_prompt(client):
    _use_generator(CLEANING_CONFIG)
    assert client.post("/v1/configs/generate", json={"prompt": "CRM"}).status_code == 422


@pytest.mark.parametrize("responses, status, code", [
    ((GenerationUpstreamFailure("Overloaded", 529),), 502, "GENERATION_UPSTREAM_FAILURE"),
    ((GenerationTimeout("Model request timed out"),), 504, "GENERATION_TIMEOUT"),
])
def test_generate_error_mapping(client, responses, status, code):
    _use_generator(*responses)
    response = client.post("/v1/configs/generate", json={"prompt": PROMPT})
    assert response.status_code == status
    assert response.json()["detail"]["code"] == code


def test_generate_invalid_after_repair_is_422(client):
    broken = copy.deepcopy(CLEANING_CONFIG)
    broken["views"][3]["kind"] = "gantt"
    _use_generator(broken, broken)
    response = client.post("/v1/configs/generate", json={"prompt": PROMPT})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "GENERATION_INVALID"
    assert [e["path"] for e in detail["errors"]] == ["views[3].kind"]


def test_modify_rejects_invalid_existing_config(client):
    _use_generator(CLEANING_CONFIG)
    response = client.post("/v1/configs/modify", json={"config": {"name": "x"}, "instruction": "Add a field"})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "INVALID_CONFIG"


def test_modify_returns_updated_config(client):
    updated = copy.deepcopy(CLEANING_CONFIG)
    updated["name"] = "Sparkle CRM"
    _use_generator(updated)
    response = client.post("/v1/configs/modify", json={"config": CLEANING_CONFIG, "instruction": "Rename it"})
    assert response.status_code == 200
    assert response.json()["name"] == "Sparkle CRM"


def test_create_project_queues_generation(client):
    response = client.post("/v1/projects", json={"prompt": PROMPT, "hints": {"primaryUseCase": "Scheduling"}})
    assert response.status_code == 202
    body = response.json()
    assert body["status"] == ProjectStatus.QUEUED.value
    assert body["config"] is None
    client.task.delay.assert_called_once_with(body["id"])

    fetched = client.get(f"/v1/projects/{body['id']}").json()
    assert fetched["hints"] == {"primaryUseCase": "Scheduling"}


def test_unknown_project_is_404(client):
    assert client.get("/v1/projects/nope").status_code == 404
    assert client.get("/v1/projects/nope/crm/jobs").status_code == 404


def test_pending_project_has_no_views_yet(client):
    project_id = client.post("/v1/projects", json={"prompt": PROMPT}).json()["id"]
    assert client.get(f"/v1/projects/{project_id}/crm/jobs").status_code == 409
    assert client.get(f"/v1/projects/{project_id}/openapi.yaml").status_code == 409


def test_generated_project_serves_views(client, db_session):
    project_id = _generated_project(client, db_session, CLEANING_CONFIG)

    project = client.get(f"/v1/projects/{project_id}").json()
    assert project["status"] == ProjectStatus.DONE.value
    assert project["stage"] == GenerationStage.DONE.value
    assert [r["entityId"] for r in project["resources"]] == ["clients", "cleaners", "jobs"]
    assert project["meta"]["attempts"] == 1

    sample = client.get(f"/v1/projects/{project_id}/sample-data").json()
    assert list(sample) == ["clients", "cleaners", "jobs"]

    default_view = client.get(f"/v1/projects/{project_id}/crm/jobs").json()
    assert default_view["viewId"] == "jobs-pipeline"
    assert [g["value"] for g in default_view["groups"]][:4] == ["quoted", "scheduled", "completed", "invoiced"]

    first_job = sample["jobs"][0]["id"]
    detail = client.get(f"/v1/projects/{project_id}/crm/jobs/jobs-detail", params={"record_id": first_job}).json()
    assert detail["record"]["id"] == first_job

    assert client.get(f"/v1/projects/{project_id}/crm/jobs/clients-table").status_code == 404
    assert client.get(f"/v1/projects/{project_id}/crm/invoices").status_code == 404

    openapi = client.get(f"/v1/projects/{project_id}/openapi.yaml")
    assert openapi.status_code == 200
    assert "/api/jobs/{id}" in openapi.text


def test_failed_generation_is_recorded(client, db_session):
    broken = copy.deepcopy(CLEANING_CONFIG)
    broken["views"][3]["kind"] = "gantt"
    project_id = _generated_project(client, db_session, broken, broken)

    project = db_session.get(CRMProject, project_id)
    assert project.status == ProjectStatus.FAILED
    assert project.config is None
    assert project.meta["errorCode"] == "GENERATION_INVALID"
    assert project.meta["validationErrors"][0]["path"] == "views[3].kind"


def test_generate_project_ignores_unknown_id(db_session):
    generate_project(db_session, "missing", ConfigGenerator(FakeClient()))
    assert db_session.query(CRMProject).count() == 0


def test_startup_failure_is_raised():
    """The app refuses to start when the database never becomes reachable."""
    with patch("app.main.wait_for_database", side_effect=RuntimeError("database down")), \
            patch("app.main.run_migrations") as migrations:
        with pytest.raises(RuntimeError, match="database down"):
            with TestClient(app):
                pass
    migrations.assert_not_called()
