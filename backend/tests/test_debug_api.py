# ruff: noqa

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from prodmgr.api.rate_limit import api_limiter
from prodmgr.core.config import settings
from prodmgr.db.session import get_session
from prodmgr.main import create_app
from prodmgr.models.jobs import Job
from prodmgr.models.projects import Client, Project

TOKEN = "debug-secret"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def client(engine, monkeypatch):
    monkeypatch.setattr(settings, "debug_routes_enabled", True)
    monkeypatch.setattr(settings, "debug_token", TOKEN)
    api_limiter.reset()
    app = create_app()

    def _session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session
    return TestClient(app)


def test_debug_routes_require_token(client):
    assert client.get("/api/debug/tables").status_code == 401
    assert client.get("/api/debug/tables", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_debug_routes_reject_everything_when_token_unset(client, monkeypatch):
    monkeypatch.setattr(settings, "debug_token", "")
    assert client.get("/api/debug/tables", headers={"Authorization": "Bearer "}).status_code == 401


def test_debug_routes_absent_unless_enabled(engine, monkeypatch):
    monkeypatch.setattr(settings, "debug_routes_enabled", False)
    api_limiter.reset()
    client = TestClient(create_app())
    assert client.get("/api/debug/tables", headers=AUTH).status_code == 404
    assert client.get("/api/health").json() == {"ok": True}


def test_list_tables(client):
    r = client.get("/api/debug/tables", headers=AUTH)
    assert r.status_code == 200
    tables = r.json()["tables"]
    assert tables == sorted(tables)
    assert {"jobs", "projects", "clients", "users", "roles", "user_roles"} <= set(tables)


def test_describe_table(client):
    r = client.get("/api/debug/table/jobs", headers=AUTH)
    assert r.status_code == 200
    body = r.json()
    assert body["table"] == "jobs"
    columns = {c["column_name"]: c for c in body["columns"]}
    assert columns["project_id"]["is_nullable"] == "YES"
    assert columns["items"]["is_nullable"] == "NO"


def test_describe_unknown_table_is_404(client):
    assert client.get("/api/debug/table/nope", headers=AUTH).status_code == 404


def test_debug_clients_limited_to_ten(client, engine):
    with Session(engine) as session:
        session.add_all([Client(name=f"Client {i}") for i in range(12)])
        session.commit()
    body = client.get("/api/debug/clients", headers=AUTH).json()
    assert body["count"] == 10
    assert body["clients"][0]["name"] == "Client 0"


def test_orphaned_jobs_report(client, engine):
    with Session(engine) as session:
        session.add(Project(id=1, name="Fitout"))
        session.add_all(
            [
                Job(id=1, project_id=1, items="a"),
                Job(id=2, project_id=None, items="b"),
                Job(id=3, project_id=7, items="c"),
            ]
        )
        session.commit()

    r = client.get("/api/maintenance/orphaned-jobs", headers=AUTH)
    assert r.status_code == 200
    body = r.json()
    assert body["total_jobs"] == 3
    assert body["null_project_jobs"] == 1
    assert body["valid_jobs"] == 1
    assert body["project_count"] == 1
    assert body["orphaned"] == [{"id": 3, "project_id": 7, "items": "c"}]


def test_api_routes_carry_rate_limit_headers(client):
    r = client.get("/api/health")
    assert r.headers["RateLimit-Limit"] == str(api_limiter.max_requests)
