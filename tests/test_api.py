from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from buganizer.core import QueryExecutionException
from buganizer.dependencies import MemoryStore, get_db_session, get_issue_repository, get_memory_store
from buganizer.issues.infrastructure.memory import InMemoryIssueRepository
from buganizer.main import create_app
from buganizer.search.domain import IssueOrder


async def no_session():
    return None


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app(store):
    application = create_app()
    application.dependency_overrides[get_db_session] = no_session
    application.dependency_overrides[get_memory_store] = lambda: store
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def headers(user_id):
    return {"X-User-ID": str(user_id)}


def file_issue(client, headers, component_id, **fields):
    payload = {"title": "Login page crashes", "component_id": str(component_id)}
    payload.update(fields)
    response = client.post("/issues", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ========== Identity ==========

def test_missing_user_header_is_unauthorized(client):
    response = client.get("/issues")
    assert response.status_code == 401
    assert response.headers["X-Correlation-ID"]


def test_invalid_user_header_is_unauthorized(client):
    assert client.get("/issues", headers={"X-User-ID": "alice"}).status_code == 401


def test_health_and_root_need_no_identity(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["service"] == "Buganizer"


# ========== Issues ==========

def test_issue_lifecycle(client, headers, user_id, component_id):
    issue = file_issue(client, headers, component_id, priority="P1", severity="S3", labels=["ui"])

    assert issue["status"] == "NEW"
    assert issue["reporter_id"] == str(user_id)
    assert issue["due_date"] is not None

    fetched = client.get(f"/issues/{issue['id']}", headers=headers).json()
    assert fetched["title"] == "Login page crashes"

    updated = client.patch(f"/issues/{issue['id']}", json={"status": "FIXED"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["status"] == "FIXED"
    assert updated.json()["due_date"] == issue["due_date"]


def test_create_issue_validation_error(client, headers):
    response = client.post("/issues", json={"title": "No component"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "component_id is required"


def test_get_issue_errors(client, headers):
    assert client.get("/issues/not-a-uuid", headers=headers).status_code == 400
    assert client.get(f"/issues/{uuid4()}", headers=headers).status_code == 404


def test_list_issues_with_filter(client, headers, component_id):
    file_issue(client, headers, component_id, title="urgent", priority="P0")
    file_issue(client, headers, component_id, title="minor", priority="P3")

    body = client.get("/issues", params={"filter": "priority:P0"}, headers=headers).json()

    assert [i["title"] for i in body["issues"]] == ["urgent"]
    assert body["total_count"] == 1
    assert body["next_page_token"] == ""


def test_list_issues_pagination(client, headers, component_id):
    for n in range(3):
        file_issue(client, headers, component_id, title=f"issue {n}")

    first = client.get("/issues", params={"page_size": 2}, headers=headers).json()
    second = client.get(
        "/issues", params={"page_size": 2, "page_token": first["next_page_token"]}, headers=headers
    ).json()

    assert len(first["issues"]) == 2
    assert first["next_page_token"] == "2"
    assert len(second["issues"]) == 1
    assert second["total_count"] == 3


def test_comments_and_attachments(client, headers, component_id):
    issue = file_issue(client, headers, component_id)

    created = client.post(f"/issues/{issue['id']}/comments", json={"content": "Seen on staging"}, headers=headers)
    assert created.status_code == 201

    comments = client.get(f"/issues/{issue['id']}/comments", headers=headers).json()
    assert [c["content"] for c in comments] == ["Seen on staging"]

    attachment = client.post(
        f"/issues/{issue['id']}/attachments",
        json={"filename": "trace.log", "content": "abc"},
        headers=headers,
    )
    assert attachment.status_code == 201
    assert attachment.json()["file_size"] == 3
    assert attachment.json()["file_url"].endswith(f"/files/{attachment.json()['id']}")


def test_query_failure_is_reported(app, client, headers):
    class BrokenRepository(InMemoryIssueRepository):
        async def execute(self, compiled, limit, offset=0, order=IssueOrder.NEWEST_FIRST):
            raise QueryExecutionException(details={"error": "connection reset"})

    app.dependency_overrides[get_issue_repository] = lambda: BrokenRepository()

    response = client.get("/issues", headers=headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "query execution failed"


# ========== Search & Views ==========

def test_search(client, headers, component_id):
    file_issue(client, headers, component_id, title="Checkout crash")
    file_issue(client, headers, component_id, title="Profile typo")

    assert client.get("/search", headers=headers).status_code == 400

    body = client.get("/search", params={"query": "checkout"}, headers=headers).json()
    assert [i["title"] for i in body["issues"]] == ["Checkout crash"]
    assert body["total_results"] == 1


def test_saved_views(client, headers):
    created = client.post("/views", json={"name": "My open", "query_string": "is:open assignee:me"}, headers=headers)
    assert created.status_code == 201
    view_id = created.json()["id"]

    listed = client.get("/views", headers=headers).json()
    assert [v["name"] for v in listed["views"]] == ["My open"]

    assert client.get(f"/views/{view_id}", headers=headers).status_code == 200

    stranger = {"X-User-ID": str(uuid4())}
    assert client.get(f"/views/{view_id}", headers=stranger).status_code == 403
    assert client.get(f"/views/{uuid4()}", headers=headers).status_code == 404


def test_team_view_visible_to_members(client, headers, store):
    team_id, member_id = uuid4(), uuid4()
    store.teams.add_member(team_id, member_id)

    created = client.post(
        "/views",
        json={"name": "Triage", "query_string": "is:open", "is_team_view": True, "team_id": str(team_id)},
        headers=headers,
    ).json()

    member = {"X-User-ID": str(member_id)}
    assert client.get(f"/views/{created['id']}", headers=member).status_code == 200
    assert [v["name"] for v in client.get("/views", headers=member).json()["views"]] == ["Triage"]


# ========== SLA ==========

def test_sla_target(client, headers):
    body = client.post("/sla/target", json={"priority": "P1", "severity": "S3"}, headers=headers).json()

    assert body["target_hours"] == 36
    assert body["description"].startswith("Target resolution time: 36 hours")


def test_sla_target_requires_priority(client, headers):
    assert client.post("/sla/target", json={"severity": "S3"}, headers=headers).status_code == 400


def test_sla_risk(client, headers, component_id):
    file_issue(client, headers, component_id, priority="P0", severity="S0")  # due in 2 hours
    file_issue(client, headers, component_id, priority="P4", severity="S3")

    body = client.get("/sla/risk", headers=headers).json()

    assert body["total_at_risk"] == 1
    assert body["threshold_hours"] == 4
    assert body["at_risk_issues"][0]["hours_remaining"] in (1, 2)


def test_sla_stats(client, headers, component_id):
    issue = file_issue(client, headers, component_id)
    client.patch(f"/issues/{issue['id']}", json={"status": "CLOSED"}, headers=headers)

    assert client.get("/sla/stats", headers=headers).status_code == 400

    body = client.get("/sla/stats", params={"component_id": str(component_id)}, headers=headers).json()
    assert body["total_issues"] == 1
    assert body["met_sla"] == 1
    assert body["sla_compliance_percentage"] == 100.0
    assert body["issues_by_priority"] == {"P2": 1}


def test_sla_stats_accepts_naive_start_date(client, headers, component_id):
    response = client.get(
        "/sla/stats",
        params={"component_id": str(component_id), "start_date": "2024-01-01T00:00:00"},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["start_date"].startswith("2024-01-01T00:00:00")
