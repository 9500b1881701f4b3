"""项目接口测试"""
from sqlalchemy import func, select

from models import Activity, Comment, Issue, Project, project_members
from utils.status_codes import VALIDATION_ERROR


def _member_rows(db):
    return db.execute(select(func.count()).select_from(project_members)).scalar()


def test_create_project_records_activity(client, project, admin_headers, admin_user):
    assert project["status"] == "Planning"
    assert project["createdBy"] == admin_user.id
    assert project["issueCount"] == 0
    assert project["progress"] == 0
    assert [member["projectRole"] for member in project["members"]] == ["Lead"]

    activities = client.get(f"/api/activities/project/{project['id']}", headers=admin_headers).json()
    assert activities[0]["action"] == "Project Created"
    assert activities[0]["userName"] == admin_user.name


def test_developer_cannot_create_project(client, developer_headers):
    response = client.post("/api/projects", json={"name": "Nope"}, headers=developer_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Insufficient permissions"


def test_project_missing_name(client, qa_headers):
    response = client.post("/api/projects", json={"description": "no name"}, headers=qa_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: name"
    assert response.json()["details"] == {"fields": ["name"]}


def test_visibility_is_scoped_to_membership(client, project, admin_headers, qa_headers, developer_headers, developer_user):
    assert [p["id"] for p in client.get("/api/projects", headers=admin_headers).json()] == [project["id"]]
    assert [p["id"] for p in client.get("/api/projects", headers=qa_headers).json()] == [project["id"]]
    assert client.get("/api/projects", headers=developer_headers).json() == []

    denied = client.get(f"/api/projects/{project['id']}", headers=developer_headers)
    assert denied.status_code == 403
    assert denied.json()["error"].startswith("Access denied")

    added = client.post(
        f"/api/projects/{project['id']}/members",
        json={"userId": developer_user.id},
        headers=qa_headers,
    )
    assert added.status_code == 201

    assert client.get(f"/api/projects/{project['id']}", headers=developer_headers).status_code == 200
    assert len(client.get("/api/projects", headers=developer_headers).json()) == 1

    client.delete(f"/api/projects/{project['id']}/members/{developer_user.id}", headers=qa_headers)
    assert client.get(f"/api/projects/{project['id']}", headers=developer_headers).status_code == 403


def test_add_member_twice_is_noop(client, project, admin_headers, developer_user):
    for _ in range(2):
        response = client.post(
            f"/api/projects/{project['id']}/members",
            json={"userId": developer_user.id, "role": "Member"},
            headers=admin_headers,
        )
        assert response.status_code == 201
    members = client.get(f"/api/projects/{project['id']}", headers=admin_headers).json()["members"]
    assert [m["id"] for m in members].count(developer_user.id) == 1


def test_add_unknown_member(client, project, admin_headers):
    response = client.post(
        f"/api/projects/{project['id']}/members", json={"userId": "user-0"}, headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"


def test_search_and_status_filter(client, project, admin_headers):
    assert len(client.get("/api/projects", params={"search": "acme"}, headers=admin_headers).json()) == 1
    assert client.get("/api/projects", params={"search": "zzz"}, headers=admin_headers).json() == []
    assert client.get("/api/projects", params={"status": "Completed"}, headers=admin_headers).json() == []


def test_update_project_is_sparse(client, project, qa_headers):
    response = client.put(f"/api/projects/{project['id']}", json={"status": "In Progress"}, headers=qa_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "In Progress"
    assert body["name"] == project["name"]
    assert body["clientName"] == "Acme"

    cleared = client.put(f"/api/projects/{project['id']}", json={"description": None}, headers=qa_headers).json()
    assert cleared["description"] is None
    assert cleared["status"] == "In Progress"


def test_empty_update_is_rejected(client, project, qa_headers, admin_headers):
    response = client.put(f"/api/projects/{project['id']}", json={}, headers=qa_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "No fields to update"

    unchanged = client.get(f"/api/projects/{project['id']}", headers=admin_headers).json()
    assert unchanged["updatedAt"] == project["updatedAt"]


def test_null_name_or_status_is_rejected(client, project, qa_headers, admin_headers):
    for body, field in (({"name": ""}, "name"), ({"name": None}, "name"), ({"status": None}, "status")):
        response = client.put(f"/api/projects/{project['id']}", json=body, headers=qa_headers)
        assert response.status_code == 400
        assert response.json()["error"] == f"{field} cannot be null"
        assert response.json()["code"] == VALIDATION_ERROR
        assert response.json()["details"] == {"fields": [field]}

    unchanged = client.get(f"/api/projects/{project['id']}", headers=admin_headers).json()
    assert unchanged["name"] == project["name"]
    assert unchanged["status"] == "Planning"


def test_update_unknown_project(client, qa_headers):
    response = client.put("/api/projects/project-1", json={"name": "x"}, headers=qa_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Project not found"


def test_progress_counts_fixed_and_closed(client, project, admin_headers, qa_headers, issue_factory):
    issues = [issue_factory(project["id"]) for _ in range(3)]
    client.put(f"/api/issues/{issues[0]['id']}", json={"status": "Fixed"}, headers=qa_headers)
    client.put(f"/api/issues/{issues[1]['id']}", json={"status": "Closed"}, headers=qa_headers)

    body = client.get(f"/api/projects/{project['id']}", headers=admin_headers).json()
    assert body["issueCount"] == 3
    assert body["progress"] == 67


def test_only_admin_deletes_and_cascade(
    client, project, qa_headers, admin_headers, issue_factory, db_session, developer_user
):
    issue = issue_factory(project["id"])
    client.post("/api/comments", json={"issueId": issue["id"], "content": "seen"}, headers=qa_headers)
    client.post(f"/api/projects/{project['id']}/members", json={"userId": developer_user.id}, headers=admin_headers)
    assert _member_rows(db_session) == 2

    assert client.delete(f"/api/projects/{project['id']}", headers=qa_headers).status_code == 403

    response = client.delete(f"/api/projects/{project['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Project deleted successfully"}

    db_session.expire_all()
    assert db_session.get(Project, project["id"]) is None
    assert db_session.query(Issue).count() == 0
    assert db_session.query(Comment).count() == 0
    assert db_session.query(Activity).count() == 0
    assert _member_rows(db_session) == 0
    assert client.get(f"/api/projects/{project['id']}", headers=admin_headers).status_code == 404
