"""缺陷接口测试"""
import io
from pathlib import Path

from sqlalchemy import func, select

from config.settings import settings
from models import Comment, issue_watchers
from utils.status_codes import FILE_ERROR


def test_create_issue_assigns_bug_id(client, project, issue_factory, qa_user, admin_headers):
    issue = issue_factory(project["id"], labels=["bug", "priority:high"])
    sequence = project["id"].split("-")[1]

    assert issue["bugId"] == f"BUG-{sequence}-001"
    assert issue["status"] == "Open"
    assert issue["priority"] == "P2"
    assert issue["reportedBy"]["id"] == qa_user.id
    assert issue["assignedTo"] is None
    assert issue["projectName"] == project["name"]
    assert issue["labels"] == ["bug", "priority:high"]

    activities = client.get(f"/api/activities/project/{project['id']}", headers=admin_headers).json()
    assert activities[0]["action"] == "Issue Created"
    assert issue["bugId"] in activities[0]["details"]


def test_bug_ids_never_reused_after_delete(client, project, issue_factory, qa_headers):
    first = issue_factory(project["id"])
    second = issue_factory(project["id"])
    assert second["bugId"].endswith("-002")

    assert client.delete(f"/api/issues/{first['id']}", headers=qa_headers).status_code == 200
    third = issue_factory(project["id"])
    assert third["bugId"].endswith("-003")


def test_create_issue_validation(client, project, qa_headers):
    missing = client.post("/api/issues", json={"projectId": project["id"], "type": "Bug"}, headers=qa_headers)
    assert missing.status_code == 400
    assert missing.json()["error"].startswith("Missing required fields")
    assert "moduleName" in missing.json()["error"]

    unknown_type = client.post("/api/issues", json={
        "projectId": project["id"], "moduleName": "UI", "type": "Meteor",
        "severity": "Low", "description": "x",
    }, headers=qa_headers)
    assert unknown_type.status_code == 400
    assert unknown_type.json()["error"] == "Unknown issue type: Meteor"

    unknown_project = client.post("/api/issues", json={
        "projectId": "project-404", "moduleName": "UI", "type": "Bug",
        "severity": "Low", "description": "x",
    }, headers=qa_headers)
    assert unknown_project.status_code == 404


def test_issue_type_is_case_insensitive(client, project, issue_factory):
    issue = issue_factory(project["id"], type="enhancement")
    assert issue["type"] == "Enhancement"


def test_partial_status_update(client, project, issue_factory, qa_headers):
    issue = issue_factory(project["id"], severity="Critical")

    response = client.put(f"/api/issues/{issue['id']}", json={"status": "Fixed"}, headers=qa_headers)
    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "Fixed"
    assert updated["severity"] == "Critical"
    assert updated["description"] == issue["description"]
    assert updated["updatedAt"] > issue["updatedAt"]
    assert updated["resolvedAt"] is not None

    reopened = client.put(f"/api/issues/{issue['id']}", json={"status": "Reopen"}, headers=qa_headers).json()
    assert reopened["resolvedAt"] is None


def test_empty_issue_update(client, project, issue_factory, qa_headers):
    issue = issue_factory(project["id"])
    response = client.put(f"/api/issues/{issue['id']}", json={}, headers=qa_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "No fields to update"

    current = client.get(f"/api/issues/{issue['id']}", headers=qa_headers).json()
    assert current["updatedAt"] == issue["updatedAt"]


def test_null_on_required_field_rejected(client, project, issue_factory, qa_headers):
    issue = issue_factory(project["id"])
    response = client.put(f"/api/issues/{issue['id']}", json={"severity": None}, headers=qa_headers)
    assert response.status_code == 400


def test_assign_and_unassign(client, project, issue_factory, qa_headers, developer_user):
    issue = issue_factory(project["id"])
    assigned = client.put(
        f"/api/issues/{issue['id']}", json={"assignedTo": developer_user.id}, headers=qa_headers
    ).json()
    assert assigned["assignedTo"]["id"] == developer_user.id

    unassigned = client.put(f"/api/issues/{issue['id']}", json={"assignedTo": None}, headers=qa_headers).json()
    assert unassigned["assignedTo"] is None


def test_replace_labels(client, project, issue_factory, qa_headers):
    issue = issue_factory(project["id"], labels=["bug"])
    updated = client.put(
        f"/api/issues/{issue['id']}", json={"labels": ["question"]}, headers=qa_headers
    ).json()
    assert updated["labels"] == ["question"]

    cleared = client.put(f"/api/issues/{issue['id']}", json={"labels": []}, headers=qa_headers).json()
    assert cleared["labels"] == []

    unknown = client.put(f"/api/issues/{issue['id']}", json={"labels": ["nope"]}, headers=qa_headers)
    assert unknown.status_code == 400
    assert unknown.json()["error"] == "Unknown labels: nope"


def test_list_filters_and_sorting(client, project, issue_factory, qa_headers):
    issue_factory(project["id"], severity="Low", moduleName="Alpha")
    issue_factory(project["id"], severity="High", moduleName="Beta")

    high = client.get("/api/issues", params={"projectId": project["id"], "severity": "High"}, headers=qa_headers).json()
    assert [issue["moduleName"] for issue in high] == ["Beta"]

    ordered = client.get(
        "/api/issues", params={"sortBy": "module_name", "sortOrder": "asc"}, headers=qa_headers
    ).json()
    assert [issue["moduleName"] for issue in ordered] == ["Alpha", "Beta"]

    searched = client.get("/api/issues", params={"search": "alp"}, headers=qa_headers).json()
    assert len(searched) == 1


def test_multipart_create_with_screenshot(client, project, qa_headers):
    response = client.post(
        "/api/issues",
        data={
            "projectId": project["id"],
            "moduleName": "Upload",
            "type": "Bug",
            "severity": "Medium",
            "description": "Broken image",
            "labels": '["bug"]',
        },
        files=[("attachments", ("shot.png", io.BytesIO(b"\x89PNG fake"), "image/png"))],
        headers=qa_headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert len(body["screenshots"]) == 1
    assert body["screenshots"][0].startswith("/uploads/")
    assert body["labels"] == ["bug"]

    served = client.get(body["screenshots"][0])
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake"


def test_disallowed_attachment_type(client, project, qa_headers):
    response = client.post(
        "/api/issues",
        data={
            "projectId": project["id"], "moduleName": "Upload", "type": "Bug",
            "severity": "Medium", "description": "exe",
        },
        files=[("attachments", ("tool.exe", io.BytesIO(b"MZ"), "application/octet-stream"))],
        headers=qa_headers,
    )
    assert response.status_code == 400


def test_watchers(client, project, issue_factory, qa_headers, qa_user, developer_user):
    issue = issue_factory(project["id"])

    watchers = client.post(f"/api/issues/{issue['id']}/watchers", headers=qa_headers)
    assert watchers.status_code == 201
    assert [user["id"] for user in watchers.json()] == [qa_user.id]

    again = client.post(
        f"/api/issues/{issue['id']}/watchers", json={"userId": developer_user.id}, headers=qa_headers
    ).json()
    assert {user["id"] for user in again} == {qa_user.id, developer_user.id}

    detail = client.get(f"/api/issues/{issue['id']}", headers=qa_headers).json()
    assert len(detail["watchers"]) == 2

    remaining = client.delete(f"/api/issues/{issue['id']}/watchers/{qa_user.id}", headers=qa_headers).json()
    assert [user["id"] for user in remaining] == [developer_user.id]

    unknown = client.post(f"/api/issues/{issue['id']}/watchers", json={"userId": "user-0"}, headers=qa_headers)
    assert unknown.status_code == 404


def test_delete_issue_cascades_comments(client, project, issue_factory, qa_headers, db_session):
    issue = issue_factory(project["id"])
    client.post("/api/comments", json={"issueId": issue["id"], "content": "first"}, headers=qa_headers)
    assert client.post(f"/api/issues/{issue['id']}/watchers", headers=qa_headers).status_code == 201
    assert db_session.execute(select(func.count()).select_from(issue_watchers)).scalar() == 1

    response = client.delete(f"/api/issues/{issue['id']}", headers=qa_headers)
    assert response.json() == {"message": "Issue deleted successfully"}
    assert client.get(f"/api/issues/{issue['id']}", headers=qa_headers).status_code == 404

    db_session.expire_all()
    assert db_session.query(Comment).count() == 0
    assert db_session.execute(select(func.count()).select_from(issue_watchers)).scalar() == 0


def _uploaded_files():
    return set(Path(settings.UPLOAD_DIR).glob("*")) if Path(settings.UPLOAD_DIR).exists() else set()


def _issue_form(project_id):
    return {
        "projectId": project_id, "moduleName": "Upload", "type": "Bug",
        "severity": "Medium", "description": "Broken image",
    }


def test_failed_create_removes_saved_screenshots(client, qa_headers):
    before = _uploaded_files()
    response = client.post(
        "/api/issues",
        data=_issue_form("project-nope"),
        files=[("attachments", ("shot.png", io.BytesIO(b"\x89PNG fake"), "image/png"))],
        headers=qa_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Project not found"
    assert _uploaded_files() == before


def test_failed_update_removes_saved_screenshots(client, qa_headers):
    before = _uploaded_files()
    response = client.put(
        "/api/issues/issue-nope",
        data={"status": "Fixed"},
        files=[("attachments", ("shot.png", io.BytesIO(b"\x89PNG fake"), "image/png"))],
        headers=qa_headers,
    )
    assert response.status_code == 404
    assert _uploaded_files() == before


def test_oversized_file_in_batch_writes_nothing(client, project, qa_headers, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 16)
    before = _uploaded_files()
    response = client.post(
        "/api/issues",
        data=_issue_form(project["id"]),
        files=[
            ("attachments", ("small.png", io.BytesIO(b"tiny"), "image/png")),
            ("attachments", ("large.png", io.BytesIO(b"x" * 64), "image/png")),
        ],
        headers=qa_headers,
    )
    assert response.status_code == 413
    assert response.json()["code"] == FILE_ERROR
    assert _uploaded_files() == before
    assert client.get("/api/issues", headers=qa_headers).json() == []
