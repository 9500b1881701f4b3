"""用户管理接口测试"""
import io

from conftest import TEST_PASSWORD


def test_list_and_filter_users(client, admin_user, qa_user, developer_user, developer_headers):
    users = client.get("/api/users", headers=developer_headers).json()
    assert {user["email"] for user in users} == {admin_user.email, qa_user.email, developer_user.email}

    qa_only = client.get("/api/users", params={"role": "QA"}, headers=developer_headers).json()
    assert [user["id"] for user in qa_only] == [qa_user.id]

    searched = client.get("/api/users", params={"search": "quinn"}, headers=developer_headers).json()
    assert [user["id"] for user in searched] == [qa_user.id]


def test_create_user_admin_only(client, admin_headers, qa_headers):
    payload = {"name": "Tess Tester", "email": "tess@test.com", "password": "pw", "role": "QA"}
    assert client.post("/api/users", json=payload, headers=qa_headers).status_code == 403

    response = client.post("/api/users", json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["role"] == "QA"

    assert client.post("/api/users", json=payload, headers=admin_headers).status_code == 409


def test_update_user_rehashes_password(client, admin_headers, developer_user):
    response = client.put(
        f"/api/users/{developer_user.id}",
        json={"department": "Platform", "password": "fresh-pass"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["department"] == "Platform"
    assert body["name"] == developer_user.name

    old = client.post("/api/auth/login", json={"email": developer_user.email, "password": TEST_PASSWORD})
    new = client.post("/api/auth/login", json={"email": developer_user.email, "password": "fresh-pass"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_update_user_duplicate_email(client, admin_headers, developer_user, qa_user):
    response = client.put(f"/api/users/{developer_user.id}", json={"email": qa_user.email}, headers=admin_headers)
    assert response.status_code == 409


def test_empty_user_update(client, admin_headers, developer_user):
    response = client.put(f"/api/users/{developer_user.id}", json={}, headers=admin_headers)
    assert response.status_code == 400


def test_cannot_delete_self(client, admin_user, admin_headers, developer_user):
    response = client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete your own account"

    assert client.delete(f"/api/users/{developer_user.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/users/{developer_user.id}", headers=admin_headers).status_code == 404


def test_deleting_assignee_keeps_issue(client, project, admin_headers, qa_headers, developer_user, issue_factory):
    issue = issue_factory(project["id"], assignedTo=developer_user.id)
    client.delete(f"/api/users/{developer_user.id}", headers=admin_headers)

    remaining = client.get(f"/api/issues/{issue['id']}", headers=qa_headers)
    assert remaining.status_code == 200
    assert remaining.json()["assignedTo"] is None


def test_profile_picture_upload(client, developer_user, developer_headers, qa_user):
    image = ("avatar.png", io.BytesIO(b"\x89PNG avatar"), "image/png")

    response = client.put(
        f"/api/users/{developer_user.id}/profile-picture",
        files={"profilePicture": image},
        headers=developer_headers,
    )
    assert response.status_code == 200
    assert response.json()["avatar"].startswith("/uploads/")

    forbidden = client.put(
        f"/api/users/{qa_user.id}/profile-picture",
        files={"profilePicture": ("a.png", io.BytesIO(b"x"), "image/png")},
        headers=developer_headers,
    )
    assert forbidden.status_code == 403
