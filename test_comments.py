"""评论与项目动态接口测试"""


def _comment(client, issue_id, headers, content="Looks reproducible"):
    response = client.post("/api/comments", json={"issueId": issue_id, "content": content}, headers=headers)
    assert response.status_code == 201
    return response.json()


def test_comments_ordered_oldest_first(client, project, issue_factory, qa_headers, qa_user):
    issue = issue_factory(project["id"])
    _comment(client, issue["id"], qa_headers, "first")
    _comment(client, issue["id"], qa_headers, "second")

    comments = client.get(f"/api/comments/issue/{issue['id']}", headers=qa_headers).json()
    assert [comment["content"] for comment in comments] == ["first", "second"]
    assert comments[0]["user"]["id"] == qa_user.id


def test_comment_on_unknown_issue(client, qa_headers):
    response = client.post("/api/comments", json={"issueId": "issue-1", "content": "x"}, headers=qa_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Issue not found"


def test_only_author_or_admin_can_modify(client, project, issue_factory, qa_headers, developer_headers, admin_headers):
    issue = issue_factory(project["id"])
    comment = _comment(client, issue["id"], qa_headers)

    edit = client.put(f"/api/comments/{comment['id']}", json={"content": "hijack"}, headers=developer_headers)
    assert edit.status_code == 403
    assert edit.json()["error"] == "Not authorized to edit this comment"

    delete = client.delete(f"/api/comments/{comment['id']}", headers=developer_headers)
    assert delete.status_code == 403
    assert delete.json()["error"] == "Not authorized to delete this comment"

    own = client.put(f"/api/comments/{comment['id']}", json={"content": "edited"}, headers=qa_headers)
    assert own.status_code == 200
    assert own.json()["content"] == "edited"

    removed = client.delete(f"/api/comments/{comment['id']}", headers=admin_headers)
    assert removed.status_code == 200
    assert client.get(f"/api/comments/issue/{issue['id']}", headers=qa_headers).json() == []


def test_post_activity(client, project, developer_headers, developer_user):
    response = client.post(
        "/api/activities",
        json={"projectId": project["id"], "action": "Deployed", "details": "v1.2 to staging"},
        headers=developer_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["userId"] == developer_user.id
    assert body["userName"] == developer_user.name

    latest = client.get(f"/api/activities/project/{project['id']}", headers=developer_headers).json()[0]
    assert latest["action"] == "Deployed"


def test_activity_for_unknown_project(client, qa_headers):
    response = client.post("/api/activities", json={"projectId": "project-9", "action": "x"}, headers=qa_headers)
    assert response.status_code == 404
