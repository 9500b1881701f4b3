"""API 客户端测试，通过 TestClient 直连应用"""
import pytest

from client import ApiClient, ApiError, AuthContext, SessionExpired
from client.auth_context import REASON_EXPIRED, REASON_LOGOUT
from conftest import TEST_PASSWORD


@pytest.fixture
def api(client):
    return ApiClient(http_client=client)


def test_login_stores_session_and_sends_token(api, qa_user):
    api.auth.login(qa_user.email, TEST_PASSWORD)

    assert api.context.is_authenticated
    assert api.context.current_user["email"] == qa_user.email
    assert api.auth.me()["id"] == qa_user.id


def test_unauthorized_response_clears_session(api, qa_user):
    events = []
    api.context.subscribe(events.append)
    api.auth.login(qa_user.email, TEST_PASSWORD)

    api.context.set_session("broken-token", api.context.current_user)
    with pytest.raises(SessionExpired) as exc_info:
        api.labels.list()

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Invalid or expired token"
    assert not api.context.is_authenticated
    assert api.context.current_user is None
    assert events == [REASON_EXPIRED]


def test_other_errors_raise_api_error(api, developer_user):
    api.auth.login(developer_user.email, TEST_PASSWORD)

    with pytest.raises(ApiError) as exc_info:
        api.projects.create(name="Forbidden")

    assert not isinstance(exc_info.value, SessionExpired)
    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Insufficient permissions"
    assert api.context.is_authenticated


def test_resource_groups_round_trip(api, admin_user, qa_user):
    api.auth.login(admin_user.email, TEST_PASSWORD)

    project = api.projects.create(name="Mobile App", members=[{"userId": qa_user.id}])
    issue = api.issues.create(
        projectId=project["id"], moduleName="Login", type="Bug", severity="Low", description="Typo",
    )
    api.comments.create(issue["id"], "Confirmed")
    api.issues.update(issue["id"], status="Closed")

    assert api.projects.get(project["id"])["progress"] == 100
    assert [c["content"] for c in api.comments.by_issue(issue["id"])] == ["Confirmed"]
    assert api.issues.list(projectId=project["id"], status="Closed")[0]["id"] == issue["id"]
    assert api.users.list(role="QA")[0]["id"] == qa_user.id


def test_logout_notifies_and_unsubscribe():
    context = AuthContext(token="t", current_user={"id": "user-1"})
    events = []
    unsubscribe = context.subscribe(events.append)

    context.clear()
    assert events == [REASON_LOGOUT]

    context.set_session("t2")
    unsubscribe()
    context.clear()
    assert events == [REASON_LOGOUT]


def test_clear_without_session_does_not_notify():
    context = AuthContext()
    events = []
    context.subscribe(events.append)
    context.clear()
    assert events == []
