"""
后端 API 客户端
每个请求自动带上 Bearer 令牌；收到 401 时清除认证上下文并抛出 SessionExpired
"""
import json
import logging
from typing import Any, BinaryIO, Dict, Iterable, List, Optional, Tuple

import httpx

from client.auth_context import REASON_EXPIRED, AuthContext

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_API_PREFIX = "/api"

# (文件名, 文件对象或字节, MIME类型)
FileTuple = Tuple[str, Any, str]


class ApiError(Exception):
    """非 2xx 响应"""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(f"{status_code}: {message}")


class SessionExpired(ApiError):
    """令牌缺失、无效或过期，认证上下文已被清除"""


def _clean_params(params: Optional[dict]) -> Optional[dict]:
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


class ApiClient:
    """封装一个 httpx.Client，按资源分组提供接口"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        context: Optional[AuthContext] = None,
        http_client: Optional[httpx.Client] = None,
        api_prefix: str = DEFAULT_API_PREFIX,
        timeout: float = 10.0,
    ):
        self.context = context or AuthContext()
        self.api_prefix = api_prefix.rstrip("/")
        self._owns_client = http_client is None
        self.http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

        self.auth = AuthAPI(self)
        self.users = UsersAPI(self)
        self.projects = ProjectsAPI(self)
        self.issues = IssuesAPI(self)
        self.activities = ActivitiesAPI(self)
        self.comments = CommentsAPI(self)
        self.sprints = SprintsAPI(self)
        self.epics = EpicsAPI(self)
        self.labels = LabelsAPI(self)
        self.issue_types = IssueTypesAPI(self)

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def request(self, method: str, path: str, **kwargs) -> Any:
        """发送请求并返回解析后的 JSON"""
        headers = dict(kwargs.pop("headers", None) or {})
        if self.context.token:
            headers["Authorization"] = f"Bearer {self.context.token}"
        if "params" in kwargs:
            kwargs["params"] = _clean_params(kwargs["params"])

        response = self.http.request(method, f"{self.api_prefix}{path}", headers=headers, **kwargs)
        payload = self._parse(response)

        if response.status_code == 401:
            logger.info("会话已失效，清除认证信息")
            self.context.clear(REASON_EXPIRED)
            raise SessionExpired(401, self._error_message(payload, "Session expired"), payload)

        if response.is_error:
            raise ApiError(response.status_code, self._error_message(payload, response.reason_phrase), payload)
        return payload

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(payload: Any, default: str) -> str:
        if isinstance(payload, dict) and payload.get("error"):
            return str(payload["error"])
        return default or "Request failed"

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


class _Resource:
    def __init__(self, client: ApiClient):
        self.client = client


def _multipart(data: Dict[str, Any], files: Iterable[FileTuple], field: str) -> Tuple[dict, list]:
    """把字段转换为表单格式，列表和字典字段以 JSON 字符串提交"""
    form = {}
    for key, value in data.items():
        if value is None:
            continue
        form[key] = json.dumps(value) if isinstance(value, (list, dict)) else str(value)
    return form, [(field, file) for file in files]


class AuthAPI(_Resource):
    def login(self, email: str, password: str) -> dict:
        """登录成功后写入认证上下文"""
        result = self.client.post("/auth/login", {"email": email, "password": password})
        self.client.context.set_session(result["token"], result.get("user"))
        return result

    def register(self, **user_data) -> dict:
        return self.client.post("/auth/register", user_data)

    def me(self) -> dict:
        return self.client.get("/auth/me")

    def logout(self) -> None:
        self.client.context.clear()


class UsersAPI(_Resource):
    def list(self, role: Optional[str] = None, status: Optional[str] = None, search: Optional[str] = None) -> List[dict]:
        return self.client.get("/users", {"role": role, "status": status, "search": search})

    def get(self, user_id: str) -> dict:
        return self.client.get(f"/users/{user_id}")

    def create(self, **user_data) -> dict:
        return self.client.post("/users", user_data)

    def update(self, user_id: str, **changes) -> dict:
        return self.client.put(f"/users/{user_id}", changes)

    def delete(self, user_id: str) -> dict:
        return self.client.delete(f"/users/{user_id}")

    def update_profile_picture(self, user_id: str, filename: str, content: BinaryIO, content_type: str = "image/png") -> dict:
        return self.client.request(
            "PUT", f"/users/{user_id}/profile-picture",
            files={"profilePicture": (filename, content, content_type)},
        )


class ProjectsAPI(_Resource):
    def list(self, status: Optional[str] = None, search: Optional[str] = None) -> List[dict]:
        return self.client.get("/projects", {"status": status, "search": search})

    def get(self, project_id: str) -> dict:
        return self.client.get(f"/projects/{project_id}")

    def create(self, **project_data) -> dict:
        return self.client.post("/projects", project_data)

    def update(self, project_id: str, **changes) -> dict:
        return self.client.put(f"/projects/{project_id}", changes)

    def delete(self, project_id: str) -> dict:
        return self.client.delete(f"/projects/{project_id}")

    def add_member(self, project_id: str, user_id: str, role: str = "Member") -> dict:
        return self.client.post(f"/projects/{project_id}/members", {"userId": user_id, "role": role})

    def remove_member(self, project_id: str, user_id: str) -> dict:
        return self.client.delete(f"/projects/{project_id}/members/{user_id}")


class IssuesAPI(_Resource):
    def list(self, **filters) -> List[dict]:
        """支持 projectId、status、severity、type、search、sortBy、sortOrder"""
        return self.client.get("/issues", filters)

    def get(self, issue_id: str) -> dict:
        return self.client.get(f"/issues/{issue_id}")

    def create(self, files: Optional[List[FileTuple]] = None, **issue_data) -> dict:
        """带附件时以 multipart 提交"""
        if files:
            form, upload = _multipart(issue_data, files, "attachments")
            return self.client.request("POST", "/issues", data=form, files=upload)
        return self.client.post("/issues", issue_data)

    def update(self, issue_id: str, files: Optional[List[FileTuple]] = None, **changes) -> dict:
        if files:
            form, upload = _multipart(changes, files, "attachments")
            return self.client.request("PUT", f"/issues/{issue_id}", data=form, files=upload)
        return self.client.put(f"/issues/{issue_id}", changes)

    def delete(self, issue_id: str) -> dict:
        return self.client.delete(f"/issues/{issue_id}")

    def watchers(self, issue_id: str) -> List[dict]:
        return self.client.get(f"/issues/{issue_id}/watchers")

    def watch(self, issue_id: str, user_id: Optional[str] = None) -> List[dict]:
        return self.client.post(f"/issues/{issue_id}/watchers", {"userId": user_id} if user_id else {})

    def unwatch(self, issue_id: str, user_id: str) -> List[dict]:
        return self.client.delete(f"/issues/{issue_id}/watchers/{user_id}")


class ActivitiesAPI(_Resource):
    def by_project(self, project_id: str) -> List[dict]:
        return self.client.get(f"/activities/project/{project_id}")

    def create(self, project_id: str, action: str, details: Optional[str] = None) -> dict:
        return self.client.post("/activities", {"projectId": project_id, "action": action, "details": details})


class CommentsAPI(_Resource):
    def by_issue(self, issue_id: str) -> List[dict]:
        return self.client.get(f"/comments/issue/{issue_id}")

    def create(self, issue_id: str, content: str) -> dict:
        return self.client.post("/comments", {"issueId": issue_id, "content": content})

    def update(self, comment_id: str, content: str) -> dict:
        return self.client.put(f"/comments/{comment_id}", {"content": content})

    def delete(self, comment_id: str) -> dict:
        return self.client.delete(f"/comments/{comment_id}")


class SprintsAPI(_Resource):
    def by_project(self, project_id: str) -> List[dict]:
        return self.client.get(f"/sprints/project/{project_id}")

    def get(self, sprint_id: str) -> dict:
        return self.client.get(f"/sprints/{sprint_id}")

    def create(self, **sprint_data) -> dict:
        return self.client.post("/sprints", sprint_data)

    def update(self, sprint_id: str, **changes) -> dict:
        return self.client.put(f"/sprints/{sprint_id}", changes)

    def delete(self, sprint_id: str) -> dict:
        return self.client.delete(f"/sprints/{sprint_id}")


class EpicsAPI(_Resource):
    def by_project(self, project_id: str) -> List[dict]:
        return self.client.get(f"/epics/project/{project_id}")

    def get(self, epic_id: str) -> dict:
        return self.client.get(f"/epics/{epic_id}")

    def create(self, **epic_data) -> dict:
        return self.client.post("/epics", epic_data)

    def update(self, epic_id: str, **changes) -> dict:
        return self.client.put(f"/epics/{epic_id}", changes)

    def delete(self, epic_id: str) -> dict:
        return self.client.delete(f"/epics/{epic_id}")


class LabelsAPI(_Resource):
    def list(self) -> List[dict]:
        return self.client.get("/labels")

    def create(self, name: str, color: str, description: Optional[str] = None) -> dict:
        return self.client.post("/labels", {"name": name, "color": color, "description": description})

    def update(self, label_id: int, **changes) -> dict:
        return self.client.put(f"/labels/{label_id}", changes)

    def delete(self, label_id: int) -> dict:
        return self.client.delete(f"/labels/{label_id}")


class IssueTypesAPI(_Resource):
    def list(self) -> List[dict]:
        return self.client.get("/issue-types")

    def create(self, name: str, **type_data) -> dict:
        return self.client.post("/issue-types", {"name": name, **type_data})

    def update(self, type_id: int, **changes) -> dict:
        return self.client.put(f"/issue-types/{type_id}", changes)

    def delete(self, type_id: int) -> dict:
        return self.client.delete(f"/issue-types/{type_id}")
