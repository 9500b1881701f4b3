from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime, date

from models.enums import IssueSeverity, IssueStatus, IssuePriority
from schemas.base import CamelModel, RequestModel, UserSummary, parse_json_list


class RelatedLink(CamelModel):
    label: Optional[str] = None
    url: str


class IssueFields(RequestModel):
    """缺陷可写字段，表单提交时列表字段为 JSON 字符串"""

    @field_validator("related_links", "labels", mode="before", check_fields=False)
    @classmethod
    def parse_list(cls, value):
        return parse_json_list(value)


class IssueCreate(IssueFields):
    project_id: str = Field(..., description="项目ID")
    module_name: str = Field(..., description="模块名称")
    type: str = Field(..., description="缺陷类型名称")
    severity: IssueSeverity = Field(..., description="严重程度")
    description: str = Field(..., description="缺陷描述")
    status: IssueStatus = Field(IssueStatus.OPEN, description="缺陷状态")
    priority: IssuePriority = Field(IssuePriority.P2, description="优先级")
    assigned_to: Optional[str] = Field(None, description="指派人ID")
    related_links: List[RelatedLink] = Field(default_factory=list, description="相关链接")
    labels: List[str] = Field(default_factory=list, description="标签名称")
    epic_id: Optional[str] = None
    sprint_id: Optional[str] = None
    story_points: Optional[int] = None
    time_estimate: Optional[float] = None
    time_spent: Optional[float] = None
    due_date: Optional[date] = None


class IssueUpdate(IssueFields):
    """缺陷更新，只有实际传入的字段会被写入"""
    module_name: Optional[str] = None
    type: Optional[str] = None
    severity: Optional[IssueSeverity] = None
    status: Optional[IssueStatus] = None
    priority: Optional[IssuePriority] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    related_links: Optional[List[RelatedLink]] = None
    labels: Optional[List[str]] = None
    epic_id: Optional[str] = None
    sprint_id: Optional[str] = None
    story_points: Optional[int] = None
    time_estimate: Optional[float] = None
    time_spent: Optional[float] = None
    due_date: Optional[date] = None
    resolution: Optional[str] = None


# 缺陷更新字段白名单：JSON 字段 -> 列名；labels 走关联表，单独处理
ISSUE_UPDATE_FIELDS = {
    "moduleName": "module_name",
    "type": "type",
    "severity": "severity",
    "status": "status",
    "priority": "priority",
    "description": "description",
    "assignedTo": "assigned_to",
    "relatedLinks": "related_links",
    "epicId": "epic_id",
    "sprintId": "sprint_id",
    "storyPoints": "story_points",
    "timeEstimate": "time_estimate",
    "timeSpent": "time_spent",
    "dueDate": "due_date",
    "resolution": "resolution",
    "screenshots": "screenshots",
    "resolvedAt": "resolved_at",
}


class WatcherAdd(RequestModel):
    user_id: Optional[str] = Field(None, description="关注人ID，不传时为当前用户")


class IssueResponse(CamelModel):
    id: str
    bug_id: str
    project_id: str
    project_name: Optional[str] = None
    module_name: str
    type: str
    severity: IssueSeverity
    status: IssueStatus
    priority: IssuePriority
    description: str
    assigned_to: Optional[UserSummary] = None
    reported_by: Optional[UserSummary] = None
    screenshots: List[str] = Field(default_factory=list)
    related_links: List[RelatedLink] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    epic_id: Optional[str] = None
    sprint_id: Optional[str] = None
    story_points: Optional[int] = None
    time_estimate: Optional[float] = None
    time_spent: Optional[float] = None
    due_date: Optional[date] = None
    resolution: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    watchers: Optional[List[UserSummary]] = None

    @classmethod
    def from_issue(cls, issue, with_watchers: bool = False) -> "IssueResponse":
        """从 ORM 对象构建响应，展开项目名称、人员和标签"""
        return cls(
            id=issue.id,
            bug_id=issue.bug_id,
            project_id=issue.project_id,
            project_name=issue.project.name if issue.project else None,
            module_name=issue.module_name,
            type=issue.type,
            severity=issue.severity,
            status=issue.status,
            priority=issue.priority,
            description=issue.description,
            assigned_to=UserSummary.model_validate(issue.assignee) if issue.assignee else None,
            reported_by=UserSummary.model_validate(issue.reporter) if issue.reporter else None,
            screenshots=issue.screenshots or [],
            related_links=issue.related_links or [],
            labels=[label.name for label in issue.labels],
            epic_id=issue.epic_id,
            sprint_id=issue.sprint_id,
            story_points=issue.story_points,
            time_estimate=issue.time_estimate,
            time_spent=issue.time_spent,
            due_date=issue.due_date,
            resolution=issue.resolution,
            resolved_at=issue.resolved_at,
            created_at=issue.created_at,
            updated_at=issue.updated_at,
            watchers=[UserSummary.model_validate(user) for user in issue.watchers] if with_watchers else None,
        )
