"""缺陷服务模块

包含缺陷、附件和关注人相关的业务逻辑处理
"""
import logging
import re
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from models import (
    Activity, COMPLETED_ISSUE_STATUSES, Epic, Issue, IssueStatus, IssueType, Label, Project, Sprint, User
)
from models.base import utc_now
from schemas.issue import ISSUE_UPDATE_FIELDS, IssueCreate, IssueResponse
from utils.auth import CurrentUser
from utils.exceptions import ResourceNotFoundException, ValidationException
from utils.sparse_update import apply_sparse_update, reject_null_fields

logger = logging.getLogger(__name__)

# 允许排序的字段
SORTABLE_FIELDS = {
    "bug_id": Issue.bug_id,
    "module_name": Issue.module_name,
    "type": Issue.type,
    "severity": Issue.severity,
    "status": Issue.status,
    "created_at": Issue.created_at,
}

# 不允许显式置空的字段
NON_NULLABLE_FIELDS = ("moduleName", "type", "severity", "status", "priority", "description")

BUG_SEQUENCE_PATTERN = re.compile(r"-(\d+)$")


def bug_id_prefix(project_id: str) -> str:
    """缺陷编号前缀，取项目ID按 '-' 分割后的第二段"""
    parts = project_id.split("-")
    segment = parts[1] if len(parts) > 1 else parts[0]
    return f"BUG-{segment}-"


def format_bug_id(project_id: str, sequence: int) -> str:
    return f"{bug_id_prefix(project_id)}{sequence:03d}"


class IssueService:
    """缺陷服务类"""

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Issue).options(
            joinedload(Issue.project),
            joinedload(Issue.assignee),
            joinedload(Issue.reporter),
            selectinload(Issue.labels),
        )

    # ==================== 验证方法 ====================

    def validate_issue_exists(self, issue_id: str) -> Issue:
        """验证缺陷是否存在"""
        issue = self._base_query().filter(Issue.id == issue_id).first()
        if not issue:
            raise ResourceNotFoundException("Issue not found")
        return issue

    def validate_project_exists(self, project_id: str) -> Project:
        project = self.db.get(Project, project_id)
        if not project:
            raise ResourceNotFoundException("Project not found")
        return project

    def validate_issue_type(self, type_name: str) -> str:
        """缺陷类型必须是已存在的类型名称，返回规范写法"""
        issue_type = (
            self.db.query(IssueType)
            .filter(func.lower(IssueType.name) == type_name.lower())
            .first()
        )
        if not issue_type:
            raise ValidationException(f"Unknown issue type: {type_name}")
        return issue_type.name

    def resolve_labels(self, names: Optional[List[str]]) -> List[Label]:
        """根据名称查找标签，有不存在的名称时报错"""
        names = list(dict.fromkeys(name.strip() for name in (names or []) if name and name.strip()))
        if not names:
            return []
        labels = self.db.query(Label).filter(Label.name.in_(names)).all()
        found = {label.name for label in labels}
        unknown = [name for name in names if name not in found]
        if unknown:
            raise ValidationException(f"Unknown labels: {', '.join(unknown)}")
        return labels

    def validate_references(self, project_id: str, payload: dict) -> None:
        """校验指派人、史诗和迭代引用"""
        assigned_to = payload.get("assignedTo")
        if assigned_to and not self.db.get(User, assigned_to):
            raise ValidationException("Assigned user not found")

        epic_id = payload.get("epicId")
        if epic_id:
            epic = self.db.get(Epic, epic_id)
            if not epic or epic.project_id != project_id:
                raise ValidationException("Epic not found in this project")

        sprint_id = payload.get("sprintId")
        if sprint_id:
            sprint = self.db.get(Sprint, sprint_id)
            if not sprint or sprint.project_id != project_id:
                raise ValidationException("Sprint not found in this project")

    def next_bug_id(self, project_id: str) -> str:
        """下一个缺陷编号，序号为项目内已有最大序号加一，删除缺陷后也不会重复"""
        prefix = bug_id_prefix(project_id)
        existing = (
            self.db.query(Issue.bug_id)
            .filter(Issue.project_id == project_id, Issue.bug_id.like(f"{prefix}%"))
            .all()
        )
        highest = 0
        for (bug_id,) in existing:
            match = BUG_SEQUENCE_PATTERN.search(bug_id)
            if match:
                highest = max(highest, int(match.group(1)))
        return format_bug_id(project_id, highest + 1)

    # ==================== 业务方法 ====================

    def list_issues(
        self,
        project_id: Optional[str] = None,
        status: Optional[str] = None,
        severity: Optional[str] = None,
        type: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> List[IssueResponse]:
        query = self._base_query()

        if project_id:
            query = query.filter(Issue.project_id == project_id)
        if status:
            query = query.filter(Issue.status == status)
        if severity:
            query = query.filter(Issue.severity == severity)
        if type:
            query = query.filter(Issue.type == type)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Issue.bug_id.ilike(pattern),
                Issue.module_name.ilike(pattern),
                Issue.description.ilike(pattern),
            ))

        sort_column = SORTABLE_FIELDS.get(sort_by, Issue.created_at)
        order = sort_column.asc() if (sort_order or "").lower() == "asc" else sort_column.desc()
        issues = query.order_by(order, Issue.id).all()
        return [IssueResponse.from_issue(issue) for issue in issues]

    def get_issue(self, issue_id: str) -> IssueResponse:
        issue = self.validate_issue_exists(issue_id)
        return IssueResponse.from_issue(issue, with_watchers=True)

    def create_issue(self, data: IssueCreate, screenshots: List[str], current_user: CurrentUser) -> IssueResponse:
        """创建缺陷，编号生成、写入和活动日志在同一事务中完成"""
        self.validate_project_exists(data.project_id)
        type_name = self.validate_issue_type(data.type)
        labels = self.resolve_labels(data.labels)
        self.validate_references(data.project_id, data.model_dump(by_alias=True))

        try:
            bug_id = self.next_bug_id(data.project_id)
            issue = Issue(
                bug_id=bug_id,
                project_id=data.project_id,
                module_name=data.module_name,
                type=type_name,
                severity=data.severity,
                status=data.status,
                priority=data.priority,
                description=data.description,
                assigned_to=data.assigned_to,
                reported_by=current_user.id,
                screenshots=screenshots,
                related_links=[link.model_dump() for link in data.related_links],
                epic_id=data.epic_id,
                sprint_id=data.sprint_id,
                story_points=data.story_points,
                time_estimate=data.time_estimate,
                time_spent=data.time_spent,
                due_date=data.due_date,
                resolved_at=utc_now() if data.status in COMPLETED_ISSUE_STATUSES else None,
            )
            issue.labels = labels
            self.db.add(issue)
            self.db.add(Activity(
                project_id=data.project_id,
                user_id=current_user.id,
                action="Issue Created",
                details=f"Created issue {bug_id}: {data.module_name}",
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"缺陷创建成功: {issue.id} ({bug_id})，附件 {len(screenshots)} 个")
        return IssueResponse.from_issue(self.validate_issue_exists(issue.id))

    def update_issue(
        self,
        issue_id: str,
        payload: dict,
        screenshots: Optional[List[str]],
        current_user: CurrentUser,
    ) -> IssueResponse:
        """稀疏更新缺陷，有新上传的附件时整体替换截图列表"""
        issue = self.validate_issue_exists(issue_id)
        payload = dict(payload)

        reject_null_fields(payload, NON_NULLABLE_FIELDS)

        if "type" in payload:
            payload["type"] = self.validate_issue_type(payload["type"])
        self.validate_references(issue.project_id, payload)

        labels_changed = "labels" in payload
        labels = self.resolve_labels(payload.pop("labels", None)) if labels_changed else None

        if screenshots:
            payload["screenshots"] = screenshots

        new_status = payload.get("status")
        if new_status is not None:
            if new_status in COMPLETED_ISSUE_STATUSES and issue.status not in COMPLETED_ISSUE_STATUSES:
                payload["resolvedAt"] = utc_now()
            elif new_status in (IssueStatus.OPEN, IssueStatus.REOPEN, IssueStatus.IN_PROGRESS):
                payload["resolvedAt"] = None

        try:
            apply_sparse_update(
                self.db, Issue, issue_id, payload, ISSUE_UPDATE_FIELDS,
                not_found_message="Issue not found",
                allow_empty=labels_changed,
            )
            if labels_changed:
                issue.labels = labels
            self.db.add(Activity(
                project_id=issue.project_id,
                user_id=current_user.id,
                action="Issue Updated",
                details=f"Updated issue {issue.bug_id}",
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.expire_all()
        return IssueResponse.from_issue(self.validate_issue_exists(issue_id))

    def delete_issue(self, issue_id: str, current_user: CurrentUser) -> None:
        """删除缺陷，评论、关注人和标签关联级联删除"""
        issue = self.validate_issue_exists(issue_id)
        project_id, bug_id = issue.project_id, issue.bug_id
        try:
            self.db.delete(issue)
            self.db.add(Activity(
                project_id=project_id,
                user_id=current_user.id,
                action="Issue Deleted",
                details=f"Deleted issue {bug_id}",
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"缺陷已删除: {issue_id} ({bug_id})")

    # ==================== 关注人 ====================

    def list_watchers(self, issue_id: str) -> List[User]:
        return list(self.validate_issue_exists(issue_id).watchers)

    def add_watcher(self, issue_id: str, user_id: str) -> List[User]:
        """添加关注人，已关注时不做修改"""
        issue = self.validate_issue_exists(issue_id)
        user = self.db.get(User, user_id)
        if not user:
            raise ResourceNotFoundException("User not found")
        if user not in issue.watchers:
            issue.watchers.append(user)
            self.db.commit()
        return list(issue.watchers)

    def remove_watcher(self, issue_id: str, user_id: str) -> List[User]:
        issue = self.validate_issue_exists(issue_id)
        issue.watchers = [user for user in issue.watchers if user.id != user_id]
        self.db.commit()
        return list(issue.watchers)
