"""项目服务模块

包含项目及项目成员相关的业务逻辑处理
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session, selectinload

from models import (
    Activity, COMPLETED_ISSUE_STATUSES, Issue, Project, User, project_members
)
from schemas.project import (
    MemberAdd, PROJECT_UPDATE_FIELDS, ProjectCreate, ProjectMemberResponse, ProjectResponse
)
from utils.auth import CurrentUser
from utils.exceptions import PermissionException, ResourceNotFoundException
from utils.sparse_update import apply_sparse_update

logger = logging.getLogger(__name__)


def calculate_progress(total: int, completed: int) -> int:
    """完成百分比，四舍五入取整，没有缺陷时为 0"""
    if not total:
        return 0
    return int(round(100 * completed / total))


class ProjectService:
    """项目服务类"""

    def __init__(self, db: Session):
        self.db = db

    # ==================== 验证方法 ====================

    def validate_project_exists(self, project_id: str) -> Project:
        """验证项目是否存在"""
        project = (
            self.db.query(Project)
            .options(selectinload(Project.members))
            .filter(Project.id == project_id)
            .first()
        )
        if not project:
            raise ResourceNotFoundException("Project not found")
        return project

    def validate_user_exists(self, user_id: str) -> User:
        """验证用户是否存在"""
        user = self.db.get(User, user_id)
        if not user:
            raise ResourceNotFoundException("User not found")
        return user

    def is_member(self, project_id: str, user_id: str) -> bool:
        row = self.db.execute(
            select(project_members.c.user_id).where(
                project_members.c.project_id == project_id,
                project_members.c.user_id == user_id,
            )
        ).first()
        return row is not None

    def check_project_access(self, project_id: str, current_user: CurrentUser) -> None:
        """非管理员只能访问自己参与的项目"""
        if current_user.is_admin:
            return
        if not self.is_member(project_id, current_user.id):
            raise PermissionException(
                "Access denied. You can only view projects you are assigned to as a member."
            )

    # ==================== 统计方法 ====================

    def _issue_stats(self, project_ids: List[str]) -> Dict[str, Tuple[int, int]]:
        """按项目统计缺陷总数和已完成数，一次查询"""
        if not project_ids:
            return {}
        completed = func.sum(case((Issue.status.in_(COMPLETED_ISSUE_STATUSES), 1), else_=0))
        rows = (
            self.db.query(Issue.project_id, func.count(Issue.id), completed)
            .filter(Issue.project_id.in_(project_ids))
            .group_by(Issue.project_id)
            .all()
        )
        return {project_id: (total, int(done or 0)) for project_id, total, done in rows}

    def _member_roles(self, project_ids: List[str]) -> Dict[Tuple[str, str], str]:
        """项目内角色，键为 (项目ID, 用户ID)"""
        if not project_ids:
            return {}
        rows = self.db.execute(
            select(project_members.c.project_id, project_members.c.user_id, project_members.c.role)
            .where(project_members.c.project_id.in_(project_ids))
        ).all()
        return {(project_id, user_id): role for project_id, user_id, role in rows}

    def build_responses(self, projects: Iterable[Project]) -> List[ProjectResponse]:
        """组装项目响应，成员已预加载，统计和角色各一次查询"""
        projects = list(projects)
        project_ids = [project.id for project in projects]
        stats = self._issue_stats(project_ids)
        roles = self._member_roles(project_ids)

        responses = []
        for project in projects:
            total, completed = stats.get(project.id, (0, 0))
            members = [
                ProjectMemberResponse(
                    id=member.id,
                    name=member.name,
                    email=member.email,
                    role=member.role,
                    avatar=member.avatar,
                    project_role=roles.get((project.id, member.id)),
                )
                for member in sorted(project.members, key=lambda user: user.name or "")
            ]
            responses.append(ProjectResponse(
                id=project.id,
                name=project.name,
                description=project.description,
                client_name=project.client_name,
                start_date=project.start_date,
                end_date=project.end_date,
                status=project.status,
                created_by=project.created_by,
                created_at=project.created_at,
                updated_at=project.updated_at,
                members=members,
                issue_count=total,
                progress=calculate_progress(total, completed),
            ))
        return responses

    # ==================== 业务方法 ====================

    def list_projects(
        self,
        current_user: CurrentUser,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[ProjectResponse]:
        """项目列表，管理员可见全部，其他角色只能看到自己参与的项目"""
        query = self.db.query(Project).options(selectinload(Project.members))

        if not current_user.is_admin:
            member_projects = select(project_members.c.project_id).where(
                project_members.c.user_id == current_user.id
            )
            query = query.filter(Project.id.in_(member_projects))

        if status:
            query = query.filter(Project.status == status)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Project.name.ilike(pattern),
                Project.description.ilike(pattern),
                Project.client_name.ilike(pattern),
            ))

        projects = query.order_by(Project.created_at.desc()).all()
        return self.build_responses(projects)

    def get_project(self, project_id: str, current_user: CurrentUser) -> ProjectResponse:
        project = self.validate_project_exists(project_id)
        self.check_project_access(project_id, current_user)
        return self.build_responses([project])[0]

    def create_project(self, data: ProjectCreate, current_user: CurrentUser) -> ProjectResponse:
        """创建项目，项目、成员和活动日志在同一事务中写入"""
        try:
            project = Project(
                name=data.name,
                description=data.description,
                client_name=data.client_name,
                start_date=data.start_date,
                end_date=data.end_date,
                status=data.status,
                created_by=current_user.id,
            )
            self.db.add(project)
            self.db.flush()

            added = set()
            for member in data.members:
                if member.user_id in added:
                    continue
                self.validate_user_exists(member.user_id)
                self.db.execute(project_members.insert().values(
                    project_id=project.id,
                    user_id=member.user_id,
                    role=member.role or "Member",
                ))
                added.add(member.user_id)

            self.db.add(Activity(
                project_id=project.id,
                user_id=current_user.id,
                action="Project Created",
                details=f"Created project: {project.name}",
            ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"项目创建成功: {project.id} ({project.name})，成员 {len(added)} 人")
        self.db.expire_all()
        return self.build_responses([self.validate_project_exists(project.id)])[0]

    def update_project(self, project_id: str, payload: dict, current_user: CurrentUser) -> ProjectResponse:
        apply_sparse_update(
            self.db, Project, project_id, payload, PROJECT_UPDATE_FIELDS,
            not_found_message="Project not found",
        )
        self.db.commit()
        self.db.expire_all()
        return self.build_responses([self.validate_project_exists(project_id)])[0]

    def delete_project(self, project_id: str) -> None:
        """删除项目，缺陷、成员、迭代、史诗和活动日志级联删除"""
        project = self.validate_project_exists(project_id)
        self.db.delete(project)
        self.db.commit()
        logger.info(f"项目已删除: {project_id}")

    def add_member(self, project_id: str, data: MemberAdd) -> bool:
        """添加项目成员，已是成员时不做任何修改，返回是否新增"""
        self.validate_project_exists(project_id)
        self.validate_user_exists(data.user_id)

        if self.is_member(project_id, data.user_id):
            return False

        self.db.execute(project_members.insert().values(
            project_id=project_id,
            user_id=data.user_id,
            role=data.role or "Member",
        ))
        self.db.commit()
        return True

    def remove_member(self, project_id: str, user_id: str) -> None:
        self.db.execute(project_members.delete().where(
            project_members.c.project_id == project_id,
            project_members.c.user_id == user_id,
        ))
        self.db.commit()
