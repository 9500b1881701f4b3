"""项目管理API路由"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from models.database import get_db
from models import ProjectStatus, UserRole
from schemas import MemberAdd, MessageResponse, ProjectCreate, ProjectResponse, ProjectUpdate
from services.project_service import ProjectService
from utils.auth import CurrentUser, get_current_user, require_roles
from utils.sparse_update import reject_null_fields

router = APIRouter()


@router.get("", response_model=List[ProjectResponse])
def get_projects(
    status: Optional[ProjectStatus] = Query(None, description="状态筛选"),
    search: Optional[str] = Query(None, description="按名称、描述或客户搜索"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取项目列表，非管理员只能看到自己参与的项目"""
    return ProjectService(db).list_projects(current_user, status=status, search=search)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取项目详情"""
    return ProjectService(db).get_project(project_id, current_user)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.QA))
):
    """创建项目"""
    return ProjectService(db).create_project(project_data, current_user)


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.QA))
):
    """更新项目，只更新传入的字段"""
    payload = project_data.model_dump(by_alias=True, exclude_unset=True)
    reject_null_fields(payload, ("name", "status"))
    return ProjectService(db).update_project(project_id, payload, current_user)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """删除项目"""
    ProjectService(db).delete_project(project_id)
    return {"message": "Project deleted successfully"}


@router.post("/{project_id}/members", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def add_project_member(
    project_id: str,
    member_data: MemberAdd,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.QA))
):
    """添加项目成员"""
    ProjectService(db).add_member(project_id, member_data)
    return {"message": "Member added successfully"}


@router.delete("/{project_id}/members/{user_id}", response_model=MessageResponse)
def remove_project_member(
    project_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.QA))
):
    """移除项目成员"""
    ProjectService(db).remove_member(project_id, user_id)
    return {"message": "Member removed successfully"}
