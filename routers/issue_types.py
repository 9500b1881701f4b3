"""缺陷类型管理API路由"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from models.database import get_db
from models import Issue, IssueType, UserRole
from schemas import (
    IssueTypeCreate, IssueTypeResponse, IssueTypeUpdate, ISSUE_TYPE_UPDATE_FIELDS, MessageResponse
)
from utils.auth import CurrentUser, get_current_user, require_roles
from utils.exceptions import ResourceConflictException, ResourceNotFoundException
from utils.sparse_update import apply_sparse_update, reject_null_fields

router = APIRouter()


def _check_name_available(db: Session, name: str, exclude_id: int = None) -> None:
    """类型名称不区分大小写唯一"""
    query = db.query(IssueType).filter(func.lower(IssueType.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(IssueType.id != exclude_id)
    if query.first():
        raise ResourceConflictException("Issue type with this name already exists")


def _get_issue_type_or_404(db: Session, type_id: int) -> IssueType:
    issue_type = db.get(IssueType, type_id)
    if not issue_type:
        raise ResourceNotFoundException("Issue type not found")
    return issue_type


@router.get("", response_model=List[IssueTypeResponse])
def get_issue_types(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取全部缺陷类型，按名称排序"""
    return db.query(IssueType).order_by(IssueType.name.asc()).all()


@router.post("", response_model=IssueTypeResponse, status_code=status.HTTP_201_CREATED)
def create_issue_type(
    type_data: IssueTypeCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """创建缺陷类型"""
    _check_name_available(db, type_data.name)

    issue_type = IssueType(
        name=type_data.name,
        icon=type_data.icon,
        color=type_data.color,
        description=type_data.description or "",
    )
    db.add(issue_type)
    db.commit()
    db.refresh(issue_type)
    return issue_type


@router.put("/{type_id}", response_model=IssueTypeResponse)
def update_issue_type(
    type_id: int,
    type_data: IssueTypeUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """更新缺陷类型，只更新传入的字段"""
    payload = type_data.model_dump(by_alias=True, exclude_unset=True)
    reject_null_fields(payload, ("name",))

    issue_type = _get_issue_type_or_404(db, type_id)
    old_name = issue_type.name
    new_name = payload.get("name")
    if new_name:
        _check_name_available(db, new_name, exclude_id=type_id)

    apply_sparse_update(
        db, IssueType, type_id, payload, ISSUE_TYPE_UPDATE_FIELDS,
        not_found_message="Issue type not found",
    )
    # 缺陷按名称引用类型，改名时同步
    if new_name and new_name != old_name:
        db.query(Issue).filter(Issue.type == old_name).update(
            {Issue.type: new_name}, synchronize_session=False
        )
    db.commit()
    db.expire_all()
    return _get_issue_type_or_404(db, type_id)


@router.delete("/{type_id}", response_model=MessageResponse)
def delete_issue_type(
    type_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """删除缺陷类型，仍有缺陷使用该类型时拒绝删除"""
    issue_type = _get_issue_type_or_404(db, type_id)

    usage = db.query(func.count(Issue.id)).filter(Issue.type == issue_type.name).scalar()
    if usage:
        raise ResourceConflictException("Cannot delete issue type: it is currently in use by issues")

    db.delete(issue_type)
    db.commit()
    return {"message": "Issue type deleted successfully"}
