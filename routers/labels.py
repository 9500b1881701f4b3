"""标签管理API路由"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from models.database import get_db
from models import Label, UserRole, issue_labels
from schemas import LabelCreate, LabelResponse, LabelUpdate, LABEL_UPDATE_FIELDS, MessageResponse
from utils.auth import CurrentUser, get_current_user, require_roles
from utils.exceptions import ResourceConflictException, ResourceNotFoundException
from utils.sparse_update import apply_sparse_update, reject_null_fields

router = APIRouter()


def _check_name_available(db: Session, name: str, exclude_id: int = None) -> None:
    query = db.query(Label).filter(Label.name == name)
    if exclude_id is not None:
        query = query.filter(Label.id != exclude_id)
    if query.first():
        raise ResourceConflictException("Label with this name already exists")


def _get_label_or_404(db: Session, label_id: int) -> Label:
    label = db.get(Label, label_id)
    if not label:
        raise ResourceNotFoundException("Label not found")
    return label


@router.get("", response_model=List[LabelResponse])
def get_labels(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取全部标签，按名称排序"""
    return db.query(Label).order_by(Label.name.asc()).all()


@router.post("", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
def create_label(
    label_data: LabelCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """创建标签"""
    _check_name_available(db, label_data.name)

    label = Label(name=label_data.name, color=label_data.color, description=label_data.description or "")
    db.add(label)
    db.commit()
    db.refresh(label)
    return label


@router.put("/{label_id}", response_model=LabelResponse)
def update_label(
    label_id: int,
    label_data: LabelUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """更新标签，只更新传入的字段"""
    payload = label_data.model_dump(by_alias=True, exclude_unset=True)
    reject_null_fields(payload, ("name", "color"))
    if payload.get("name"):
        _check_name_available(db, payload["name"], exclude_id=label_id)

    apply_sparse_update(db, Label, label_id, payload, LABEL_UPDATE_FIELDS, not_found_message="Label not found")
    db.commit()
    db.expire_all()
    return _get_label_or_404(db, label_id)


@router.delete("/{label_id}", response_model=MessageResponse)
def delete_label(
    label_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """删除标签，仍被缺陷使用时拒绝删除"""
    label = _get_label_or_404(db, label_id)

    usage = db.query(func.count()).select_from(issue_labels).filter(issue_labels.c.label_id == label_id).scalar()
    if usage:
        raise ResourceConflictException("Cannot delete label: it is currently in use by issues")

    db.delete(label)
    db.commit()
    return {"message": "Label deleted successfully"}
