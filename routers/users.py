"""用户管理API路由"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.database import get_db
from models import User, UserRole, UserStatus
from routers.auth import default_avatar
from schemas import MessageResponse, UserCreate, UserResponse, UserUpdate, USER_UPDATE_FIELDS
from utils.auth import CurrentUser, get_current_user, get_password_hash, require_roles
from utils.exceptions import (
    PermissionException, ResourceConflictException, ResourceNotFoundException, ValidationException
)
from utils.file_storage import IMAGE_EXTENSIONS, save_upload
from utils.sparse_update import apply_sparse_update, reject_null_fields

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise ResourceNotFoundException("User not found")
    return user


@router.get("", response_model=List[UserResponse])
def get_users(
    role: Optional[UserRole] = Query(None, description="角色筛选"),
    status: Optional[UserStatus] = Query(None, description="状态筛选"),
    search: Optional[str] = Query(None, description="按姓名、邮箱或部门搜索"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取用户列表"""
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            User.department.ilike(pattern),
        ))
    return query.order_by(User.created_at.desc()).all()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取用户详情"""
    return _get_user_or_404(db, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """创建用户（仅管理员）"""
    if db.query(User).filter(User.email == user_data.email).first():
        raise ResourceConflictException("User with this email already exists")

    db_user = User(
        name=user_data.name,
        email=user_data.email,
        password=get_password_hash(user_data.password),
        role=user_data.role,
        department=user_data.department,
        phone=user_data.phone,
        status=user_data.status,
        avatar=default_avatar(user_data.name),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    logger.info(f"管理员 {current_user.email} 创建用户: {db_user.email}")
    return db_user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """更新用户（仅管理员），只更新传入的字段，密码会重新加密"""
    payload = user_data.model_dump(by_alias=True, exclude_unset=True)

    reject_null_fields(payload, ("name", "email", "role", "status", "password"))

    if "password" in payload:
        payload["password"] = get_password_hash(payload["password"])

    if payload.get("email"):
        duplicate = db.query(User).filter(User.email == payload["email"], User.id != user_id).first()
        if duplicate:
            raise ResourceConflictException("User with this email already exists")

    apply_sparse_update(db, User, user_id, payload, USER_UPDATE_FIELDS, not_found_message="User not found")
    db.commit()
    db.expire_all()
    return _get_user_or_404(db, user_id)


@router.put("/{user_id}/profile-picture", response_model=UserResponse)
async def update_profile_picture(
    user_id: str,
    profile_picture: UploadFile = File(..., alias="profilePicture"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """上传头像，只能修改自己的头像，管理员除外"""
    if current_user.id != user_id and not current_user.is_admin:
        raise PermissionException("Unauthorized to update this profile picture")

    user = _get_user_or_404(db, user_id)
    user.avatar = await save_upload(profile_picture, IMAGE_EXTENSIONS)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """删除用户（仅管理员），不能删除自己"""
    if user_id == current_user.id:
        raise ValidationException("Cannot delete your own account")

    user = _get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()

    logger.info(f"管理员 {current_user.email} 删除用户: {user_id}")
    return {"message": "User deleted successfully"}
