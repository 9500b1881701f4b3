"""认证相关的API路由
提供登录、注册和当前用户查询
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from models.base import utc_now
from models.database import get_db
from models import User, UserStatus
from schemas import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, UserResponse
from utils.auth import CurrentUser, create_user_token, get_current_user, get_password_hash, verify_password
from utils.exceptions import AuthenticationException, PermissionException, ResourceConflictException, ResourceNotFoundException

logger = logging.getLogger(__name__)

router = APIRouter()


def default_avatar(name: str) -> str:
    """默认头像地址"""
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={name}"


@router.post("/login", response_model=LoginResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """用户登录，邮箱不存在和密码错误返回相同的错误信息"""
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user:
        raise AuthenticationException("Invalid credentials")

    if user.status != UserStatus.ACTIVE:
        raise PermissionException("Account is inactive")

    if not verify_password(login_data.password, user.password):
        raise AuthenticationException("Invalid credentials")

    token = create_user_token(user)

    # 更新最后活跃时间
    user.last_active = utc_now()
    db.commit()
    db.refresh(user)

    logger.info(f"用户登录成功: {user.email}")
    return LoginResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(register_data: RegisterRequest, db: Session = Depends(get_db)):
    """用户注册"""
    if db.query(User).filter(User.email == register_data.email).first():
        raise ResourceConflictException("User with this email already exists")

    db_user = User(
        name=register_data.name,
        email=register_data.email,
        password=get_password_hash(register_data.password),
        role=register_data.role,
        department=register_data.department,
        phone=register_data.phone,
        status=UserStatus.ACTIVE,
        avatar=default_avatar(register_data.name),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    logger.info(f"用户注册成功: {db_user.email} ({db_user.id})")
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(db_user),
    )


@router.get("/me", response_model=UserResponse)
def read_current_user(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取当前登录用户信息"""
    user = db.get(User, current_user.id)
    if not user:
        raise ResourceNotFoundException("User not found")
    return user
