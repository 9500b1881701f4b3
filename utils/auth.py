from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from config.settings import settings
from models.enums import UserRole

# 密码加密，cost 固定为 10
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

# 不自动抛错，缺少凭据时由 get_current_user 统一返回 401
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """从令牌中解析出的当前用户，不查询数据库"""
    id: str
    email: str
    role: UserRole
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """生成密码哈希"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """创建访问令牌"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def create_user_token(user) -> str:
    """为用户签发令牌，载荷为 {id, email, role, name}"""
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    return create_access_token({
        "id": user.id,
        "email": user.email,
        "role": role,
        "name": user.name,
    })


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> dict:
    """验证令牌，过期或签名错误都返回 401"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise _unauthorized("Invalid or expired token")

    if not payload.get("id") or not payload.get("role"):
        raise _unauthorized("Invalid or expired token")
    return payload


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> CurrentUser:
    """获取当前用户"""
    if not credentials:
        raise _unauthorized("Access token required")

    payload = verify_token(credentials.credentials)
    try:
        return CurrentUser(
            id=payload["id"],
            email=payload.get("email", ""),
            role=payload["role"],
            name=payload.get("name"),
        )
    except ValueError:
        # 角色不在枚举范围内
        raise _unauthorized("Invalid or expired token")


def require_roles(*roles: UserRole):
    """角色白名单依赖，当前用户角色不在白名单中返回 403"""
    allowed = {UserRole(role) for role in roles}

    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return current_user
    return role_checker
