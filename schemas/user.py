from pydantic import Field, model_validator
from typing import Optional
from datetime import datetime

from models.base import utc_now
from models.enums import UserRole, UserStatus
from schemas.base import CamelModel, RequestModel


class UserCreate(RequestModel):
    name: str = Field(..., description="姓名")
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="密码")
    role: UserRole = Field(UserRole.DEVELOPER, description="角色")
    department: Optional[str] = Field(None, description="部门")
    phone: Optional[str] = Field(None, description="手机号码")
    status: UserStatus = Field(UserStatus.ACTIVE, description="账号状态")


class UserUpdate(RequestModel):
    """用户更新，只有实际传入的字段会被写入"""
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[UserStatus] = None
    password: Optional[str] = None


# 用户更新字段白名单：JSON 字段 -> 列名
USER_UPDATE_FIELDS = {
    "name": "name",
    "email": "email",
    "role": "role",
    "department": "department",
    "phone": "phone",
    "status": "status",
    "password": "password",
}


class UserResponse(CamelModel):
    """用户响应，不包含密码"""
    id: str
    name: str
    email: str
    role: UserRole
    department: Optional[str] = None
    phone: Optional[str] = None
    status: UserStatus
    avatar: Optional[str] = None
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def default_last_active(self):
        # 从未登录过的用户按当前时间展示
        if self.last_active is None:
            self.last_active = utc_now()
        return self
