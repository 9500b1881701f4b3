from pydantic import Field
from typing import Optional

from models.enums import UserRole
from schemas.base import CamelModel, RequestModel
from schemas.user import UserResponse


class LoginRequest(RequestModel):
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="密码")


class RegisterRequest(RequestModel):
    name: str = Field(..., description="姓名")
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="密码")
    role: UserRole = Field(UserRole.DEVELOPER, description="角色")
    department: Optional[str] = Field(None, description="部门")
    phone: Optional[str] = Field(None, description="手机号码")


class LoginResponse(CamelModel):
    message: str
    token: str
    user: UserResponse


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse
