from pydantic import Field
from typing import Optional, List
from datetime import datetime, date

from models.enums import ProjectStatus, UserRole
from schemas.base import CamelModel, RequestModel


class ProjectMemberIn(RequestModel):
    user_id: str = Field(..., description="用户ID")
    role: str = Field("Member", description="项目内角色")


class ProjectCreate(RequestModel):
    name: str = Field(..., description="项目名称")
    description: Optional[str] = Field(None, description="项目描述")
    client_name: Optional[str] = Field(None, description="客户名称")
    start_date: Optional[date] = Field(None, description="开始日期")
    end_date: Optional[date] = Field(None, description="结束日期")
    status: ProjectStatus = Field(ProjectStatus.PLANNING, description="项目状态")
    members: List[ProjectMemberIn] = Field(default_factory=list, description="初始成员")


class ProjectUpdate(RequestModel):
    """项目更新，进度由缺陷状态计算，不能直接修改"""
    name: Optional[str] = None
    description: Optional[str] = None
    client_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ProjectStatus] = None


# 项目更新字段白名单：JSON 字段 -> 列名
PROJECT_UPDATE_FIELDS = {
    "name": "name",
    "description": "description",
    "clientName": "client_name",
    "startDate": "start_date",
    "endDate": "end_date",
    "status": "status",
}


class MemberAdd(RequestModel):
    user_id: str = Field(..., description="用户ID")
    role: str = Field("Member", description="项目内角色")


class ProjectMemberResponse(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    project_role: Optional[str] = None


class ProjectResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    client_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    members: List[ProjectMemberResponse] = Field(default_factory=list)
    issue_count: int = 0
    progress: int = 0
