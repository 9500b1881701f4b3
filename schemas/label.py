from pydantic import Field
from typing import Optional
from datetime import datetime

from schemas.base import CamelModel, RequestModel


class LabelCreate(RequestModel):
    name: str = Field(..., description="标签名称")
    color: str = Field(..., description="标签颜色")
    description: Optional[str] = Field(None, description="标签说明")


class LabelUpdate(RequestModel):
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None


LABEL_UPDATE_FIELDS = {
    "name": "name",
    "color": "color",
    "description": "description",
}


class LabelResponse(CamelModel):
    id: int
    name: str
    color: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IssueTypeCreate(RequestModel):
    name: str = Field(..., description="类型名称")
    icon: str = Field("task_alt", description="图标名称")
    color: str = Field("#6366f1", description="类型颜色")
    description: Optional[str] = Field(None, description="类型说明")


class IssueTypeUpdate(RequestModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None


ISSUE_TYPE_UPDATE_FIELDS = {
    "name": "name",
    "icon": "icon",
    "color": "color",
    "description": "description",
}


class IssueTypeResponse(CamelModel):
    id: int
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
