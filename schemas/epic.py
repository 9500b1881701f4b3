from pydantic import Field
from typing import Optional, List
from datetime import datetime, date

from models.enums import EpicStatus
from schemas.base import CamelModel, RequestModel
from schemas.issue import IssueResponse


class EpicCreate(RequestModel):
    project_id: str = Field(..., description="项目ID")
    name: str = Field(..., description="史诗名称")
    description: Optional[str] = Field(None, description="史诗描述")
    status: EpicStatus = Field(EpicStatus.OPEN, description="史诗状态")
    color: str = Field("#3b82f6", description="展示颜色")
    start_date: Optional[date] = None
    target_date: Optional[date] = None


class EpicUpdate(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[EpicStatus] = None
    color: Optional[str] = None
    start_date: Optional[date] = None
    target_date: Optional[date] = None


EPIC_UPDATE_FIELDS = {
    "name": "name",
    "description": "description",
    "status": "status",
    "color": "color",
    "startDate": "start_date",
    "targetDate": "target_date",
}


class EpicResponse(CamelModel):
    id: str
    project_id: str
    name: str
    description: Optional[str] = None
    status: EpicStatus
    color: Optional[str] = None
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    issue_count: int = 0
    completed_count: int = 0
    progress: int = 0


class EpicDetailResponse(EpicResponse):
    issues: List[IssueResponse] = Field(default_factory=list)
