from pydantic import Field
from typing import Optional, List
from datetime import datetime, date

from models.enums import SprintStatus
from schemas.base import CamelModel, RequestModel
from schemas.issue import IssueResponse


class SprintCreate(RequestModel):
    project_id: str = Field(..., description="项目ID")
    name: str = Field(..., description="迭代名称")
    goal: Optional[str] = Field(None, description="迭代目标")
    start_date: date = Field(..., description="开始日期")
    end_date: date = Field(..., description="结束日期")


class SprintUpdate(RequestModel):
    name: Optional[str] = None
    goal: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[SprintStatus] = None


SPRINT_UPDATE_FIELDS = {
    "name": "name",
    "goal": "goal",
    "startDate": "start_date",
    "endDate": "end_date",
    "status": "status",
}


class SprintResponse(CamelModel):
    id: str
    project_id: str
    name: str
    goal: Optional[str] = None
    start_date: date
    end_date: date
    status: SprintStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    issue_count: int = 0
    completed_count: int = 0


class SprintDetailResponse(SprintResponse):
    issues: List[IssueResponse] = Field(default_factory=list)
