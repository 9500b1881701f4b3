from pydantic import Field
from typing import Optional
from datetime import datetime

from schemas.base import CamelModel, RequestModel


class ActivityCreate(RequestModel):
    project_id: str = Field(..., description="项目ID")
    action: str = Field(..., description="动作名称")
    details: Optional[str] = Field(None, description="动作详情")


class ActivityResponse(CamelModel):
    id: int
    project_id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    action: str
    details: Optional[str] = None
    timestamp: datetime

    @classmethod
    def from_activity(cls, activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            project_id=activity.project_id,
            user_id=activity.user_id,
            user_name=activity.user.name if activity.user else None,
            user_avatar=activity.user.avatar if activity.user else None,
            action=activity.action,
            details=activity.details,
            timestamp=activity.timestamp,
        )
