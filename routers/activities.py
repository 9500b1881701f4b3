"""项目活动日志API路由"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

from models.database import get_db
from models import Activity, Project
from schemas import ActivityCreate, ActivityResponse
from utils.auth import CurrentUser, get_current_user
from utils.exceptions import ResourceNotFoundException

router = APIRouter()

# 项目动态只返回最近的记录
RECENT_ACTIVITY_LIMIT = 50


@router.get("/project/{project_id}", response_model=List[ActivityResponse])
def get_project_activities(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取项目最近的活动，按时间倒序"""
    activities = (
        db.query(Activity)
        .options(joinedload(Activity.user))
        .filter(Activity.project_id == project_id)
        .order_by(Activity.timestamp.desc(), Activity.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )
    return [ActivityResponse.from_activity(activity) for activity in activities]


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
def create_activity(
    activity_data: ActivityCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """记录一条项目活动"""
    if not db.get(Project, activity_data.project_id):
        raise ResourceNotFoundException("Project not found")

    activity = Activity(
        project_id=activity_data.project_id,
        user_id=current_user.id,
        action=activity_data.action,
        details=activity_data.details,
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return ActivityResponse.from_activity(activity)
