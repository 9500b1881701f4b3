"""史诗管理API路由"""
from typing import Dict, List, Tuple

from fastapi import APIRouter, Depends, status
from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload, selectinload

from models.database import get_db
from models import COMPLETED_ISSUE_STATUSES, Epic, Issue, Project
from schemas import (
    EpicCreate, EpicDetailResponse, EpicResponse, EpicUpdate, EPIC_UPDATE_FIELDS,
    IssueResponse, MessageResponse
)
from services.project_service import calculate_progress
from utils.auth import CurrentUser, get_current_user
from utils.exceptions import ResourceNotFoundException
from utils.sparse_update import apply_sparse_update, reject_null_fields

router = APIRouter()


def _epic_counts(db: Session, epic_ids: List[str]) -> Dict[str, Tuple[int, int]]:
    """按史诗统计缺陷总数和已完成数（Fixed、Closed）"""
    if not epic_ids:
        return {}
    completed = func.sum(case((Issue.status.in_(COMPLETED_ISSUE_STATUSES), 1), else_=0))
    rows = (
        db.query(Issue.epic_id, func.count(Issue.id), completed)
        .filter(Issue.epic_id.in_(epic_ids))
        .group_by(Issue.epic_id)
        .all()
    )
    return {epic_id: (total, int(done or 0)) for epic_id, total, done in rows}


def _to_response(epic: Epic, counts: Dict[str, Tuple[int, int]]) -> EpicResponse:
    response = EpicResponse.model_validate(epic)
    total, completed = counts.get(epic.id, (0, 0))
    response.issue_count = total
    response.completed_count = completed
    response.progress = calculate_progress(total, completed)
    return response


def _get_epic_or_404(db: Session, epic_id: str) -> Epic:
    epic = db.get(Epic, epic_id)
    if not epic:
        raise ResourceNotFoundException("Epic not found")
    return epic


@router.get("/project/{project_id}", response_model=List[EpicResponse])
def get_project_epics(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取项目下的史诗，附带进度"""
    epics = (
        db.query(Epic)
        .filter(Epic.project_id == project_id)
        .order_by(Epic.created_at.desc())
        .all()
    )
    counts = _epic_counts(db, [epic.id for epic in epics])
    return [_to_response(epic, counts) for epic in epics]


@router.get("/{epic_id}", response_model=EpicDetailResponse)
def get_epic(
    epic_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取史诗详情，附带史诗下的缺陷"""
    epic = _get_epic_or_404(db, epic_id)
    issues = (
        db.query(Issue)
        .options(
            joinedload(Issue.project),
            joinedload(Issue.assignee),
            joinedload(Issue.reporter),
            selectinload(Issue.labels),
        )
        .filter(Issue.epic_id == epic_id)
        .order_by(Issue.created_at.desc())
        .all()
    )
    response = EpicDetailResponse.model_validate(_to_response(epic, _epic_counts(db, [epic_id])).model_dump())
    response.issues = [IssueResponse.from_issue(issue) for issue in issues]
    return response


@router.post("", response_model=EpicResponse, status_code=status.HTTP_201_CREATED)
def create_epic(
    epic_data: EpicCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """创建史诗"""
    if not db.get(Project, epic_data.project_id):
        raise ResourceNotFoundException("Project not found")

    epic = Epic(
        project_id=epic_data.project_id,
        name=epic_data.name,
        description=epic_data.description,
        status=epic_data.status,
        color=epic_data.color,
        start_date=epic_data.start_date,
        target_date=epic_data.target_date,
        created_by=current_user.id,
    )
    db.add(epic)
    db.commit()
    db.refresh(epic)
    return _to_response(epic, {})


@router.put("/{epic_id}", response_model=EpicResponse)
def update_epic(
    epic_id: str,
    epic_data: EpicUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """更新史诗，只更新传入的字段"""
    payload = epic_data.model_dump(by_alias=True, exclude_unset=True)
    reject_null_fields(payload, ("name", "status"))

    apply_sparse_update(db, Epic, epic_id, payload, EPIC_UPDATE_FIELDS, not_found_message="Epic not found")
    db.commit()
    db.expire_all()
    return _to_response(_get_epic_or_404(db, epic_id), _epic_counts(db, [epic_id]))


@router.delete("/{epic_id}", response_model=MessageResponse)
def delete_epic(
    epic_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """删除史诗，史诗下的缺陷保留并解除关联"""
    epic = _get_epic_or_404(db, epic_id)
    db.delete(epic)
    db.commit()
    return {"message": "Epic deleted successfully"}
