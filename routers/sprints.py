"""迭代管理API路由"""
from typing import Dict, List, Tuple

from fastapi import APIRouter, Depends, status
from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload, selectinload

from models.database import get_db
from models import Issue, IssueStatus, Project, Sprint
from schemas import (
    IssueResponse, MessageResponse, SprintCreate, SprintDetailResponse, SprintResponse,
    SprintUpdate, SPRINT_UPDATE_FIELDS
)
from utils.auth import CurrentUser, get_current_user
from utils.exceptions import ResourceNotFoundException, ValidationException
from utils.sparse_update import apply_sparse_update, reject_null_fields

router = APIRouter()


def _sprint_counts(db: Session, sprint_ids: List[str]) -> Dict[str, Tuple[int, int]]:
    """按迭代统计缺陷总数和已关闭数"""
    if not sprint_ids:
        return {}
    closed = func.sum(case((Issue.status == IssueStatus.CLOSED, 1), else_=0))
    rows = (
        db.query(Issue.sprint_id, func.count(Issue.id), closed)
        .filter(Issue.sprint_id.in_(sprint_ids))
        .group_by(Issue.sprint_id)
        .all()
    )
    return {sprint_id: (total, int(done or 0)) for sprint_id, total, done in rows}


def _to_response(sprint: Sprint, counts: Dict[str, Tuple[int, int]]) -> SprintResponse:
    response = SprintResponse.model_validate(sprint)
    response.issue_count, response.completed_count = counts.get(sprint.id, (0, 0))
    return response


def _get_sprint_or_404(db: Session, sprint_id: str) -> Sprint:
    sprint = db.get(Sprint, sprint_id)
    if not sprint:
        raise ResourceNotFoundException("Sprint not found")
    return sprint


@router.get("/project/{project_id}", response_model=List[SprintResponse])
def get_project_sprints(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取项目下的迭代，附带缺陷统计"""
    sprints = (
        db.query(Sprint)
        .filter(Sprint.project_id == project_id)
        .order_by(Sprint.start_date.desc(), Sprint.created_at.desc())
        .all()
    )
    counts = _sprint_counts(db, [sprint.id for sprint in sprints])
    return [_to_response(sprint, counts) for sprint in sprints]


@router.get("/{sprint_id}", response_model=SprintDetailResponse)
def get_sprint(
    sprint_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取迭代详情，附带迭代内的缺陷"""
    sprint = _get_sprint_or_404(db, sprint_id)
    issues = (
        db.query(Issue)
        .options(
            joinedload(Issue.project),
            joinedload(Issue.assignee),
            joinedload(Issue.reporter),
            selectinload(Issue.labels),
        )
        .filter(Issue.sprint_id == sprint_id)
        .order_by(Issue.created_at.desc())
        .all()
    )
    response = SprintDetailResponse.model_validate(_to_response(sprint, _sprint_counts(db, [sprint_id])).model_dump())
    response.issues = [IssueResponse.from_issue(issue) for issue in issues]
    return response


@router.post("", response_model=SprintResponse, status_code=status.HTTP_201_CREATED)
def create_sprint(
    sprint_data: SprintCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """创建迭代，初始状态为 Planning"""
    if not db.get(Project, sprint_data.project_id):
        raise ResourceNotFoundException("Project not found")
    if sprint_data.end_date < sprint_data.start_date:
        raise ValidationException("End date must not be before start date")

    sprint = Sprint(
        project_id=sprint_data.project_id,
        name=sprint_data.name,
        goal=sprint_data.goal,
        start_date=sprint_data.start_date,
        end_date=sprint_data.end_date,
    )
    db.add(sprint)
    db.commit()
    db.refresh(sprint)
    return _to_response(sprint, {})


@router.put("/{sprint_id}", response_model=SprintResponse)
def update_sprint(
    sprint_id: str,
    sprint_data: SprintUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """更新迭代，只更新传入的字段"""
    payload = sprint_data.model_dump(by_alias=True, exclude_unset=True)
    reject_null_fields(payload, ("name", "startDate", "endDate", "status"))

    # 与已保存的日期合并后再比较
    sprint = _get_sprint_or_404(db, sprint_id)
    start_date = payload.get("startDate", sprint.start_date)
    end_date = payload.get("endDate", sprint.end_date)
    if end_date < start_date:
        raise ValidationException("End date must not be before start date")

    apply_sparse_update(db, Sprint, sprint_id, payload, SPRINT_UPDATE_FIELDS, not_found_message="Sprint not found")
    db.commit()
    db.expire_all()
    return _to_response(_get_sprint_or_404(db, sprint_id), _sprint_counts(db, [sprint_id]))


@router.delete("/{sprint_id}", response_model=MessageResponse)
def delete_sprint(
    sprint_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """删除迭代，迭代内的缺陷保留并移出迭代"""
    sprint = _get_sprint_or_404(db, sprint_id)
    db.delete(sprint)
    db.commit()
    return {"message": "Sprint deleted successfully"}
