"""缺陷管理API路由
创建和更新接口同时支持 JSON 和 multipart 表单（附带截图）
"""
import json
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from models.database import get_db
from models import IssueSeverity, IssueStatus
from schemas import IssueCreate, IssueResponse, IssueUpdate, MessageResponse, UserSummary, WatcherAdd
from schemas.base import missing_fields, validation_message
from services.issue_service import IssueService
from utils.auth import CurrentUser, get_current_user
from utils.exceptions import ValidationException
from utils.file_storage import delete_uploads, save_uploads

router = APIRouter()

# 前端提交截图使用的表单字段名
FILE_FIELDS = ("attachments", "screenshots")


async def read_issue_payload(request: Request) -> Tuple[dict, List[UploadFile]]:
    """读取请求体，返回 (字段字典, 上传文件列表)"""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        files = [
            item for field in FILE_FIELDS for item in form.getlist(field)
            if isinstance(item, UploadFile)
        ]
        data = {key: value for key, value in form.items() if key not in FILE_FIELDS}
        labels = form.getlist("labels")
        if len(labels) > 1:
            data["labels"] = labels
        return data, files

    body = await request.body()
    if not body:
        return {}, []
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise ValidationException("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationException("Request body must be a JSON object")
    for field in FILE_FIELDS:
        data.pop(field, None)
    return data, []


def parse_model(model_cls, data: dict):
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        raise ValidationException(validation_message(errors), fields=missing_fields(errors))


@router.get("", response_model=List[IssueResponse])
def get_issues(
    project_id: Optional[str] = Query(None, alias="projectId", description="项目ID"),
    status: Optional[IssueStatus] = Query(None, description="状态筛选"),
    severity: Optional[IssueSeverity] = Query(None, description="严重程度筛选"),
    type: Optional[str] = Query(None, description="类型筛选"),
    search: Optional[str] = Query(None, description="按编号、模块或描述搜索"),
    sort_by: str = Query("created_at", alias="sortBy", description="排序字段"),
    sort_order: str = Query("desc", alias="sortOrder", description="asc 或 desc"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取缺陷列表"""
    return IssueService(db).list_issues(
        project_id=project_id,
        status=status,
        severity=severity,
        type=type,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/{issue_id}", response_model=IssueResponse)
def get_issue(
    issue_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取缺陷详情，包含关注人"""
    return IssueService(db).get_issue(issue_id)


@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """创建缺陷"""
    data, files = await read_issue_payload(request)
    issue_data = parse_model(IssueCreate, data)
    screenshots = await save_uploads(files)
    try:
        return await run_in_threadpool(IssueService(db).create_issue, issue_data, screenshots, current_user)
    except Exception:
        delete_uploads(screenshots)
        raise


@router.put("/{issue_id}", response_model=IssueResponse)
async def update_issue(
    issue_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """更新缺陷，只更新传入的字段；上传新截图时替换原有截图"""
    data, files = await read_issue_payload(request)
    payload = parse_model(IssueUpdate, data).model_dump(by_alias=True, exclude_unset=True)
    screenshots = await save_uploads(files)
    try:
        return await run_in_threadpool(IssueService(db).update_issue, issue_id, payload, screenshots, current_user)
    except Exception:
        delete_uploads(screenshots)
        raise


@router.delete("/{issue_id}", response_model=MessageResponse)
def delete_issue(
    issue_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """删除缺陷"""
    IssueService(db).delete_issue(issue_id, current_user)
    return {"message": "Issue deleted successfully"}


@router.get("/{issue_id}/watchers", response_model=List[UserSummary])
def get_watchers(
    issue_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取缺陷关注人"""
    return IssueService(db).list_watchers(issue_id)


@router.post("/{issue_id}/watchers", response_model=List[UserSummary], status_code=status.HTTP_201_CREATED)
def add_watcher(
    issue_id: str,
    watcher_data: Optional[WatcherAdd] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """关注缺陷，不传 userId 时关注人为当前用户"""
    return IssueService(db).add_watcher(issue_id, (watcher_data.user_id if watcher_data else None) or current_user.id)


@router.delete("/{issue_id}/watchers/{user_id}", response_model=List[UserSummary])
def remove_watcher(
    issue_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """取消关注"""
    return IssueService(db).remove_watcher(issue_id, user_id)
