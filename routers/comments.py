"""评论相关的API路由
提供缺陷评论的增删改查功能
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

from models.database import get_db
from models import Comment, Issue
from schemas import CommentCreate, CommentResponse, CommentUpdate, MessageResponse
from utils.auth import CurrentUser, get_current_user
from utils.exceptions import PermissionException, ResourceNotFoundException

router = APIRouter()


def _get_comment_or_404(db: Session, comment_id: str) -> Comment:
    comment = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.id == comment_id)
        .first()
    )
    if not comment:
        raise ResourceNotFoundException("Comment not found")
    return comment


def _check_comment_owner(comment: Comment, current_user: CurrentUser, action: str) -> None:
    """只有评论作者或管理员可以修改、删除评论"""
    if comment.user_id != current_user.id and not current_user.is_admin:
        raise PermissionException(f"Not authorized to {action} this comment")


@router.get("/issue/{issue_id}", response_model=List[CommentResponse])
def get_issue_comments(
    issue_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """获取缺陷评论，按时间正序"""
    comments = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.issue_id == issue_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return [CommentResponse.from_comment(comment) for comment in comments]


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    comment_data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """创建评论"""
    if not db.get(Issue, comment_data.issue_id):
        raise ResourceNotFoundException("Issue not found")

    comment = Comment(
        issue_id=comment_data.issue_id,
        user_id=current_user.id,
        content=comment_data.content,
    )
    db.add(comment)
    db.commit()
    return CommentResponse.from_comment(_get_comment_or_404(db, comment.id))


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """修改评论"""
    comment = _get_comment_or_404(db, comment_id)
    _check_comment_owner(comment, current_user, "edit")

    comment.content = comment_data.content
    db.commit()
    db.refresh(comment)
    return CommentResponse.from_comment(comment)


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """删除评论"""
    comment = _get_comment_or_404(db, comment_id)
    _check_comment_owner(comment, current_user, "delete")

    db.delete(comment)
    db.commit()
    return {"message": "Comment deleted successfully"}
