from pydantic import Field
from typing import Optional
from datetime import datetime

from schemas.base import CamelModel, RequestModel, UserSummary


class CommentCreate(RequestModel):
    issue_id: str = Field(..., description="缺陷ID")
    content: str = Field(..., description="评论内容")


class CommentUpdate(RequestModel):
    content: str = Field(..., description="评论内容")


class CommentResponse(CamelModel):
    id: str
    issue_id: str
    user_id: Optional[str] = None
    content: str
    user: Optional[UserSummary] = Field(None, description="评论作者")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_comment(cls, comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            issue_id=comment.issue_id,
            user_id=comment.user_id,
            content=comment.content,
            user=UserSummary.model_validate(comment.author) if comment.author else None,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )
