"""评论模型模块
包含缺陷评论的数据模型定义
"""
from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from .database import Base
from .base import TimestampMixin
from utils.snowflake import generate_comment_id


class Comment(Base, TimestampMixin):
    """评论表模型"""
    __tablename__ = "comments"

    id = Column(String(50), primary_key=True, index=True, default=generate_comment_id, comment='评论ID，格式：comment-雪花算法ID')
    issue_id = Column(String(50), ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True, comment='所属缺陷ID')
    user_id = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), comment='评论作者ID')
    content = Column(Text, nullable=False, comment='评论内容')

    # 关系
    issue = relationship("Issue", back_populates="comments")
    author = relationship("User")

    def __repr__(self):
        return f"<Comment(id={self.id}, issue_id={self.issue_id})>"
