"""史诗模型模块"""
from sqlalchemy import Column, String, Text, Date, ForeignKey
from sqlalchemy.orm import relationship
from .database import Base
from .base import TimestampMixin, enum_type
from .enums import EpicStatus
from utils.snowflake import generate_epic_id


class Epic(Base, TimestampMixin):
    """史诗表模型，删除史诗时其缺陷的 epic_id 置空"""
    __tablename__ = "epics"

    id = Column(String(50), primary_key=True, index=True, default=generate_epic_id, comment='史诗ID')
    project_id = Column(String(50), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True, comment='所属项目ID')
    name = Column(String(255), nullable=False, comment='史诗名称')
    description = Column(Text, comment='史诗描述')
    status = Column(enum_type(EpicStatus, 'epic_status'), nullable=False, default=EpicStatus.OPEN, comment='史诗状态')
    color = Column(String(20), default='#3b82f6', comment='展示颜色')
    start_date = Column(Date, comment='开始日期')
    target_date = Column(Date, comment='目标日期')
    created_by = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), comment='创建人ID')

    project = relationship("Project", back_populates="epics")
    creator = relationship("User", foreign_keys=[created_by])
    issues = relationship("Issue", back_populates="epic", order_by="Issue.created_at.desc()")
