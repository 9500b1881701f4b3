"""迭代模型模块"""
from sqlalchemy import Column, String, Text, Date, ForeignKey
from sqlalchemy.orm import relationship
from .database import Base
from .base import TimestampMixin, enum_type
from .enums import SprintStatus
from utils.snowflake import generate_sprint_id


class Sprint(Base, TimestampMixin):
    """迭代表模型，删除迭代时其缺陷的 sprint_id 置空"""
    __tablename__ = "sprints"

    id = Column(String(50), primary_key=True, index=True, default=generate_sprint_id, comment='迭代ID')
    project_id = Column(String(50), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True, comment='所属项目ID')
    name = Column(String(255), nullable=False, comment='迭代名称')
    goal = Column(Text, comment='迭代目标')
    start_date = Column(Date, nullable=False, comment='开始日期')
    end_date = Column(Date, nullable=False, comment='结束日期')
    status = Column(enum_type(SprintStatus, 'sprint_status'), nullable=False, default=SprintStatus.PLANNING, comment='迭代状态')

    project = relationship("Project", back_populates="sprints")
    issues = relationship("Issue", back_populates="sprint", order_by="Issue.created_at.desc()")
