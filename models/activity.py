"""活动日志模型模块

活动日志只追加，不提供修改和删除接口
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from .database import Base
from .base import utc_now


class Activity(Base):
    """项目活动日志表模型"""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True, comment='活动ID')
    project_id = Column(String(50), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True, comment='所属项目ID')
    user_id = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), comment='操作人ID')
    action = Column(String(255), nullable=False, comment='动作名称')
    details = Column(Text, comment='动作详情')
    timestamp = Column(DateTime, default=utc_now, index=True, comment='发生时间')

    project = relationship("Project", back_populates="activities")
    user = relationship("User")
