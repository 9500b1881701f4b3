"""
项目模型模块
包含项目相关的数据模型定义
"""
from sqlalchemy import Column, String, Text, Date, ForeignKey
from sqlalchemy.orm import relationship
from .database import Base
from .base import TimestampMixin, enum_type
from .enums import ProjectStatus
from .associations import project_members
from utils.snowflake import generate_project_id


class Project(Base, TimestampMixin):
    """项目表模型

    进度和缺陷数量在读取时计算，不落库
    """
    __tablename__ = "projects"

    id = Column(String(50), primary_key=True, index=True, default=generate_project_id, comment='项目ID，格式：project-雪花算法ID')
    name = Column(String(255), nullable=False, comment='项目名称')
    description = Column(Text, comment='项目描述')
    client_name = Column(String(255), comment='客户名称')
    start_date = Column(Date, comment='开始日期')
    end_date = Column(Date, comment='结束日期')
    status = Column(enum_type(ProjectStatus, 'project_status'), nullable=False, default=ProjectStatus.PLANNING, comment='项目状态')
    created_by = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), comment='创建人ID')

    # 关系
    creator = relationship("User", foreign_keys=[created_by])
    members = relationship("User", secondary=project_members, back_populates="projects")
    issues = relationship("Issue", back_populates="project", cascade="all, delete-orphan")
    sprints = relationship("Sprint", back_populates="project", cascade="all, delete-orphan")
    epics = relationship("Epic", back_populates="project", cascade="all, delete-orphan")
    activities = relationship("Activity", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name})>"
