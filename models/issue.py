"""
缺陷模型模块
包含缺陷(Issue)相关的数据模型定义
"""
from sqlalchemy import Column, String, Text, Integer, Float, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from .database import Base
from .base import TimestampMixin, enum_type
from .enums import IssueSeverity, IssueStatus, IssuePriority
from .associations import issue_labels, issue_watchers
from utils.snowflake import generate_issue_id


class Issue(Base, TimestampMixin):
    """缺陷表模型"""
    __tablename__ = "issues"

    id = Column(String(50), primary_key=True, index=True, default=generate_issue_id, comment='缺陷ID，格式：issue-雪花算法ID')
    bug_id = Column(String(100), unique=True, nullable=False, comment='缺陷编号，格式：BUG-<项目号>-<序号>')
    project_id = Column(String(50), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True, comment='所属项目ID')
    module_name = Column(String(255), nullable=False, comment='模块名称')
    type = Column(String(100), nullable=False, comment='缺陷类型，对应 issue_types.name')
    severity = Column(enum_type(IssueSeverity, 'issue_severity'), nullable=False, comment='严重程度')
    status = Column(enum_type(IssueStatus, 'issue_status'), nullable=False, default=IssueStatus.OPEN, comment='缺陷状态')
    priority = Column(enum_type(IssuePriority, 'issue_priority'), nullable=False, default=IssuePriority.P2, comment='优先级')
    description = Column(Text, nullable=False, comment='缺陷描述')
    assigned_to = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), comment='指派人ID')
    reported_by = Column(String(50), ForeignKey("users.id", ondelete="SET NULL"), comment='报告人ID')
    screenshots = Column(JSON, default=list, comment='截图路径列表')
    related_links = Column(JSON, default=list, comment='相关链接 [{label, url}]')
    epic_id = Column(String(50), ForeignKey("epics.id", ondelete="SET NULL"), comment='所属史诗ID')
    sprint_id = Column(String(50), ForeignKey("sprints.id", ondelete="SET NULL"), comment='所属迭代ID')
    story_points = Column(Integer, comment='故事点')
    time_estimate = Column(Float, comment='预估工时(小时)')
    time_spent = Column(Float, comment='已用工时(小时)')
    due_date = Column(Date, comment='截止日期')
    resolution = Column(Text, comment='解决说明')
    resolved_at = Column(DateTime, comment='解决时间')

    # 关系
    project = relationship("Project", back_populates="issues")
    assignee = relationship("User", foreign_keys=[assigned_to])
    reporter = relationship("User", foreign_keys=[reported_by])
    sprint = relationship("Sprint", back_populates="issues")
    epic = relationship("Epic", back_populates="issues")
    comments = relationship("Comment", back_populates="issue", cascade="all, delete-orphan")
    labels = relationship("Label", secondary=issue_labels, order_by="Label.name")
    watchers = relationship("User", secondary=issue_watchers, order_by="User.name")

    def __repr__(self):
        return f"<Issue(id={self.id}, bug_id={self.bug_id}, status={self.status})>"
