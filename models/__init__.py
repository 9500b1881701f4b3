"""
模型模块初始化文件
提供统一的导入接口，导入本包即注册全部表
"""

# 导入数据库基础配置
from .database import Base, engine, SessionLocal, get_db

# 导入枚举类型
from .enums import (
    UserRole, UserStatus,
    ProjectStatus,
    IssueSeverity, IssueStatus, IssuePriority,
    SprintStatus, EpicStatus,
    COMPLETED_ISSUE_STATUSES,
)

# 导入关联表
from .associations import project_members, issue_watchers, issue_labels

# 导入模型类
from .user import User
from .project import Project
from .issue import Issue
from .comment import Comment
from .sprint import Sprint
from .epic import Epic
from .activity import Activity
from .label import Label, IssueType

__all__ = [
    # 数据库配置
    'Base', 'engine', 'SessionLocal', 'get_db',

    # 枚举类型
    'UserRole', 'UserStatus',
    'ProjectStatus',
    'IssueSeverity', 'IssueStatus', 'IssuePriority',
    'SprintStatus', 'EpicStatus',
    'COMPLETED_ISSUE_STATUSES',

    # 关联表
    'project_members', 'issue_watchers', 'issue_labels',

    # 模型类
    'User', 'Project', 'Issue', 'Comment', 'Sprint', 'Epic', 'Activity', 'Label', 'IssueType',
]
