"""
关联表定义模块
包含多对多关系的关联表定义
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint

from .base import utc_now
from .database import Base


# 项目成员关联表
project_members = Table(
    'project_members',
    Base.metadata,
    Column('project_id', String(50), ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True, comment='项目ID'),
    Column('user_id', String(50), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, comment='用户ID'),
    Column('role', String(50), default='Member', comment='项目内角色'),
    Column('joined_at', DateTime, default=utc_now, comment='加入时间'),
)

# 缺陷关注人关联表
issue_watchers = Table(
    'issue_watchers',
    Base.metadata,
    Column('issue_id', String(50), ForeignKey('issues.id', ondelete='CASCADE'), primary_key=True, comment='缺陷ID'),
    Column('user_id', String(50), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, comment='用户ID'),
    Column('added_at', DateTime, default=utc_now, comment='关注时间'),
)

# 缺陷标签关联表
issue_labels = Table(
    'issue_labels',
    Base.metadata,
    Column('issue_id', String(50), ForeignKey('issues.id', ondelete='CASCADE'), primary_key=True, comment='缺陷ID'),
    Column('label_id', Integer, ForeignKey('labels.id', ondelete='CASCADE'), primary_key=True, comment='标签ID'),
    Column('created_at', DateTime, default=utc_now, comment='创建时间'),
    UniqueConstraint('issue_id', 'label_id'),
)
