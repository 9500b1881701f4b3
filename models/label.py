"""
标签与缺陷类型模型模块
二者都是全局字典表，使用自增整数ID
"""
from sqlalchemy import Column, Integer, String, Text
from .database import Base
from .base import TimestampMixin


class Label(Base, TimestampMixin):
    """标签表模型"""
    __tablename__ = "labels"

    id = Column(Integer, primary_key=True, autoincrement=True, comment='标签ID')
    name = Column(String(100), unique=True, nullable=False, comment='标签名称')
    color = Column(String(20), nullable=False, comment='标签颜色')
    description = Column(Text, comment='标签说明')


class IssueType(Base, TimestampMixin):
    """缺陷类型表模型"""
    __tablename__ = "issue_types"

    id = Column(Integer, primary_key=True, autoincrement=True, comment='类型ID')
    name = Column(String(100), unique=True, nullable=False, comment='类型名称')
    icon = Column(String(100), default='task_alt', comment='图标名称')
    color = Column(String(20), default='#6366f1', comment='类型颜色')
    description = Column(Text, comment='类型说明')
