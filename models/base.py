"""模型基类模块

包含模型的混入类和公共列类型
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum


def utc_now() -> datetime:
    """当前UTC时间（naive，微秒精度）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_type(enum_cls, name: str) -> Enum:
    """按枚举值（而非成员名）存储的枚举列类型"""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class TimestampMixin:
    """时间戳混入类"""

    created_at = Column(DateTime, default=utc_now, comment='创建时间')
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, comment='更新时间')
