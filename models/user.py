"""
用户模型模块
包含用户相关的数据模型定义
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from .database import Base
from .base import TimestampMixin, enum_type
from .enums import UserRole, UserStatus
from .associations import project_members
from utils.snowflake import generate_user_id


class User(Base, TimestampMixin):
    """用户表模型"""
    __tablename__ = "users"

    id = Column(String(50), primary_key=True, index=True, default=generate_user_id, comment='用户ID，格式：user-雪花算法ID')
    name = Column(String(255), nullable=False, comment='用户姓名')
    email = Column(String(255), unique=True, index=True, nullable=False, comment='邮箱地址，唯一标识')
    password = Column(String(255), nullable=False, comment='bcrypt密码哈希，不对外返回')
    role = Column(enum_type(UserRole, 'user_role'), nullable=False, default=UserRole.DEVELOPER, comment='系统角色')
    department = Column(String(255), comment='所属部门')
    phone = Column(String(50), comment='手机号码')
    status = Column(enum_type(UserStatus, 'user_status'), nullable=False, default=UserStatus.ACTIVE, comment='账号状态')
    avatar = Column(String(500), comment='头像URL地址')
    last_active = Column(DateTime, comment='最后活跃时间')

    # 关系
    projects = relationship("Project", secondary=project_members, back_populates="members")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
