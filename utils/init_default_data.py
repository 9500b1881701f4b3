"""
默认数据初始化模块
在系统启动时建表，并创建默认管理员、默认标签和默认缺陷类型，重复执行不会产生重复数据
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Base, IssueType, Label, User, UserRole, UserStatus
from utils.auth import get_password_hash
from utils.exceptions import DatabaseException

logger = logging.getLogger(__name__)

# 默认管理员账户
DEFAULT_ADMIN = {
    "name": "Admin User",
    "email": "admin@example.com",
    "password": "admin123",
    "role": UserRole.ADMIN,
    "department": "Administration",
}

# 默认标签
DEFAULT_LABELS = [
    {"name": "bug", "color": "#d73a49", "description": "Something isn't working"},
    {"name": "enhancement", "color": "#a2eeef", "description": "New feature or request"},
    {"name": "documentation", "color": "#0075ca", "description": "Improvements or additions to documentation"},
    {"name": "question", "color": "#cc317c", "description": "Further information is requested"},
    {"name": "wontfix", "color": "#ffffff", "description": "This will not be worked on"},
    {"name": "duplicate", "color": "#cfd3d7", "description": "This issue or pull request already exists"},
    {"name": "good first issue", "color": "#7057ff", "description": "Good for newcomers"},
    {"name": "help wanted", "color": "#008672", "description": "Extra attention is needed"},
    {"name": "invalid", "color": "#e4e669", "description": "This doesn't seem right"},
    {"name": "priority:high", "color": "#d93f0b", "description": "High priority issue"},
    {"name": "priority:low", "color": "#0e8a16", "description": "Low priority issue"},
]

# 默认缺陷类型
DEFAULT_ISSUE_TYPES = [
    {"name": "Bug", "icon": "bug_report", "color": "#d73a49", "description": "Something isn't working as expected"},
    {"name": "Enhancement", "icon": "lightbulb", "color": "#a2eeef", "description": "New feature or improvement request"},
    {"name": "Correction", "icon": "build", "color": "#0075ca", "description": "Fix or correction to existing functionality"},
]


def create_default_admin(db: Session) -> User:
    """创建默认管理员"""
    existing_user = db.query(User).filter(User.email == DEFAULT_ADMIN["email"]).first()
    if existing_user:
        logger.info(f"管理员 {DEFAULT_ADMIN['email']} 已存在，跳过创建")
        return existing_user

    user = User(
        name=DEFAULT_ADMIN["name"],
        email=DEFAULT_ADMIN["email"],
        password=get_password_hash(DEFAULT_ADMIN["password"]),
        role=DEFAULT_ADMIN["role"],
        department=DEFAULT_ADMIN["department"],
        status=UserStatus.ACTIVE,
        avatar=f"https://api.dicebear.com/7.x/avataaars/svg?seed={DEFAULT_ADMIN['name']}",
    )
    db.add(user)
    db.flush()

    logger.info(f"创建默认管理员成功: {user.email} (ID: {user.id})")
    return user


def create_default_labels(db: Session) -> int:
    """创建缺失的默认标签，返回新建数量"""
    existing = {name for (name,) in db.query(Label.name).all()}
    created = 0
    for label_config in DEFAULT_LABELS:
        if label_config["name"] in existing:
            continue
        db.add(Label(**label_config))
        created += 1
    return created


def create_default_issue_types(db: Session) -> int:
    """创建缺失的默认缺陷类型，返回新建数量"""
    existing = {name.lower() for (name,) in db.query(IssueType.name).all()}
    created = 0
    for type_config in DEFAULT_ISSUE_TYPES:
        if type_config["name"].lower() in existing:
            continue
        db.add(IssueType(**type_config))
        created += 1
    return created


def init_default_data(db: Session, with_admin: bool = True):
    """初始化默认数据"""
    logger.info("开始初始化默认数据...")
    try:
        if with_admin:
            create_default_admin(db)
        labels = create_default_labels(db)
        issue_types = create_default_issue_types(db)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("初始化默认数据时发生错误")
        raise DatabaseException("Failed to initialize default data", data=str(e)) from e

    logger.info(f"默认数据初始化完成，新建标签 {labels} 个，新建缺陷类型 {issue_types} 个")


def init_database(engine, session_factory):
    """建表并写入默认数据"""
    Base.metadata.create_all(bind=engine)
    logger.info("数据库表结构已就绪")

    db = session_factory()
    try:
        init_default_data(db)
    finally:
        db.close()
