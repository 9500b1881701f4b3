"""
枚举定义模块
枚举值即数据库中存储、接口中传输的字符串
"""
import enum


class UserRole(str, enum.Enum):
    """用户角色枚举"""
    ADMIN = "Admin"          # 管理员，可见全部项目
    QA = "QA"                # 测试人员
    DEVELOPER = "Developer"  # 开发人员


class UserStatus(str, enum.Enum):
    """用户状态枚举"""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ProjectStatus(str, enum.Enum):
    """项目状态枚举"""
    PLANNING = "Planning"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class IssueSeverity(str, enum.Enum):
    """缺陷严重程度枚举"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IssueStatus(str, enum.Enum):
    """缺陷状态枚举"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    FIXED = "Fixed"
    CLOSED = "Closed"
    REOPEN = "Reopen"


class IssuePriority(str, enum.Enum):
    """缺陷优先级枚举，P0 最高"""
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class SprintStatus(str, enum.Enum):
    """迭代状态枚举"""
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"


class EpicStatus(str, enum.Enum):
    """史诗状态枚举"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    DONE = "Done"
    CANCELLED = "Cancelled"


# 计入项目/史诗进度的缺陷状态
COMPLETED_ISSUE_STATUSES = (IssueStatus.FIXED, IssueStatus.CLOSED)
