"""服务层模块初始化文件

提供服务层的统一导入接口
"""

from .issue_service import IssueService
from .project_service import ProjectService

__all__ = [
    "IssueService",
    "ProjectService",
]
