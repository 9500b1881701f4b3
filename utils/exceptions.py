"""统一异常处理模块

业务代码只抛出这里定义的异常，全局异常处理器把它们转换为
{"error", "code", "timestamp"[, "details"]} 形式的错误响应。
每个子类通过类属性声明自己的 HTTP 状态码、业务状态码和默认错误信息。
"""
from typing import Any, Iterable, List, Optional

from utils.status_codes import (
    AUTH_ERROR, BUSINESS_ERROR, CONFLICT, DATABASE_ERROR, FILE_ERROR,
    PERMISSION_ERROR, RESOURCE_ERROR, VALIDATION_ERROR
)


class BusinessException(Exception):
    """业务异常基类，data 在非生产环境作为 details 返回"""

    status_code: int = 400
    code: str = BUSINESS_ERROR
    default_message: str = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        data: Any = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.data = data
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationException(BusinessException):
    """请求数据不合法，fields 为出错的字段名（接口字段名）"""

    status_code = 400
    code = VALIDATION_ERROR
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, fields: Optional[Iterable[str]] = None, data: Any = None):
        self.fields: List[str] = list(fields or [])
        if data is None and self.fields:
            data = {"fields": self.fields}
        super().__init__(message, data=data)

    @classmethod
    def null_field(cls, field: str) -> "ValidationException":
        return cls(f"{field} cannot be null", fields=[field])


class DatabaseException(BusinessException):
    status_code = 500
    code = DATABASE_ERROR
    default_message = "Internal server error"


class AuthenticationException(BusinessException):
    status_code = 401
    code = AUTH_ERROR
    default_message = "Invalid credentials"


class PermissionException(BusinessException):
    status_code = 403
    code = PERMISSION_ERROR
    default_message = "Insufficient permissions"


class ResourceNotFoundException(BusinessException):
    status_code = 404
    code = RESOURCE_ERROR
    default_message = "Resource not found"


class ResourceConflictException(BusinessException):
    status_code = 409
    code = CONFLICT
    default_message = "Resource already exists"


class FileOperationException(BusinessException):
    """上传文件不合法，超出大小限制时使用 413"""

    status_code = 400
    code = FILE_ERROR
    default_message = "Invalid file"
