"""异常处理器配置模块

配置全局异常处理器，所有错误统一返回 {"error", "code", "timestamp"}
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from schemas.base import missing_fields, validation_message
from utils.exceptions import BusinessException
from utils.response_utils import error_response
from utils.status_codes import (
    CONFLICT, DATABASE_ERROR, INTERNAL_ERROR, NOT_FOUND, VALIDATION_ERROR, business_code_for_status
)

logger = logging.getLogger(__name__)


def configure_exception_handlers(app: FastAPI) -> None:
    """配置全局异常处理器"""

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        """业务异常处理器"""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} 业务异常: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.code, details=exc.data)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """HTTP异常处理器，同时处理 FastAPI 的 HTTPException"""
        detail = exc.detail
        if isinstance(detail, dict):
            message = detail.get("message", str(detail))
        else:
            message = str(detail)

        # 路由未匹配
        if exc.status_code == 404 and message == "Not Found":
            return error_response(404, "Route not found", NOT_FOUND)

        return error_response(
            exc.status_code,
            message,
            business_code_for_status(exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求参数校验失败统一返回 400"""
        errors = exc.errors()
        missing = missing_fields(errors)
        details = {"fields": missing} if missing else None
        return error_response(400, validation_message(errors), VALIDATION_ERROR, details=details)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        """唯一约束、外键约束冲突返回 409"""
        logger.warning(f"{request.method} {request.url.path} 数据约束冲突: {exc.orig}")
        details = None if settings.is_production else str(exc.orig)
        return error_response(409, "Resource conflicts with existing data", CONFLICT, details=details)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        """其他数据库异常"""
        logger.exception(f"{request.method} {request.url.path} 数据库异常")
        details = None if settings.is_production else str(exc)
        return error_response(500, "Internal server error", DATABASE_ERROR, details=details)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """通用异常处理器，非生产环境附带异常信息"""
        logger.exception(f"{request.method} {request.url.path} 未处理的异常")
        details = None if settings.is_production else str(exc)
        return error_response(500, "Internal server error", INTERNAL_ERROR, details=details)
