from datetime import datetime, timezone
from typing import Any, Optional

from fastapi.responses import JSONResponse


def format_timestamp(dt: Optional[datetime] = None) -> str:
    """
    格式化时间戳为ISO 8601格式

    参数:
        dt: datetime对象，如果为None则使用当前UTC时间

    返回:
        格式化后的时间字符串，例如 "2024-05-01T08:00:00.000Z"
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def error_body(message: str, code: str, details: Any = None) -> dict:
    """
    生成统一错误响应体

    参数:
        message: 错误信息
        code: 业务状态码
        details: 附加信息，仅在非生产环境下返回
    """
    body = {
        "error": message,
        "code": code,
        "timestamp": format_timestamp(),
    }
    if details is not None:
        body["details"] = details
    return body


def error_response(
    status_code: int,
    message: str,
    code: str,
    details: Any = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """生成错误响应"""
    return JSONResponse(
        status_code=status_code,
        content=error_body(message, code, details),
        headers=headers,
    )
