"""
请求和响应日志中间件
用于记录API请求和响应的详细信息，方便调试
"""

import json
import logging
import os
import time
import uuid
from logging.handlers import RotatingFileHandler
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from config.settings import settings

# 配置日志格式
logger = logging.getLogger("API_Logger")

MASK = "***MASKED***"

SENSITIVE_HEADERS = {
    'authorization', 'cookie', 'x-api-key', 'x-auth-token',
    'password', 'secret', 'token'
}

SENSITIVE_FIELDS = {
    'password', 'passwd', 'secret', 'token', 'key',
    'authorization', 'auth', 'credential', 'private'
}


def _mask_sensitive_data(data):
    """隐藏敏感数据，递归处理嵌套结构"""
    if isinstance(data, dict):
        masked_data = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
                masked_data[key] = MASK
            else:
                masked_data[key] = _mask_sensitive_data(value)
        return masked_data
    if isinstance(data, list):
        return [_mask_sensitive_data(item) for item in data]
    return data


def _filter_headers(headers: dict) -> dict:
    """过滤敏感的请求头信息"""
    filtered = {}
    for key, value in headers.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_HEADERS):
            filtered[key] = MASK
        else:
            filtered[key] = value
    return filtered


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """请求响应日志中间件

    每个请求分配一个8位请求ID，敏感字段和请求头始终脱敏。
    调试模式只输出到控制台，非调试模式同时写入 logs/api.log。
    """

    def __init__(self, app, log_level: str = "INFO", debug_mode: Optional[bool] = None, log_dir: Optional[str] = None):
        super().__init__(app)
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.debug_mode = settings.DEBUG if debug_mode is None else debug_mode

        # 清除所有已存在的处理器，避免重复日志
        for handler in list(logger.handlers):
            logger.removeHandler(handler)

        logger.setLevel(self.log_level)
        logger.propagate = False

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        logger.addHandler(console_handler)

        if not self.debug_mode:
            log_file_path = os.path.join(log_dir or settings.LOG_DIR, "api.log")
            os.makedirs(os.path.dirname(log_file_path), exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 生成请求ID用于追踪
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.time()
        method = request.method
        url = str(request.url)
        client_ip = request.client.host if request.client else "unknown"

        request_body = None
        content_type = request.headers.get("content-type", "")
        if method in ["POST", "PUT", "PATCH"]:
            if content_type.startswith("multipart/form-data"):
                # 文件上传不读取请求体
                request_body = "<multipart form data>"
            else:
                body = await request.body()
                if body:
                    try:
                        request_body = _mask_sensitive_data(json.loads(body.decode('utf-8')))
                    except (json.JSONDecodeError, UnicodeDecodeError):
                        request_body = f"<binary data: {len(body)} bytes>"

        logger.info(f"[{request_id}] 📥 {method} {url} 客户端IP: {client_ip}")
        if not self.debug_mode:
            logger.info(f"[{request_id}] 请求头: {json.dumps(_filter_headers(dict(request.headers)), ensure_ascii=False)}")
        if request_body is not None:
            logger.info(f"[{request_id}] 请求体: {json.dumps(request_body, ensure_ascii=False)}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"[{request_id}] 请求处理异常: {str(e)}, 耗时: {process_time:.3f}s")
            raise

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        logger.info(f"[{request_id}] 📤 状态码: {response.status_code} 处理时间: {process_time:.3f}s")
        return response


def setup_logging(log_level: str = "INFO"):
    """设置日志配置"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
