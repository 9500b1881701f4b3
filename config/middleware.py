"""中间件配置模块

包含所有中间件的配置
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from utils.logging_middleware import RequestResponseLoggingMiddleware


def configure_middleware(app: FastAPI) -> None:
    """配置应用中间件"""
    # 请求响应日志中间件
    app.add_middleware(RequestResponseLoggingMiddleware, log_level=settings.LOG_LEVEL)

    # CORS中间件，最后添加的最先执行
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
