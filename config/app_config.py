"""应用配置模块

负责创建FastAPI应用实例和配置路由
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from config.settings import settings
from models.database import SessionLocal, engine
from utils.file_storage import UPLOAD_URL_PREFIX, ensure_upload_dir
from utils.init_default_data import init_database
from utils.logging_middleware import setup_logging
from utils.snowflake import init_snowflake

# 导入路由
from routers import (
    auth, users, projects, issues, activities, comments,
    sprints, epics, labels, issue_types
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期：启动时建表并写入默认数据"""
    init_snowflake(settings.MACHINE_ID)
    if settings.INIT_DB_ON_STARTUP:
        init_database(engine, SessionLocal)
    logger.info(f"🚀 {settings.APP_NAME} 已启动 (环境: {settings.ENVIRONMENT})")
    yield
    engine.dispose()
    logger.info("服务已停止")


def create_app() -> FastAPI:
    """创建FastAPI应用实例"""
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # 上传文件静态访问，目录需在挂载前存在
    upload_dir = ensure_upload_dir()
    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(upload_dir)), name="uploads")

    return app


def configure_routes(app: FastAPI) -> None:
    """配置应用路由"""
    # API路由
    app.include_router(auth.router, prefix="/api/auth", tags=["认证"])
    app.include_router(users.router, prefix="/api/users", tags=["用户管理"])
    app.include_router(projects.router, prefix="/api/projects", tags=["项目管理"])
    app.include_router(issues.router, prefix="/api/issues", tags=["缺陷管理"])
    app.include_router(activities.router, prefix="/api/activities", tags=["项目动态"])
    app.include_router(comments.router, prefix="/api/comments", tags=["评论管理"])
    app.include_router(sprints.router, prefix="/api/sprints", tags=["迭代管理"])
    app.include_router(epics.router, prefix="/api/epics", tags=["史诗管理"])
    app.include_router(labels.router, prefix="/api/labels", tags=["标签管理"])
    app.include_router(issue_types.router, prefix="/api/issue-types", tags=["缺陷类型"])

    # 健康检查
    @app.get("/health")
    async def health_check():
        return {"status": "OK", "message": "Server is running"}
