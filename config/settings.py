"""应用设置模块

所有运行参数都从环境变量或 .env 文件读取
"""
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # 应用配置
    APP_NAME: str = "QA Bugtracking Tool API"
    APP_DESCRIPTION: str = "Multi-role QA bug tracking backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    INIT_DB_ON_STARTUP: bool = True
    MACHINE_ID: int = 1

    # 服务器配置
    HOST: str = "127.0.0.1"
    PORT: int = 5000
    FRONTEND_URL: Optional[str] = None

    # 数据库配置，优先级：DATABASE_URL > SUPABASE_DB_URL > DB_*
    DATABASE_URL: Optional[str] = None
    SUPABASE_DB_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "qa_bugtracking"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "password"
    DB_POOL_SIZE: int = 10
    DATABASE_ECHO: bool = False

    # JWT配置
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    # 文件上传配置
    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    MAX_UPLOAD_FILES: int = 10

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def database_url(self) -> str:
        """解析最终使用的数据库连接串"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.SUPABASE_DB_URL:
            return self.SUPABASE_DB_URL
        return (
            f"postgresql+psycopg2://{quote_plus(self.DB_USER)}:{quote_plus(self.DB_PASSWORD)}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def cors_origins(self) -> list[str]:
        if self.FRONTEND_URL:
            return [origin.strip() for origin in self.FRONTEND_URL.split(",") if origin.strip()]
        return ["*"]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# 全局设置实例
settings = Settings()
