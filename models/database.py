"""数据库连接模块

整个进程只创建一个 engine 和一个 SessionLocal，所有路由通过 get_db 注入会话
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import settings


def _build_engine(url: str):
    """根据连接串创建引擎，SQLite 需要额外参数"""
    if url.startswith("sqlite"):
        options = {}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # 内存库只存在于单个连接中，所有会话共享同一连接
            options["poolclass"] = StaticPool
        engine = create_engine(
            url,
            echo=settings.DATABASE_ECHO,
            connect_args={"check_same_thread": False},
            **options,
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        pool_pre_ping=True,
    )


def enable_sqlite_foreign_keys(engine):
    """SQLite 默认不校验外键，开启后 ON DELETE 规则才生效"""
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = _build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """数据库会话依赖"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
