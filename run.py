#!/usr/bin/env python3
"""
项目启动脚本
"""

import uvicorn

from config.settings import settings


def main():
    """启动FastAPI应用"""
    print(f"启动服务器...")
    print(f"地址: http://{settings.HOST}:{settings.PORT}")
    print(f"调试模式: {settings.DEBUG}")
    print(f"API文档: http://{settings.HOST}:{settings.PORT}/docs")

    # 启动服务器
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )


if __name__ == "__main__":
    main()
