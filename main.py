import uvicorn

# 导入配置模块
from config.settings import settings
from config.app_config import create_app, configure_routes
from config.middleware import configure_middleware
from config.exception_handlers import configure_exception_handlers

# 创建FastAPI应用
app = create_app()

# 配置中间件
configure_middleware(app)

# 配置异常处理器
configure_exception_handlers(app)

# 配置路由
configure_routes(app)

if __name__ == "__main__":
    print(f"🚀 启动 {settings.APP_NAME}...")
    print(f"📍 地址: http://{settings.HOST}:{settings.PORT}")
    print(f"🔧 调试模式: {settings.DEBUG}")
    print(f"📚 API文档: http://{settings.HOST}:{settings.PORT}/docs")

    if settings.DEBUG:
        # 开发模式使用import string以支持reload
        uvicorn.run(
            "main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=True,
            log_level="debug"
        )
    else:
        # 生产模式直接传递app对象
        uvicorn.run(
            app,
            host=settings.HOST,
            port=settings.PORT,
            log_level="info"
        )
