"""配置模块

包含应用设置、应用配置、中间件配置和异常处理配置。
包初始化只导出设置对象，应用相关模块按需从子模块导入，避免与 models 循环导入。
"""

from .settings import settings

__all__ = ["settings"]
