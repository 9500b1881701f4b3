"""API路由模块，每个资源一个路由文件，由 config.app_config 统一挂载"""
