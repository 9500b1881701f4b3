"""后端 API 的 Python 客户端"""

from .auth_context import AuthContext
from .api_client import ApiClient, ApiError, SessionExpired

__all__ = ["AuthContext", "ApiClient", "ApiError", "SessionExpired"]
