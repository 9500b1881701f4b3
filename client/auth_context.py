"""
客户端认证上下文
保存当前令牌和用户，会话失效时通知订阅者（例如界面跳转到登录页）
"""
import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# 会话失效原因
REASON_LOGOUT = "logout"
REASON_EXPIRED = "session_expired"

Listener = Callable[[str], None]


class AuthContext:
    """令牌和当前用户的唯一来源"""

    def __init__(self, token: Optional[str] = None, current_user: Optional[dict] = None):
        self._token = token
        self._current_user = current_user
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def current_user(self) -> Optional[dict]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_session(self, token: str, current_user: Optional[dict] = None) -> None:
        with self._lock:
            self._token = token
            self._current_user = current_user

    def clear(self, reason: str = REASON_LOGOUT) -> None:
        """清除会话并通知订阅者，已是未登录状态时不重复通知"""
        with self._lock:
            had_session = self._token is not None
            self._token = None
            self._current_user = None
            listeners = list(self._listeners)

        if not had_session:
            return
        for listener in listeners:
            try:
                listener(reason)
            except Exception:
                logger.exception("认证状态监听器执行失败")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """订阅会话失效事件，返回取消订阅函数"""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe
