"""
稀疏更新工具模块

PUT 接口只更新请求体中出现的字段：未出现的字段保持原值，显式传 null 的字段置空。
所有资源的更新接口共用这里的实现，可更新字段由调用方通过白名单显式声明。
"""
import logging
from typing import Any, Dict, Iterable, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from models.base import utc_now
from utils.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)


class _Absent:
    """表示请求体中未出现的字段，与 None（显式 null）区分"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False


ABSENT = _Absent()


def reject_null_fields(payload: Dict[str, Any], fields: Iterable[str]) -> None:
    """不可为空的字段显式传 null 时报 400，而不是留给数据库约束报错"""
    for field in fields:
        if field in payload and payload[field] is None:
            raise ValidationException.null_field(field)


def build_partial_update(pairs: Iterable[Tuple[str, Any]], allow_empty: bool = False) -> Dict[str, Any]:
    """
    根据 (列名, 值) 对生成赋值字典

    参数:
        pairs: 有序的 (列名, 值) 对，值为 ABSENT 表示该字段未提供
        allow_empty: 为 True 时没有任何字段也不报错

    返回:
        按输入顺序排列的 {列名: 值}

    异常:
        ValidationException: 没有任何字段需要更新
    """
    assignments = {}
    for column, value in pairs:
        if value is ABSENT:
            continue
        assignments[column] = value

    if not assignments and not allow_empty:
        raise ValidationException("No fields to update")
    return assignments


def apply_sparse_update(
    db: Session,
    model,
    row_id: Any,
    payload: Dict[str, Any],
    field_map: Dict[str, str],
    not_found_message: str = "Resource not found",
    allow_empty: bool = False,
) -> Dict[str, Any]:
    """
    对单行执行稀疏更新

    参数:
        db: 数据库会话，本函数不提交事务
        model: ORM 模型类
        row_id: 主键
        payload: 请求字段（JSON 字段名 -> 值），只包含客户端实际传入的字段
        field_map: 可更新字段白名单（JSON 字段名 -> 列名），不在白名单中的字段被忽略
        not_found_message: 影响行数为 0 时的错误信息
        allow_empty: 为 True 时允许没有列需要更新（仍会刷新 updated_at）

    返回:
        实际写入的 {列名: 值}
    """
    pairs = [(column, payload.get(field, ABSENT)) for field, column in field_map.items()]
    assignments = build_partial_update(pairs, allow_empty=allow_empty)
    assignments["updated_at"] = utc_now()

    statement = (
        update(model)
        .where(model.id == row_id)
        .values(**assignments)
        .execution_options(synchronize_session="fetch")
    )
    result = db.execute(statement)
    if result.rowcount == 0:
        raise ResourceNotFoundException(not_found_message)

    logger.debug(f"{model.__tablename__} {row_id} 更新字段: {list(assignments)}")
    return assignments
