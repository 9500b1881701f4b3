from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any
import json

from models.enums import UserRole


class CamelModel(BaseModel):
    """接口字段使用驼峰命名，Python 侧使用下划线命名"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(CamelModel):
    """请求体基类，空字符串按未填写处理"""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value


def parse_json_list(value):
    """表单提交时列表字段是 JSON 字符串，这里统一解析"""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            # 逗号分隔的标签名
            return [item.strip() for item in value.split(",") if item.strip()]
    return value


def missing_fields(errors: List[dict]) -> List[str]:
    """从校验错误中找出未填写的字段名"""
    fields = []
    for error in errors:
        if error.get("type") == "missing" or error.get("input", 0) in (None, ""):
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            if loc:
                fields.append(".".join(loc))
    return fields


class UserSummary(CamelModel):
    """嵌套在其他资源中的用户摘要"""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[UserRole] = None


class MessageResponse(BaseModel):
    """仅含提示信息的响应"""
    message: str = Field(..., description="提示信息")


def validation_message(errors: List[dict]) -> str:
    """把校验错误整理成一句话"""
    missing = missing_fields(errors)
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if any(error.get("type") == "missing" for error in errors):
        return "Missing required fields"
    parts = []
    for error in errors:
        loc = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        parts.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"
