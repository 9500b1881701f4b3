# 状态码常量定义

# 客户端错误状态码
BAD_REQUEST = "400"           # 请求参数错误
UNAUTHORIZED = "401"          # 未授权
FORBIDDEN = "403"             # 禁止访问
NOT_FOUND = "404"             # 资源不存在
METHOD_NOT_ALLOWED = "405"    # 方法不允许
CONFLICT = "409"              # 资源冲突
PAYLOAD_TOO_LARGE = "413"     # 请求体过大

# 服务器错误状态码
INTERNAL_ERROR = "500"        # 服务器内部错误

# 业务状态码（自定义）
BUSINESS_ERROR = "10000"      # 业务通用错误
VALIDATION_ERROR = "10001"    # 数据验证错误
DATABASE_ERROR = "10002"      # 数据库操作错误
AUTH_ERROR = "10003"          # 认证相关错误
PERMISSION_ERROR = "10004"    # 权限相关错误
RESOURCE_ERROR = "10005"      # 资源相关错误
FILE_ERROR = "10006"          # 文件操作错误

# HTTP 状态码到业务状态码的映射，供 HTTPException 统一处理使用
HTTP_STATUS_CODE_MAP = {
    400: VALIDATION_ERROR,
    401: AUTH_ERROR,
    403: PERMISSION_ERROR,
    404: NOT_FOUND,
    405: METHOD_NOT_ALLOWED,
    409: CONFLICT,
    413: PAYLOAD_TOO_LARGE,
    500: INTERNAL_ERROR,
}


def business_code_for_status(status_code: int) -> str:
    """根据HTTP状态码获取业务状态码"""
    return HTTP_STATUS_CODE_MAP.get(status_code, BUSINESS_ERROR)
