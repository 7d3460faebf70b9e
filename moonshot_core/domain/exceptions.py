"""统一业务异常模型。

SDK 对外抛出的错误都继承自 BusinessError，
便于调用方统一捕获；核心逻辑中不做任何自动重试。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moonshot_core.domain.error_catalog import ClassifiedError


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "INVALID_ARGUMENT"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 field、model 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class ValidationError(BusinessError):
    """参数或配置校验失败，发生在任何网络请求之前。"""


class UnsupportedFeatureError(BusinessError):
    """请求了当前版本不支持的功能（如流式输出）。"""


class ParseError(BusinessError):
    """服务端返回了无法识别的响应结构。"""


class ApiError(BusinessError):
    """服务端返回非 2xx 时抛出，携带分类后的错误信息。"""

    def __init__(self, error: "ClassifiedError", http_status: int, **extra):
        self.error = error
        super().__init__(
            code="API_ERROR",
            message=(
                f"HTTP Status Code: {error.code}\n"
                f"Error Type      : {error.type}\n"
                f"Error Message   : {error.message}\n"
                f"Description(CN) : {error.description}"
            ),
            http_status=http_status,
            **extra,
        )


class RateLimitError(ApiError):
    """HTTP 429：限流或额度不足，重试/退避由调用方决定。"""
