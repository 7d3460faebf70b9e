"""Moonshot Core 顶层包。

该包提供 Moonshot 对话服务的客户端 SDK：
模型列表、余额查询、token 估算、对话请求（含参数校验与
max_tokens 自动计算）、错误分类以及多轮对话会话。
"""

from moonshot_core.agents.chat_session import ChatSession
from moonshot_core.domain.error_catalog import ClassifiedError, ErrorDescriptor, list_errors
from moonshot_core.domain.exceptions import (
    ApiError,
    BusinessError,
    NetworkError,
    ParseError,
    RateLimitError,
    UnsupportedFeatureError,
    ValidationError,
)
from moonshot_core.domain.models import (
    Balance,
    ChatChoice,
    ChatMessage,
    ChatOptions,
    ChatResult,
    MaxTokenPolicy,
    ModelInfo,
    ResponseFormat,
)
from moonshot_core.providers.moonshot_client import MoonshotClient
from moonshot_core.providers.selector import ChoiceSelector

__all__ = [
    "ApiError",
    "Balance",
    "BusinessError",
    "ChatChoice",
    "ChatMessage",
    "ChatOptions",
    "ChatResult",
    "ChatSession",
    "ChoiceSelector",
    "ClassifiedError",
    "ErrorDescriptor",
    "MaxTokenPolicy",
    "ModelInfo",
    "MoonshotClient",
    "NetworkError",
    "ParseError",
    "RateLimitError",
    "ResponseFormat",
    "UnsupportedFeatureError",
    "ValidationError",
    "list_errors",
]
