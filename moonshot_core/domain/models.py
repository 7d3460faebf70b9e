"""统一的对话与结果数据模型。

本模块定义 SDK 内部与 Moonshot API 之间交换的标准数据结构：

- ChatMessage: 一条对话消息（user/assistant/system/...）。
- ChatOptions: 一次聊天请求的可选参数，字段缺省表示使用服务端默认值。
- ChatResult: 从响应 JSON 解析后的完整结果（含多个候选 ChatChoice）。
- Balance / ModelInfo: 余额与模型列表接口的返回结构。

Provider 层负责在这些模型与 API 的 snake_case JSON 之间做转换。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ResponseFormat(str, Enum):
    """response_format 字段取值。"""

    TEXT = "text"
    JSON_OBJECT = "json_object"

    def to_payload(self) -> Dict[str, str]:
        return {"type": self.value}


class MaxTokenPolicy(str, Enum):
    """max_tokens 缺省时的处理策略。

    - DEFAULT: 不发送 max_tokens，由服务端决定。
    - MAX: 根据模型容量与输入 token 数自动计算可用的最大输出长度。
    """

    DEFAULT = "default"
    MAX = "max"


@dataclass
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。

    role 为开放字符串（如 "user"、"assistant"、"system"），
    会话中的消息顺序有意义，必须保持。
    """

    role: str
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatOptions:
    """聊天请求的可选参数。

    每个字段都可以独立缺省（None），缺省字段不会出现在请求体中。
    取值范围由 request_builder.validate_options 在发请求前校验。
    """

    max_tokens: Optional[int] = None
    max_token_policy: MaxTokenPolicy = MaxTokenPolicy.DEFAULT
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    n: Optional[int] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    response_format: Optional[ResponseFormat] = None
    stop: Optional[Sequence[str]] = None
    stream: Optional[bool] = None


@dataclass
class ChatUsage:
    """服务端返回的 token 统计信息。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答。finish_reason 为 "stop" 表示自然结束。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次 chat/completions 调用的完整结果。

    - choices: 1..n 个候选回答。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试。
    """

    id: Optional[str]
    model: Optional[str]
    created: Optional[int]
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None


@dataclass
class Balance:
    """账户余额（单位：元）。"""

    available_balance: float
    voucher_balance: float
    cash_balance: float


@dataclass
class ModelPermission:
    id: Optional[str] = None
    object: Optional[str] = None
    created: int = 0
    allow_create_engine: bool = False
    allow_sampling: bool = False
    allow_logprobs: bool = False
    allow_search_indices: bool = False
    allow_view: bool = False
    allow_fine_tuning: bool = False
    organization: Optional[str] = None
    group: Optional[str] = None
    is_blocking: bool = False


@dataclass
class ModelInfo:
    """/models 接口返回的单个模型描述。"""

    id: str
    object: Optional[str] = None
    created: int = 0
    owned_by: Optional[str] = None
    root: Optional[str] = None
    parent: Optional[str] = None
    permission: List[ModelPermission] = field(default_factory=list)
    raw: Optional[Dict[str, Any]] = None
