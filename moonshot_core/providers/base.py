"""Provider 抽象接口。

ChatSession 不直接依赖具体的 HTTP 客户端，而是依赖此协议：
只要实现了 chat(api_key, messages, model, options)，
就可以作为会话的后端（测试中常用假的实现替代）。
"""

from typing import Optional, Protocol, Sequence

from moonshot_core.domain.models import ChatMessage, ChatOptions


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - chat(...): 执行一次非流式对话调用，返回选中的 ChatMessage。
    """

    name: str

    async def chat(
        self,
        api_key: str,
        messages: Sequence[ChatMessage],
        model: str,
        options: Optional[ChatOptions] = None,
    ) -> ChatMessage:
        ...
