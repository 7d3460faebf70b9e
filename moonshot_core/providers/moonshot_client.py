"""Moonshot Provider 客户端。

本模块负责：

1. 接收 ChatMessage 列表与 ChatOptions。
2. 校验参数并构造 Moonshot 的 HTTP 请求体（request_builder）。
3. 通过 MoonshotTransport 发送请求，错误由 error_classifier 分类。
4. 将响应 JSON 解析为 ChatResult / Balance / ModelInfo，
   并由 ChoiceSelector 从多个候选中选出一条消息。

所有方法都要求显式传入 api_key，客户端自身不保存任何凭证。
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from moonshot_core.config.settings import Settings, settings as default_settings
from moonshot_core.domain.error_catalog import ErrorDescriptor, list_errors
from moonshot_core.domain.exceptions import ParseError
from moonshot_core.domain.models import (
    Balance,
    ChatChoice,
    ChatMessage,
    ChatOptions,
    ChatResult,
    ChatUsage,
    ModelInfo,
    ModelPermission,
)
from moonshot_core.providers.registry import MOONSHOT_CONFIG
from moonshot_core.providers.request_builder import build_chat_payload
from moonshot_core.providers.selector import ChoiceSelector
from moonshot_core.providers.transport import MoonshotTransport, RequestContext


def _parse_error(message: str) -> ParseError:
    return ParseError(code="PARSE_ERROR", message=message, http_status=502)


class MoonshotClient:
    """Moonshot 提供方客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - chat: 对外统一调用入口，返回选中的 ChatMessage。
    """

    name = "moonshot"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[MoonshotTransport] = None,
        selector: Optional[ChoiceSelector] = None,
    ):
        self._settings = settings or default_settings
        base = getattr(self._settings, "moonshot_base_url", None) or MOONSHOT_CONFIG.base_url
        self._transport = transport or MoonshotTransport(base, timeout=self._settings.http_timeout)
        self._selector = selector or ChoiceSelector()
        self._endpoints = MOONSHOT_CONFIG.endpoints

    async def __aenter__(self) -> "MoonshotClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    @staticmethod
    def list_errors() -> Tuple[ErrorDescriptor, ...]:
        return list_errors()

    async def list_models(self, api_key: str) -> List[ModelInfo]:
        data = await self._transport.get_json(self._endpoints.models, RequestContext(api_key))
        return [self._parse_model(item) for item in data.get("data") or []]

    async def list_model_ids(self, api_key: str) -> List[str]:
        return [m.id for m in await self.list_models(api_key)]

    async def query_balance(self, api_key: str) -> Balance:
        data = await self._transport.get_json(self._endpoints.balance, RequestContext(api_key))
        try:
            raw = data["data"]
            return Balance(
                available_balance=float(raw["available_balance"]),
                voucher_balance=float(raw["voucher_balance"]),
                cash_balance=float(raw["cash_balance"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise _parse_error(f"unexpected balance response: {e!r}")

    async def estimate_token_count(self, api_key: str, model: str, messages: Sequence[ChatMessage]) -> int:
        payload = {"model": model, "messages": [m.to_payload() for m in messages]}
        data = await self._transport.post_json(
            self._endpoints.estimate_token_count, payload, RequestContext(api_key)
        )
        try:
            return int(data["data"]["total_tokens"])
        except (KeyError, TypeError, ValueError) as e:
            raise _parse_error(f"unexpected token count response: {e!r}")

    async def create_chat_completion(
        self,
        api_key: str,
        messages: Sequence[ChatMessage],
        model: str,
        options: Optional[ChatOptions] = None,
    ) -> ChatResult:
        """执行一次非流式对话调用，返回包含全部候选的 ChatResult。"""

        async def count_tokens(m: str, msgs: Sequence[ChatMessage]) -> int:
            return await self.estimate_token_count(api_key, m, msgs)

        payload = await build_chat_payload(model, messages, options, count_tokens)
        data = await self._transport.post_json(self._endpoints.chat_completions, payload, RequestContext(api_key))
        return self._parse_response(data)

    async def chat(
        self,
        api_key: str,
        messages: Sequence[ChatMessage],
        model: str,
        options: Optional[ChatOptions] = None,
    ) -> ChatMessage:
        """执行一次对话并返回选中的那条消息。"""

        result = await self.create_chat_completion(api_key, messages, model, options)
        return self._selector.select(result.choices)

    def _parse_response(self, data: Dict[str, Any]) -> ChatResult:
        """将原始响应 JSON 解析为 ChatResult。"""

        raw_choices = data.get("choices")
        if not isinstance(raw_choices, list):
            raise _parse_error("response has no choices array")
        choices: List[ChatChoice] = []
        for i, ch in enumerate(raw_choices):
            msg = ch.get("message") if isinstance(ch, dict) else None
            if not isinstance(msg, dict):
                raise _parse_error(f"choice {i} has no message")
            choices.append(
                ChatChoice(
                    index=ch.get("index", i),
                    message=ChatMessage(role=msg.get("role") or "assistant", content=msg.get("content") or ""),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        usage_raw = data.get("usage") or {}
        if not isinstance(usage_raw, dict):
            raise _parse_error(f"unexpected usage: {usage_raw!r}")
        usage = None
        if usage_raw:
            usage = ChatUsage(
                prompt_tokens=usage_raw.get("prompt_tokens", 0),
                completion_tokens=usage_raw.get("completion_tokens", 0),
                total_tokens=usage_raw.get("total_tokens", 0),
            )
        return ChatResult(
            id=data.get("id"),
            model=data.get("model"),
            created=data.get("created"),
            choices=choices,
            usage=usage,
            raw=data,
        )

    @staticmethod
    def _parse_model(item: Dict[str, Any]) -> ModelInfo:
        if not isinstance(item, dict) or not item.get("id"):
            raise _parse_error(f"unexpected model descriptor: {item!r}")
        raw_permissions = item.get("permission") or []
        if not isinstance(raw_permissions, list):
            raise _parse_error(f"unexpected permission list: {raw_permissions!r}")
        permissions = [
            ModelPermission(
                id=p.get("id"),
                object=p.get("object"),
                created=p.get("created", 0),
                allow_create_engine=p.get("allow_create_engine", False),
                allow_sampling=p.get("allow_sampling", False),
                allow_logprobs=p.get("allow_logprobs", False),
                allow_search_indices=p.get("allow_search_indices", False),
                allow_view=p.get("allow_view", False),
                allow_fine_tuning=p.get("allow_fine_tuning", False),
                organization=p.get("organization"),
                group=p.get("group"),
                is_blocking=p.get("is_blocking", False),
            )
            for p in raw_permissions
            if isinstance(p, dict)
        ]
        return ModelInfo(
            id=item["id"],
            object=item.get("object"),
            created=item.get("created", 0),
            owned_by=item.get("owned_by"),
            root=item.get("root"),
            parent=item.get("parent"),
            permission=permissions,
            raw=item,
        )
