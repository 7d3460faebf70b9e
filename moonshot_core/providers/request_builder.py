"""chat/completions 请求体的校验与构造。

所有参数校验都在发起任何网络请求之前完成（包括 MAX 策略下
估算输入 token 的请求），校验失败抛出 ValidationError /
UnsupportedFeatureError。缺省字段不会出现在请求体中。
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from moonshot_core.domain.exceptions import UnsupportedFeatureError, ValidationError
from moonshot_core.domain.models import ChatMessage, ChatOptions, MaxTokenPolicy
from moonshot_core.providers.token_budget import TokenCounter, resolve_max_tokens


MAX_STOP_SEQUENCES = 5
MAX_STOP_BYTES = 32


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _check_range(
    name: str,
    value: Optional[float],
    low: float,
    high: float,
    include_low: bool = True,
    include_high: bool = True,
) -> None:
    if value is None:
        return
    # NaN 与任何值比较都为 False，因此按“落在区间内”判断
    inside = (low <= value if include_low else low < value) and (value <= high if include_high else value < high)
    if not inside:
        interval = (
            ("[" if include_low else "(")
            + f"{_format_number(low)}, {_format_number(high)}"
            + ("]" if include_high else ")")
        )
        raise ValidationError(
            code="INVALID_ARGUMENT",
            message=f"{name} should be in {interval}",
            field=name,
            value=value,
        )


def validate_options(messages: Sequence[ChatMessage], options: ChatOptions) -> None:
    """按固定顺序校验消息与参数，遇到第一个错误立即抛出。"""

    if not messages:
        raise ValidationError(code="EMPTY_MESSAGES", message="messages are required")

    _check_range("temperature", options.temperature, 0, 1)
    _check_range("top_p", options.top_p, 0, 1, include_low=False, include_high=False)
    _check_range("n", options.n, 1, 5)
    _check_range("presence_penalty", options.presence_penalty, -2, 2)
    _check_range("frequency_penalty", options.frequency_penalty, -2, 2)

    if options.stop is not None:
        if isinstance(options.stop, str):
            raise ValidationError(
                code="INVALID_ARGUMENT",
                message="stop should be a list of strings, not a single string",
                field="stop",
            )
        if len(options.stop) > MAX_STOP_SEQUENCES:
            raise ValidationError(
                code="INVALID_ARGUMENT",
                message=f"stop token count is at most {MAX_STOP_SEQUENCES}",
                field="stop",
            )
        for token in options.stop:
            if len(token.encode("utf-8")) > MAX_STOP_BYTES:
                raise ValidationError(
                    code="INVALID_ARGUMENT",
                    message=f"stop token [{token}] is too long, max length of it is {MAX_STOP_BYTES}B",
                    field="stop",
                )

    if options.stream:
        raise UnsupportedFeatureError(
            code="STREAM_UNSUPPORTED",
            message="streaming is not supported yet",
        )


def build_payload(model: str, messages: Sequence[ChatMessage], options: ChatOptions) -> Dict[str, Any]:
    """把已校验的参数转换为 Moonshot 请求 JSON（snake_case 字段）。"""

    payload: Dict[str, Any] = {
        "model": model,
        "messages": [m.to_payload() for m in messages],
    }
    optional_fields = {
        "max_tokens": options.max_tokens,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "n": options.n,
        "presence_penalty": options.presence_penalty,
        "frequency_penalty": options.frequency_penalty,
    }
    for key, value in optional_fields.items():
        if value is not None:
            payload[key] = value
    if options.response_format is not None:
        payload["response_format"] = options.response_format.to_payload()
    if options.stop is not None:
        payload["stop"] = list(options.stop)
    if options.stream is not None:
        payload["stream"] = options.stream
    return payload


async def build_chat_payload(
    model: str,
    messages: Sequence[ChatMessage],
    options: Optional[ChatOptions],
    count_tokens: TokenCounter,
) -> Dict[str, Any]:
    """校验参数，必要时解析 max_tokens，然后构造请求体。

    count_tokens 仅在 max_tokens 缺省且策略为 MAX 时调用。
    """

    options = options or ChatOptions()
    validate_options(messages, options)
    if options.max_tokens is None and options.max_token_policy == MaxTokenPolicy.MAX:
        max_tokens = await resolve_max_tokens(model, messages, count_tokens)
        options = replace(options, max_tokens=max_tokens)
    return build_payload(model, messages, options)
