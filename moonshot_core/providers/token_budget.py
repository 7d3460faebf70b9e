"""根据模型 ID 计算 max_tokens 上限。

模型 ID 最后一个 "-" 之后的部分是容量标记，例如
"moonshot-v1-8k" 中的 "8k"、"xxx-1m"。末尾的单位后缀
(k=2^10, m=2^20, b=2^30) 会被逐个剥离并累乘到倍率上，
剩余部分按整数解析后乘以倍率即为模型总容量。
"""

from typing import Awaitable, Callable, Dict, Sequence

from moonshot_core.domain.exceptions import ValidationError
from moonshot_core.domain.models import ChatMessage
from moonshot_core.infrastructure.logging.logger import logger


UNITS: Dict[str, int] = {
    "k": 1 << 10,
    "m": 1 << 20,
    "b": 1 << 30,
}

TokenCounter = Callable[[str, Sequence[ChatMessage]], Awaitable[int]]


def parse_model_capacity(model: str) -> int:
    """返回模型 ID 所声明的总 token 容量。

    Raises:
        ValidationError: 容量标记去掉单位后不是整数。
    """

    feature = model.split("-")[-1]
    rate = 1
    while feature and feature[-1] in UNITS:
        rate *= UNITS[feature[-1]]
        feature = feature[:-1]
    try:
        amount = int(feature)
    except ValueError:
        raise ValidationError(
            code="INVALID_MODEL_ID",
            message=f"cannot infer token capacity from model id {model!r}",
            model=model,
        )
    return amount * rate


async def resolve_max_tokens(
    model: str,
    messages: Sequence[ChatMessage],
    count_tokens: TokenCounter,
) -> int:
    """计算可用于输出的最大 token 数：模型容量 - 输入 token 数。

    容量解析先于 count_tokens 调用，模型 ID 非法时不会发起网络请求。
    """

    capacity = parse_model_capacity(model)
    input_tokens = await count_tokens(model, messages)
    budget = capacity - input_tokens
    log_fields = {"model": model, "capacity": capacity, "input_tokens": input_tokens, "max_tokens": budget}
    if budget <= 0:
        logger.warning("token_budget.exhausted", extra={"extra": log_fields})
    else:
        logger.info("token_budget.resolved", extra={"extra": log_fields})
    return budget
