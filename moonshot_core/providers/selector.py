"""从多个候选回答中选出一条消息。"""

import random
from typing import Optional, Protocol, Sequence, TypeVar

from moonshot_core.domain.exceptions import ParseError
from moonshot_core.domain.models import ChatChoice, ChatMessage


T = TypeVar("T")


class RandomSource(Protocol):
    """随机源协议，random.Random 实例即满足。测试中可注入固定种子的实例。"""

    def choice(self, seq: Sequence[T]) -> T:
        ...


class ChoiceSelector:
    """优先在 finish_reason == "stop" 的候选中随机选择，
    没有这样的候选时在全部候选中随机选择。"""

    def __init__(self, rng: Optional[RandomSource] = None):
        self._rng = rng or random.Random()

    def select(self, choices: Sequence[ChatChoice]) -> ChatMessage:
        if not choices:
            raise ParseError(code="PARSE_ERROR", message="response contains no choices")
        finished = [c for c in choices if c.finish_reason == "stop"]
        pool = finished or list(choices)
        return self._rng.choice(pool).message
