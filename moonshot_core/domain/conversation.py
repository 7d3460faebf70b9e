"""会话消息事件与订阅。

ChatSession 每追加一条消息就向所有订阅者投递一个 MessageEvent。
每个订阅者拥有独立的队列，投递不会同步调用订阅方代码，
多个观察者之间互不影响。
"""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional

from .models import ChatMessage


@dataclass(frozen=True)
class MessageEvent:
    """一次消息追加事件。index 为消息在会话历史中的位置。"""

    index: int
    message: ChatMessage


class MessageSubscription:
    """单个观察者的消息事件流。

    用法::

        sub = session.subscribe()
        async for event in sub:
            print(event.message.role, event.message.content)

    close() 之后迭代在取完已缓冲事件后结束。
    """

    _CLOSED = object()

    def __init__(self, on_close: Optional[Callable[["MessageSubscription"], None]] = None):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: MessageEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(self._CLOSED)
        if self._on_close:
            self._on_close(self)

    def drain(self) -> List[MessageEvent]:
        """取出当前已缓冲的全部事件（不等待）。"""

        events: List[MessageEvent] = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is self._CLOSED:
                # 保留结束标记，后续迭代仍能正常结束
                self._queue.put_nowait(item)
                break
            events.append(item)
        return events

    def __aiter__(self) -> AsyncIterator[MessageEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[MessageEvent]:
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                self._queue.put_nowait(item)
                return
            yield item
