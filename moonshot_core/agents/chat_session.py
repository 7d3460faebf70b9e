"""多轮对话会话。

ChatSession 在客户端维护有序、只追加的消息历史，服务端没有会话概念。
一轮对话拆成两个可单独调用的步骤：

1. add_user_message(text): 追加用户消息并通知订阅者。
2. request_reply(): 以完整历史请求回复，成功后追加助手消息并通知订阅者。

send_turn(text) 依次执行两步。第 2 步失败时异常原样抛出，
第 1 步追加的用户消息保留在历史中（未得到回复的一轮）；
需要回滚的调用方可以用 history 快照去掉末尾消息后新建会话。

同一个会话实例不做并发控制，按单协程顺序使用。
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from moonshot_core.domain.conversation import MessageEvent, MessageSubscription
from moonshot_core.domain.models import ChatMessage, ChatOptions
from moonshot_core.infrastructure.logging.logger import logger
from moonshot_core.providers.base import ProviderClient


class ChatSession:
    def __init__(
        self,
        client: ProviderClient,
        api_key: str,
        model: str,
        options: Optional[ChatOptions] = None,
        history: Optional[Iterable[ChatMessage]] = None,
    ):
        self._client = client
        self._api_key = api_key
        self._model = model
        self._options = options
        self._messages: List[ChatMessage] = list(history or [])
        self._subscribers: List[MessageSubscription] = []

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def model(self) -> str:
        return self._model

    @property
    def history(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def subscribe(self) -> MessageSubscription:
        """订阅之后追加的消息事件，每个订阅者拥有独立的事件流。"""

        sub = MessageSubscription(on_close=self._unsubscribe)
        self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: MessageSubscription) -> None:
        if sub in self._subscribers:
            self._subscribers.remove(sub)

    def close(self) -> None:
        """结束所有订阅。"""

        for sub in list(self._subscribers):
            sub.close()

    def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        event = MessageEvent(index=len(self._messages) - 1, message=message)
        for sub in self._subscribers:
            sub.publish(event)

    def add_user_message(self, text: str) -> ChatMessage:
        message = ChatMessage(role="user", content=text)
        self._append(message)
        self._log(logging.INFO, "session.user_message", history_len=len(self._messages))
        return message

    async def request_reply(self) -> ChatMessage:
        """以当前完整历史请求一次回复，成功后追加到历史。"""

        try:
            reply = await self._client.chat(self._api_key, self.history, self._model, self._options)
        except Exception as e:
            self._log(logging.WARNING, "session.reply_failed", error=type(e).__name__)
            raise
        self._append(reply)
        self._log(logging.INFO, "session.reply", history_len=len(self._messages))
        return reply

    async def send_turn(self, text: str) -> str:
        self.add_user_message(text)
        reply = await self.request_reply()
        return reply.content

    def _log(self, level: int, message: str, **fields: Any) -> None:
        payload: Dict[str, Any] = {"model": self._model}
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
