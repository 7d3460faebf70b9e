"""多轮对话示例：订阅会话消息并逐条打印。"""

import asyncio

from moonshot_core import ChatSession, MoonshotClient
from moonshot_core.config.settings import settings


async def print_messages(session: ChatSession) -> None:
    async for event in session.subscribe():
        print(f"{event.message.role}: {event.message.content}")


async def main() -> None:
    key = settings.moonshot_api_key
    if not key:
        raise RuntimeError("MOONSHOT_API_KEY 未设置")
    async with MoonshotClient(settings) as client:
        session = ChatSession(client, key, settings.default_model)
        printer = asyncio.create_task(print_messages(session))
        await asyncio.sleep(0)
        for text in ["你好啊！", "你最近怎么样？", "可以给我讲个笑话吗？", "这个笑话不好笑！", "哈哈哈！"]:
            await session.send_turn(text)
        session.close()
        await printer


if __name__ == "__main__":
    asyncio.run(main())
