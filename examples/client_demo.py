"""列出模型、查询余额、估算 token 并发起一次对话。"""

import asyncio

from moonshot_core import ChatMessage, MoonshotClient
from moonshot_core.config.settings import settings


async def main() -> None:
    key = settings.moonshot_api_key
    if not key:
        raise RuntimeError("MOONSHOT_API_KEY 未设置")
    async with MoonshotClient(settings) as client:
        model_ids = await client.list_model_ids(key)
        print("Models:")
        for model_id in model_ids:
            print(" ", model_id)

        balance = await client.query_balance(key)
        print(f"Available: {balance.available_balance}")
        print(f"Voucher  : {balance.voucher_balance}")
        print(f"Cash     : {balance.cash_balance}")

        messages = [ChatMessage(role="user", content="Hello!")]
        model = model_ids[-1] if model_ids else settings.default_model
        print("Token count:", await client.estimate_token_count(key, model, messages))

        reply = await client.chat(key, messages, model)
        print(f"{messages[0].role}: {messages[0].content}")
        print(f"{reply.role}: {reply.content}")


if __name__ == "__main__":
    asyncio.run(main())
