"""会话层：基于 Provider 的多轮对话封装。"""

from moonshot_core.agents.chat_session import ChatSession

__all__ = ["ChatSession"]
