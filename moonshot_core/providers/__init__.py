"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base) 与接口路径配置 (registry)。
- 请求校验与构造 (request_builder)、max_tokens 计算 (token_budget)。
- 错误分类 (error_classifier)、候选选择 (selector)、HTTP 传输 (transport)。
- Moonshot 的具体实现 (moonshot_client)。
"""
