"""领域层模型与协议。

包含：
- models: ChatMessage / ChatOptions / ChatResult 等统一数据模型。
- conversation: 会话消息事件与订阅。
- error_catalog: 错误目录、分类结果与相似度计算。
- exceptions: 业务异常类型定义。
"""
