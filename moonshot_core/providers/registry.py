"""Provider 与接口路径配置。

把 Moonshot 的基础 URL 与各接口路径集中在这里，
路径与字段名必须与服务端保持一致，不能随意修改。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Endpoints:
    """Moonshot 各接口相对 base_url 的路径。"""

    models: str = "/models"
    balance: str = "/users/me/balance"
    estimate_token_count: str = "/tokenizers/estimate-token-count"
    chat_completions: str = "/chat/completions"


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    endpoints: Endpoints


MOONSHOT_CONFIG = ProviderConfig(
    name="moonshot",
    base_url="https://api.moonshot.cn/v1",
    endpoints=Endpoints(),
)
