from moonshot_core.providers.registry import MOONSHOT_CONFIG


def test_endpoint_paths():
    endpoints = MOONSHOT_CONFIG.endpoints
    assert MOONSHOT_CONFIG.base_url == "https://api.moonshot.cn/v1"
    assert endpoints.models == "/models"
    assert endpoints.balance == "/users/me/balance"
    assert endpoints.estimate_token_count == "/tokenizers/estimate-token-count"
    assert endpoints.chat_completions == "/chat/completions"
