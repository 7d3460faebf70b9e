import asyncio
import json
import math
import random

import httpx
import pytest

from moonshot_core.domain.exceptions import (
    ApiError,
    NetworkError,
    ParseError,
    RateLimitError,
    UnsupportedFeatureError,
    ValidationError,
)
from moonshot_core.domain.models import ChatMessage, ChatOptions, MaxTokenPolicy
from moonshot_core.providers.moonshot_client import MoonshotClient
from moonshot_core.providers.selector import ChoiceSelector
from moonshot_core.providers.transport import MoonshotTransport


class SettingsStub:
    moonshot_api_key = None
    moonshot_base_url = "https://api.moonshot.cn/v1"
    http_timeout = 1.0


def make_client(handler, seed=0):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = MoonshotTransport(SettingsStub.moonshot_base_url, client=http_client)
    return MoonshotClient(SettingsStub(), transport=transport, selector=ChoiceSelector(random.Random(seed)))


MESSAGES = [ChatMessage(role="user", content="Hello!")]


def test_list_model_ids():
    def handler(request):
        assert request.method == "GET"
        assert request.url == "https://api.moonshot.cn/v1/models"
        assert request.headers["Authorization"] == "Bearer sk-one"
        return httpx.Response(200, json={
            "object": "list",
            "data": [
                {"id": "moonshot-v1-8k", "object": "model", "owned_by": "moonshot", "permission": [{"allow_view": True}]},
                {"id": "moonshot-v1-32k", "object": "model"},
            ],
        })

    client = make_client(handler)
    assert asyncio.run(client.list_model_ids("sk-one")) == ["moonshot-v1-8k", "moonshot-v1-32k"]
    models = asyncio.run(client.list_models("sk-one"))
    assert models[0].owned_by == "moonshot"
    assert models[0].permission[0].allow_view is True


def test_query_balance():
    def handler(request):
        assert request.url.path == "/v1/users/me/balance"
        return httpx.Response(200, json={
            "code": 0,
            "data": {"available_balance": 49.5, "voucher_balance": 46.5, "cash_balance": 3},
            "scode": "0x0",
            "status": True,
        })

    balance = asyncio.run(make_client(handler).query_balance("sk-one"))
    assert balance.available_balance == 49.5
    assert balance.voucher_balance == 46.5
    assert balance.cash_balance == 3.0


def test_estimate_token_count_payload():
    captured = {}

    def handler(request):
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"total_tokens": 12}})

    count = asyncio.run(make_client(handler).estimate_token_count("sk-one", "moonshot-v1-8k", MESSAGES))
    assert count == 12
    assert captured["path"] == "/v1/tokenizers/estimate-token-count"
    assert captured["body"] == {"model": "moonshot-v1-8k", "messages": [{"role": "user", "content": "Hello!"}]}


def test_chat_selects_stop_choice_and_resolves_budget():
    requests = []

    def handler(request):
        body = json.loads(request.content)
        requests.append((request.url.path, body))
        if request.url.path.endswith("estimate-token-count"):
            return httpx.Response(200, json={"data": {"total_tokens": 3}})
        return httpx.Response(200, json={
            "id": "cmpl-1",
            "object": "chat.completion",
            "created": 1,
            "model": "moonshot-v1-8k",
            "choices": [
                {"index": 0, "message": {"role": "assistant", "content": "cut"}, "finish_reason": "length"},
                {"index": 1, "message": {"role": "assistant", "content": "done"}, "finish_reason": "stop"},
            ],
            "usage": {"prompt_tokens": 3, "completion_tokens": 1, "total_tokens": 4},
        })

    options = ChatOptions(max_token_policy=MaxTokenPolicy.MAX, temperature=0.3)
    reply = asyncio.run(make_client(handler).chat("sk-one", MESSAGES, "moonshot-v1-8k", options))
    assert reply == ChatMessage(role="assistant", content="done")
    chat_body = requests[-1][1]
    assert requests[-1][0] == "/v1/chat/completions"
    assert chat_body["max_tokens"] == 8189
    assert chat_body["temperature"] == 0.3
    assert "top_p" not in chat_body


def test_create_chat_completion_returns_usage():
    def handler(request):
        return httpx.Response(200, json={
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "ok"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
        })

    result = asyncio.run(make_client(handler).create_chat_completion("sk-one", MESSAGES, "moonshot-v1-8k"))
    assert result.usage.total_tokens == 2
    assert result.choices[0].finish_reason == "stop"


def test_invalid_options_issue_no_request():
    def handler(request):
        raise AssertionError("no request expected")

    client = make_client(handler)
    with pytest.raises(ValidationError):
        asyncio.run(client.chat("sk-one", MESSAGES, "moonshot-v1-8k", ChatOptions(temperature=2)))
    with pytest.raises(UnsupportedFeatureError):
        asyncio.run(client.chat("sk-one", MESSAGES, "moonshot-v1-8k", ChatOptions(stream=True)))
    with pytest.raises(ValidationError):
        asyncio.run(client.chat("sk-one", [], "moonshot-v1-8k"))
    with pytest.raises(ValidationError):
        asyncio.run(client.chat("", MESSAGES, "moonshot-v1-8k"))


def test_credentials_are_per_request():
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={"data": []})

    client = make_client(handler)

    async def run():
        await asyncio.gather(client.list_models("sk-aaaa"), client.list_models("sk-bbbb"))

    asyncio.run(run())
    assert sorted(seen) == ["Bearer sk-aaaa", "Bearer sk-bbbb"]
    assert "authorization" not in client._transport._client.headers


def test_api_error_is_classified():
    def handler(request):
        return httpx.Response(404, json={"error": {
            "type": "resource_not_found_error",
            "message": "Not found the model moonshot-v9 or Permission denied",
        }})

    with pytest.raises(ApiError) as exc:
        asyncio.run(make_client(handler).list_model_ids("sk-one"))
    assert exc.value.http_status == 404
    assert exc.value.error.description == "不存在此模型或者没有授权访问此模型，请检查后重试"


def test_rate_limit_error():
    def handler(request):
        return httpx.Response(429, json={"error": {
            "type": "engine_overloaded_error",
            "message": "The engine is currently overloaded, please try again later",
        }})

    with pytest.raises(RateLimitError):
        asyncio.run(make_client(handler).query_balance("sk-one"))


def test_network_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as exc:
        asyncio.run(make_client(handler).list_model_ids("sk-one"))
    assert exc.value.code == "NETWORK_ERROR"


def test_malformed_success_body_raises_parse_error():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    client = make_client(handler)
    with pytest.raises(ParseError):
        asyncio.run(client.chat("sk-one", MESSAGES, "moonshot-v1-8k"))
    with pytest.raises(ParseError):
        asyncio.run(client.query_balance("sk-one"))


def test_cancellation_propagates():
    async def handler(request):
        await asyncio.sleep(10)
        return httpx.Response(200, json={"data": []})

    client = make_client(handler)

    async def run():
        task = asyncio.create_task(client.list_models("sk-one"))
        await asyncio.sleep(0.01)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(run())


def test_nan_option_raises_validation_error_before_request():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(ValidationError):
        asyncio.run(make_client(handler).chat("sk-one", MESSAGES, "moonshot-v1-8k", ChatOptions(temperature=math.nan)))


def test_non_object_usage_raises_parse_error():
    def handler(request):
        return httpx.Response(200, json={
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "ok"}, "finish_reason": "stop"}],
            "usage": "n/a",
        })

    with pytest.raises(ParseError):
        asyncio.run(make_client(handler).chat("sk-one", MESSAGES, "moonshot-v1-8k"))


def test_non_list_permission_raises_parse_error():
    def handler(request):
        return httpx.Response(200, json={"data": [{"id": "moonshot-v1-8k", "permission": 5}]})

    with pytest.raises(ParseError):
        asyncio.run(make_client(handler).list_models("sk-one"))


def test_redirect_status_is_api_error():
    def handler(request):
        return httpx.Response(302, headers={"Location": "https://example.test/"})

    with pytest.raises(ApiError) as exc:
        asyncio.run(make_client(handler).list_model_ids("sk-one"))
    assert exc.value.http_status == 302
    assert exc.value.error.type == "unknown"
