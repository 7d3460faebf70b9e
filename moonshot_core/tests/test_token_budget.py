import asyncio

import pytest

from moonshot_core.domain.exceptions import ValidationError
from moonshot_core.domain.models import ChatMessage
from moonshot_core.providers.token_budget import parse_model_capacity, resolve_max_tokens


def _counter(value):
    async def count_tokens(model, messages):
        return value

    return count_tokens


@pytest.mark.parametrize(
    "model, capacity",
    [
        ("moonshot-v1-8k", 8 * 1024),
        ("moonshot-v1-32k", 32 * 1024),
        ("moonshot-v1-128k", 128 * 1024),
        ("custom-1m", 1 << 20),
        ("custom-2b", 2 << 30),
        ("custom-2kb", 2 * (1 << 10) * (1 << 30)),
        ("custom-4096", 4096),
    ],
)
def test_parse_model_capacity(model, capacity):
    assert parse_model_capacity(model) == capacity


@pytest.mark.parametrize("model", ["kimi-k2-turbo-preview", "moonshot-v1-k", "moonshot-v1-"])
def test_parse_model_capacity_rejects_malformed(model):
    with pytest.raises(ValidationError) as exc:
        parse_model_capacity(model)
    assert exc.value.code == "INVALID_MODEL_ID"


def test_resolve_max_tokens_8k():
    messages = [ChatMessage(role="user", content="Hello!")]
    assert asyncio.run(resolve_max_tokens("moonshot-v1-8k", messages, _counter(3))) == 8189


def test_resolve_max_tokens_1m():
    assert asyncio.run(resolve_max_tokens("model-1m", [], _counter(100))) == (1 << 20) - 100


def test_malformed_model_skips_token_estimate():
    called = []

    async def count_tokens(model, messages):
        called.append(model)
        return 0

    with pytest.raises(ValidationError):
        asyncio.run(resolve_max_tokens("kimi-latest-preview", [], count_tokens))
    assert called == []
