import json
import logging

from moonshot_core.infrastructure.logging.logger import MASK, MoonshotJsonFormatter, mask_fields


def _record(msg, fields=None):
    record = logging.LogRecord("moonshot_core", logging.INFO, __file__, 1, msg, None, None)
    if fields is not None:
        record.extra = fields
    return record


def test_formatter_masks_credentials():
    line = MoonshotJsonFormatter().format(_record("http.request", {"path": "/models", "api_key": "sk-secret"}))
    entry = json.loads(line)
    assert entry["msg"] == "http.request"
    assert entry["path"] == "/models"
    assert entry["api_key"] == MASK
    assert "sk-secret" not in line


def test_formatter_redacts_long_messages():
    line = MoonshotJsonFormatter(redact_content=True).format(_record("x" * 100))
    assert json.loads(line)["msg"] == "x" * 64


def test_mask_fields_is_case_insensitive():
    assert mask_fields({"Authorization": "Bearer k", "model": "m"}) == {"Authorization": MASK, "model": "m"}
