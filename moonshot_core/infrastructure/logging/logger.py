"""SDK 日志：JSON Lines 写入 <log_dir>/moonshot.log。

结构化字段通过 extra={"extra": {...}} 传入。字段名属于
SENSITIVE_FIELDS 的值一律打码，凭证不会出现在日志里。
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from moonshot_core.config.settings import settings


LOGGER_NAME = "moonshot_core"
LOG_FILE = "moonshot.log"
SENSITIVE_FIELDS = frozenset({"api_key", "authorization", "moonshot_api_key"})
MASK = "***"


def mask_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (MASK if k.lower() in SENSITIVE_FIELDS else v) for k, v in fields.items()}


class MoonshotJsonFormatter(logging.Formatter):
    def __init__(self, redact_content: bool = False):
        super().__init__()
        self._redact_content = redact_content

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if self._redact_content:
            msg = (msg or "")[:64]
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            entry.update(mask_fields(fields))
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logger(log_dir: str = settings.log_dir, level: str = settings.log_level) -> logging.Logger:
    """配置包级 logger；重复调用不会叠加 handler。"""

    sdk_logger = logging.getLogger(LOGGER_NAME)
    sdk_logger.setLevel(level.upper())
    if any(getattr(h, "_moonshot_sdk", False) for h in sdk_logger.handlers):
        return sdk_logger
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path / LOG_FILE, encoding="utf-8")
    handler.setFormatter(MoonshotJsonFormatter(redact_content=settings.log_redact_content))
    handler._moonshot_sdk = True  # type: ignore[attr-defined]
    sdk_logger.addHandler(handler)
    return sdk_logger


logger = setup_logger()
