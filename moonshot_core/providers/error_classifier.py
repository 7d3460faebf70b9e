"""把服务端的错误响应转换为带中文描述的 ApiError。

流程：
1. 解析响应体中的 {"error": {"type": ..., "message": ...}}。
2. 结构缺失或格式不对时，返回 unknown 错误（message 为原始响应文本）。
3. 否则与 ERROR_CATALOG 中每一条计算相似度，取得分最高的第一条，
   把它的 description 填到候选错误上；全部为 0 时返回通用 unknown 错误。
"""

import json
from dataclasses import replace
from typing import Any, Iterable, Optional

from moonshot_core.domain.error_catalog import (
    ERROR_CATALOG,
    ClassifiedError,
    ErrorDescriptor,
    similarity,
    unknown_error,
)
from moonshot_core.domain.exceptions import ApiError, RateLimitError


def _extract_error_object(body: str) -> Optional[dict]:
    try:
        data: Any = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, dict):
        return None
    err = data.get("error")
    if not isinstance(err, dict):
        return None
    return err


def classify_error_body(
    status_code: int,
    body: str,
    catalog: Iterable[ErrorDescriptor] = ERROR_CATALOG,
) -> ClassifiedError:
    """根据状态码与原始响应体返回最接近的 ClassifiedError。"""

    err = _extract_error_object(body)
    if err is None or not isinstance(err.get("message"), str):
        return unknown_error(body)

    err_type = err.get("type")
    candidate = ClassifiedError(
        code=status_code,
        type=err_type if isinstance(err_type, str) else "",
        message=err["message"],
    )

    best: Optional[ErrorDescriptor] = None
    best_score = 0
    for entry in catalog:
        score = similarity(entry, candidate)
        # 严格大于：分数相同时保留目录中靠前的条目
        if score > best_score:
            best, best_score = entry, score
    if best is None:
        return unknown_error()
    return replace(candidate, description=best.description)


def build_api_error(status_code: int, body: str) -> ApiError:
    """构造要抛给调用方的异常，429 使用 RateLimitError。"""

    error = classify_error_body(status_code, body)
    exc_cls = RateLimitError if status_code == 429 else ApiError
    return exc_cls(error, http_status=status_code)
