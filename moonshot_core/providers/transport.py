"""Moonshot HTTP 传输层。

- 整个 transport 复用同一个 httpx.AsyncClient（连接池共享）。
- 凭证通过每次调用的 RequestContext 显式传入，只出现在该次请求的
  headers 中；共享客户端上不设置任何默认 Authorization，
  不同 API Key 的并发请求不会互相串用。
- 非 2xx 响应交给 error_classifier 转换为 ApiError。
- httpx.RequestError 统一包装为 NetworkError；asyncio 的取消原样向上传递。
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from moonshot_core.domain.exceptions import NetworkError, ParseError, ValidationError
from moonshot_core.infrastructure.logging.logger import logger
from moonshot_core.providers.error_classifier import build_api_error


@dataclass(frozen=True)
class RequestContext:
    """单次调用的上下文，携带该次请求使用的凭证。"""

    api_key: str

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }


class MoonshotTransport:
    """对 httpx.AsyncClient 的薄封装，返回解析后的 JSON。"""

    def __init__(self, base_url: str, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, trust_env=False)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_json(self, path: str, ctx: RequestContext) -> Dict[str, Any]:
        return await self._request("GET", path, ctx)

    async def post_json(self, path: str, payload: Dict[str, Any], ctx: RequestContext) -> Dict[str, Any]:
        return await self._request("POST", path, ctx, payload)

    async def _request(
        self,
        method: str,
        path: str,
        ctx: RequestContext,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not ctx.api_key:
            raise ValidationError(code="MISSING_API_KEY", message="api key is required")
        url = f"{self._base_url}{path}"
        log_ctx = {"method": method, "path": path}
        start = time.time()
        logger.info("http.request", extra={"extra": log_ctx})
        try:
            resp = await self._client.request(
                method,
                url,
                json=payload,
                headers=ctx.headers(),
            )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            logger.error("http.network_error", extra={"extra": {**log_ctx, "error": str(e)}})
            raise NetworkError(code="NETWORK_ERROR", message=str(e), http_status=503)

        elapsed = round(time.time() - start, 3)
        if not resp.is_success:
            exc = build_api_error(resp.status_code, resp.text)
            logger.warning(
                "http.api_error",
                extra={"extra": {
                    **log_ctx,
                    "status": resp.status_code,
                    "error_type": exc.error.type,
                    "elapsed_seconds": elapsed,
                }},
            )
            raise exc

        logger.info("http.response", extra={"extra": {**log_ctx, "status": resp.status_code, "elapsed_seconds": elapsed}})
        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(code="PARSE_ERROR", message=f"invalid JSON response: {e}", http_status=502)
        if not isinstance(data, dict):
            raise ParseError(code="PARSE_ERROR", message="response JSON is not an object", http_status=502)
        return data
