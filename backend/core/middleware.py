"""
中间件模块
请求日志：记录慢请求与失败请求，并在响应头中附带请求ID与耗时
"""

import time
import uuid
import logging
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from utils.request import get_client_ip

logger = logging.getLogger(__name__)

DEFAULT_SKIP_PATHS = ("/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    请求日志中间件
    只记录慢请求（超过阈值）和状态码 >= 400 的请求
    """

    def __init__(
        self,
        app: ASGIApp,
        skip_paths: Optional[Iterable[str]] = None,
        slow_request_threshold: float = 1.0
    ):
        super().__init__(app)
        self.skip_paths = tuple(skip_paths) if skip_paths else DEFAULT_SKIP_PATHS
        self.slow_request_threshold = slow_request_threshold

    def _should_skip(self, path: str) -> bool:
        """检查是否跳过日志记录"""
        return path.startswith(self.skip_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self._should_skip(request.url.path):
            return await call_next(request)

        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(f"[请求异常] {method} {path} | {get_client_ip(request)} | {duration_ms}ms | {e}")
            raise

        duration = time.time() - start_time
        duration_ms = round(duration * 1000, 2)

        if duration > self.slow_request_threshold:
            logger.warning(f"[慢请求] {method} {path} | {response.status_code} | {duration_ms}ms")
        elif response.status_code >= 400:
            logger.warning(f"[请求错误] {method} {path} | {response.status_code} | {duration_ms}ms")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response
