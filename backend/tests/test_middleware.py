"""
中间件测试
"""

import pytest

from core.middleware import RequestLoggingMiddleware


class TestRequestLoggingMiddleware:
    """请求日志中间件"""

    def test_skip_paths(self):
        middleware = RequestLoggingMiddleware(app=None)

        assert middleware._should_skip("/health") is True
        assert middleware._should_skip("/docs") is True
        assert middleware._should_skip("/api/tags") is False

    def test_custom_skip_paths(self):
        middleware = RequestLoggingMiddleware(app=None, skip_paths=["/api/"])

        assert middleware._should_skip("/api/tags") is True
        assert middleware._should_skip("/health") is False

    @pytest.mark.asyncio
    async def test_response_headers(self, client):
        response = await client.get("/api/tags")

        assert "x-request-id" in response.headers
        assert response.headers["x-response-time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_failed_request_logged(self, client, caplog):
        with caplog.at_level("WARNING", logger="core.middleware"):
            await client.get("/api/tags")

        assert any("[请求错误] GET /api/tags | 401" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_health_skipped(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert "x-request-id" not in response.headers
