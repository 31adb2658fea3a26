"""Unit tests for the rate limit and timeout middleware."""

import asyncio

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ibcrm.api.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware
from ibcrm.api.middleware.timeout import RequestTimeoutMiddleware


def _rate_limited_app(enabled: bool = True) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware,
        limits={"/auth/login": RateLimitConfig(requests=2, window_seconds=60)},
        enabled=enabled,
    )

    @app.post("/auth/login")
    async def login():
        return {"ok": True}

    @app.get("/open")
    async def open_route():
        return {"ok": True}

    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRateLimit:
    """Per-IP sliding window."""

    @pytest.mark.asyncio
    async def test_limit_exceeded(self):
        async with _client(_rate_limited_app()) as client:
            assert (await client.post("/auth/login")).status_code == 200
            assert (await client.post("/auth/login")).status_code == 200

            response = await client.post("/auth/login")

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMITED"
        assert int(response.headers["Retry-After"]) >= 1

    @pytest.mark.asyncio
    async def test_unlisted_paths_unlimited(self):
        async with _client(_rate_limited_app()) as client:
            for _ in range(5):
                assert (await client.get("/open")).status_code == 200

    @pytest.mark.asyncio
    async def test_ips_counted_separately(self):
        async with _client(_rate_limited_app()) as client:
            for _ in range(2):
                await client.post("/auth/login", headers={"X-Forwarded-For": "10.0.0.1"})

            response = await client.post("/auth/login", headers={"X-Forwarded-For": "10.0.0.2"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_disabled(self):
        async with _client(_rate_limited_app(enabled=False)) as client:
            for _ in range(5):
                assert (await client.post("/auth/login")).status_code == 200


class TestRequestTimeout:
    """Slow handlers are cut off."""

    @pytest.mark.asyncio
    async def test_slow_request_times_out(self):
        app = FastAPI()
        app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=0.05)

        @app.get("/slow")
        async def slow():
            await asyncio.sleep(1)
            return {"ok": True}

        @app.get("/fast")
        async def fast():
            return {"ok": True}

        async with _client(app) as client:
            slow_response = await client.get("/slow")
            fast_response = await client.get("/fast")

        assert slow_response.status_code == 504
        assert slow_response.json()["error"]["code"] == "REQUEST_TIMEOUT"
        assert fast_response.status_code == 200
