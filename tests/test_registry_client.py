"""Tests for the HTTP registry client."""

import json

import httpx
import pytest

from bluecarbon.clients.registry import (
    HttpRegistryClient,
    RegistryConnectionError,
    RegistryPushError,
    RegistryTimeoutError,
)

from conftest import run

BASE_URL = "http://registry.test/api"


def _push(handler, kind="project", record=None):
    async def go():
        client = HttpRegistryClient(BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))
        try:
            return await client.push(kind, record or {"id": 3, "data": {"name": "Mangrove Test"}})
        finally:
            await client.aclose()

    return run(go())


class TestPush:

    def test_successful_push(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["key"] = request.headers["Idempotency-Key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"accepted": True, "remote_id": "PRJ-0003"})

        result = _push(handler)

        assert result.success is True
        assert result.remote_id == "PRJ-0003"
        assert seen["path"] == "/api/records/project"
        assert seen["key"] == "project-3"
        assert seen["body"]["data"]["name"] == "Mangrove Test"

    def test_not_accepted(self):
        result = _push(lambda request: httpx.Response(200, json={"accepted": False, "detail": "duplicate serial"}))
        assert result.success is False
        assert result.detail == "duplicate serial"

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(503, json={"detail": "Fake registry temporary failure. Please retry."})

        with pytest.raises(RegistryPushError) as exc_info:
            _push(handler)
        assert exc_info.value.status_code == 503
        assert "temporary failure" in str(exc_info.value)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RegistryConnectionError):
            _push(handler)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(RegistryTimeoutError):
            _push(handler)


class TestPing:

    @pytest.mark.parametrize("status_code, expected", [(200, True), (500, False)])
    def test_ping_status(self, status_code, expected):
        async def go():
            transport = httpx.MockTransport(lambda request: httpx.Response(status_code, json={"status": "ok"}))
            client = HttpRegistryClient(BASE_URL, transport=transport)
            try:
                return await client.ping()
            finally:
                await client.aclose()

        assert run(go()) is expected

    def test_ping_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        async def go():
            client = HttpRegistryClient(BASE_URL, transport=httpx.MockTransport(handler))
            try:
                return await client.ping()
            finally:
                await client.aclose()

        assert run(go()) is False
