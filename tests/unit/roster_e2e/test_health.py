"""Unit tests for readiness polling, with httpx.MockTransport instead of servers."""

import httpx
import pytest

from roster_e2e.exceptions import HealthCheckError
from roster_e2e.health import api_ready, check_http, frontend_ready, wait_for_http

API_URL = "http://127.0.0.1:5172/health"
FRONTEND_URL = "http://127.0.0.1:4200"


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def sequence(*outcomes):
    """Handler answering with the given responses/exceptions in order."""
    remaining = list(outcomes)
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        outcome = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    handler.calls = calls
    return handler


class TestAcceptors:
    def test_api_ready_on_2xx(self):
        assert api_ready(httpx.Response(200))
        assert api_ready(httpx.Response(204))
        assert not api_ready(httpx.Response(503))

    @pytest.mark.parametrize(
        "body",
        ["<html><app-root></app-root></html>", "<!DOCTYPE html><html></html>"],
    )
    def test_frontend_ready_needs_app_markup(self, body):
        assert frontend_ready(httpx.Response(200, text=body))

    def test_frontend_not_ready_on_plain_text(self):
        assert not frontend_ready(httpx.Response(200, text="compiling..."))
        assert not frontend_ready(httpx.Response(500, text="<app-root>"))


class TestCheckHttp:
    async def test_connection_error_is_not_ready(self):
        handler = sequence(httpx.ConnectError("refused"))
        async with client_for(handler) as client:
            assert not await check_http(API_URL, client=client)

    async def test_ok_response_is_ready(self):
        handler = sequence(httpx.Response(200, json={"status": "healthy"}))
        async with client_for(handler) as client:
            assert await check_http(API_URL, client=client)


class TestWaitForHttp:
    async def test_waits_until_healthy(self):
        handler = sequence(
            httpx.ConnectError("refused"),
            httpx.Response(503),
            httpx.Response(200),
        )
        async with client_for(handler) as client:
            await wait_for_http(API_URL, timeout=5, poll_interval=0.01, client=client)

        assert len(handler.calls) == 3

    async def test_frontend_acceptor(self):
        handler = sequence(
            httpx.Response(200, text="compiling"),
            httpx.Response(200, text="<app-root></app-root>"),
        )
        async with client_for(handler) as client:
            await wait_for_http(
                FRONTEND_URL,
                timeout=5,
                poll_interval=0.01,
                accept=frontend_ready,
                client=client,
            )

        assert len(handler.calls) == 2

    async def test_times_out(self):
        handler = sequence(httpx.Response(503))
        async with client_for(handler) as client:
            with pytest.raises(HealthCheckError, match="not healthy"):
                await wait_for_http(
                    API_URL,
                    timeout=0.05,
                    poll_interval=0.01,
                    client=client,
                )

    async def test_fails_fast_when_process_exits(self):
        handler = sequence(httpx.ConnectError("refused"))
        alive = iter([True, False])
        async with client_for(handler) as client:
            with pytest.raises(HealthCheckError, match="exited"):
                await wait_for_http(
                    API_URL,
                    timeout=30,
                    poll_interval=0.01,
                    is_alive=lambda: next(alive),
                    client=client,
                )

        assert len(handler.calls) == 1
