"""Shared fixtures: an in-memory fake of the Headless API."""

import asyncio
import json

import httpx
import pytest


class FakeHeadlessAPI:
    """Records requests and answers them from a route table."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}

    def add(self, method: str, path: str, status_code: int = 200, json_body=None) -> None:
        """Register a response for METHOD + path (path without the /api prefix)."""
        self.routes[(method, "/api" + path)] = (status_code, json_body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, json_body = self.routes.get((request.method, request.url.path), (200, {}))
        if json_body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=json_body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def yielding_client(self) -> httpx.AsyncClient:
        """Client whose requests give other tasks a chance to run before answering."""

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0)
            return self.handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, request: httpx.Request = None):
        request = request or self.last
        if not request.content:
            return None
        return json.loads(request.content)


@pytest.fixture
def api():
    return FakeHeadlessAPI()
