"""Tests for the shared request helper."""

import httpx
import pytest

from tebex_headless.errors import HeadlessRequestError
from tebex_headless.transport import BASE_URL, HeadlessTransport


def test_build_route_substitutes_token_and_ident():
    transport = HeadlessTransport("abc", ident_getter=lambda: "xyz")

    assert transport.build_route("/accounts/{token}/baskets/{basketIdent}") == "/accounts/abc/baskets/xyz"


def test_build_route_substitutes_every_occurrence():
    transport = HeadlessTransport("abc", ident_getter=lambda: "xyz")

    assert transport.build_route("/{token}/{token}/{basketIdent}/{basketIdent}") == "/abc/abc/xyz/xyz"


def test_build_route_uses_empty_strings_when_unset():
    transport = HeadlessTransport()

    assert transport.build_route("/accounts/{token}/baskets/{basketIdent}") == "/accounts//baskets/"


def test_build_route_reads_ident_at_call_time():
    state = {"ident": ""}
    transport = HeadlessTransport("abc", ident_getter=lambda: state["ident"])

    state["ident"] = "late"

    assert transport.build_route("/baskets/{basketIdent}") == "/baskets/late"


@pytest.mark.asyncio
async def test_request_sends_json_header_and_body(api):
    transport = HeadlessTransport("abc", http_client=api.client())

    await transport.request("/accounts/{token}/things", "POST", {"a": 1})

    request = api.last
    assert request.method == "POST"
    assert str(request.url) == BASE_URL + "/accounts/abc/things"
    assert request.headers["Content-Type"] == "application/json"
    assert api.body() == {"a": 1}


@pytest.mark.asyncio
async def test_request_without_body_sends_no_content(api):
    transport = HeadlessTransport("abc", http_client=api.client())

    await transport.request("/accounts/{token}")

    assert api.last.method == "GET"
    assert api.last.content == b""
    assert api.last.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_request_returns_parsed_json(api):
    api.add("GET", "/accounts/abc", json_body={"name": "Shop", "extra": [1, 2]})
    transport = HeadlessTransport("abc", http_client=api.client())

    assert await transport.request("/accounts/{token}") == {"name": "Shop", "extra": [1, 2]}


@pytest.mark.asyncio
async def test_request_returns_none_for_empty_body(api):
    api.add("POST", "/accounts/abc/coupons", status_code=204)
    transport = HeadlessTransport("abc", http_client=api.client())

    assert await transport.request("/accounts/{token}/coupons", "POST") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "POST", "PUT"])
async def test_failed_status_raises_with_status_and_reason(api, method):
    api.add(method, "/accounts/abc", status_code=404)
    transport = HeadlessTransport("abc", http_client=api.client())

    with pytest.raises(HeadlessRequestError) as exc_info:
        await transport.request("/accounts/{token}", method)

    error = exc_info.value
    assert str(error) == "Request failed with status 404: Not Found"
    assert error.message == "Request failed with status 404: Not Found"
    assert error.status_code == 404
    assert error.reason_phrase == "Not Found"
    assert error.method == method


@pytest.mark.asyncio
async def test_server_error_is_not_retried(api):
    api.add("GET", "/accounts/abc", status_code=503)
    transport = HeadlessTransport("abc", http_client=api.client())

    with pytest.raises(HeadlessRequestError, match="Request failed with status 503: Service Unavailable"):
        await transport.request("/accounts/{token}")

    assert len(api.requests) == 1


@pytest.mark.asyncio
async def test_network_errors_propagate_unchanged():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    transport = HeadlessTransport("abc", http_client=client)

    with pytest.raises(httpx.ConnectError):
        await transport.request("/accounts/{token}")


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open(api):
    client = api.client()
    transport = HeadlessTransport("abc", http_client=client)

    await transport.aclose()

    assert not client.is_closed


@pytest.mark.asyncio
async def test_aclose_closes_owned_client():
    transport = HeadlessTransport("abc")

    await transport.aclose()

    assert transport.client.is_closed
