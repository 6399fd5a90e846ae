"""Tests for the webstore client."""

import pytest

from tebex_headless import Basket, Store
from tebex_headless.errors import HeadlessRequestError, HeadlessValidationError
from tebex_headless.models import Page, StoreResponse


@pytest.mark.parametrize("token", ["", None, 123])
def test_invalid_token_rejected_at_construction(token):
    with pytest.raises(HeadlessValidationError, match="Invalid Token"):
        Store(token)


def test_invalid_token_sends_nothing(api):
    client = api.client()

    with pytest.raises(HeadlessValidationError):
        Store("", http_client=client)

    assert api.requests == []


@pytest.mark.asyncio
async def test_get_webstore(api):
    payload = {
        "id": 1,
        "name": "My Server",
        "webstore_url": "https://shop.example",
        "currency": "USD",
        "lang": "en",
        "platform_type": "Minecraft",
        "created_at": "2024-01-01T00:00:00Z",
    }
    api.add("GET", "/accounts/abc", json_body=payload)
    store = Store("abc", http_client=api.client())

    webstore = await store.get_webstore()

    assert isinstance(webstore, StoreResponse)
    assert webstore.to_dict() == payload
    assert webstore.created_at == "2024-01-01T00:00:00Z"
    assert api.last.method == "GET"
    assert api.last.url.path == "/api/accounts/abc"


@pytest.mark.asyncio
async def test_get_pages_keeps_server_order(api):
    api.add(
        "GET",
        "/accounts/abc/pages",
        json_body=[
            {"id": 3, "title": "Terms", "slug": "terms"},
            {"id": 1, "title": "About", "slug": "about", "hidden": True},
        ],
    )
    store = Store("abc", http_client=api.client())

    pages = await store.get_pages()

    assert all(isinstance(page, Page) for page in pages)
    assert [page.id for page in pages] == [3, 1]
    assert pages[1].hidden is True
    assert api.last.url.path == "/api/accounts/abc/pages"


@pytest.mark.asyncio
async def test_get_pages_returns_mistyped_bodies_unchanged(api):
    payload = [
        {"id": 1, "title": "About", "sequence": 3},
        {"id": "2", "hidden": "no", "sequence": "first"},
    ]
    api.add("GET", "/accounts/abc/pages", json_body=payload)
    store = Store("abc", http_client=api.client())

    pages = await store.get_pages()

    assert [page.to_dict() for page in pages] == payload
    assert pages[0].sequence == 3


@pytest.mark.asyncio
async def test_get_pages_failure(api):
    api.add("GET", "/accounts/abc/pages", status_code=404)
    store = Store("abc", http_client=api.client())

    with pytest.raises(HeadlessRequestError, match="Request failed with status 404: Not Found"):
        await store.get_pages()


@pytest.mark.asyncio
async def test_create_basket_shares_client(api):
    api.add("POST", "/accounts/abc/baskets", json_body={"ident": "b-1"})
    store = Store("abc", http_client=api.client())

    basket = await store.create_basket()

    assert isinstance(basket, Basket)
    assert basket.ident == "b-1"
    assert basket.transport.client is store.transport.client


def test_attach_basket(api):
    store = Store("abc", http_client=api.client())

    basket = store.attach_basket("b-2")

    assert basket.ident == "b-2"
    assert basket.public_token == "abc"
    assert api.requests == []


def test_attach_basket_requires_ident(api):
    store = Store("abc", http_client=api.client())

    with pytest.raises(HeadlessValidationError, match="Basket ident not provided"):
        store.attach_basket("")


@pytest.mark.asyncio
async def test_closing_attached_basket_keeps_store_client_open(api):
    store = Store("abc", http_client=api.client())
    basket = store.attach_basket("b-2")

    await basket.aclose()

    assert not store.transport.client.is_closed
