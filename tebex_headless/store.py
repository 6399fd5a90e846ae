"""Tebex Headless webstore client."""

import logging
from typing import Optional

import httpx

from .basket import Basket
from .errors import HeadlessValidationError
from .models import Page, StoreResponse
from .transport import BASE_URL, HeadlessTransport

logger = logging.getLogger(__name__)


class Store:
    """Read-only client for webstore metadata."""

    def __init__(
        self,
        public_token: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = BASE_URL,
    ) -> None:
        """
        Initialize the store client.

        Args:
            public_token: Webstore public token
            http_client: Shared async client (optional)
            base_url: API root

        Raises:
            HeadlessValidationError: If the token is empty or not a string
        """
        if not public_token or not isinstance(public_token, str):
            raise HeadlessValidationError("Invalid Token")

        self.public_token = public_token
        self.transport = HeadlessTransport(
            public_token,
            base_url=base_url,
            http_client=http_client,
        )

    async def get_webstore(self) -> StoreResponse:
        """Fetch the webstore metadata."""
        data = await self.transport.request("/accounts/{token}")
        return StoreResponse.from_api(data)

    async def get_pages(self) -> list[Page]:
        """Fetch the webstore's custom pages, in server order."""
        data = await self.transport.request("/accounts/{token}/pages")
        return [Page.from_api(page) for page in data or []]

    async def create_basket(self) -> Basket:
        """Create a new basket sharing this store's HTTP client."""
        return await Basket.create(
            self.public_token,
            http_client=self.transport.client,
            base_url=self.transport.base_url,
        )

    def attach_basket(self, ident: str) -> Basket:
        """Return a client for an existing basket, sharing this store's HTTP client."""
        if not ident:
            raise HeadlessValidationError("Basket ident not provided")

        logger.info(f"Attaching to existing basket {ident}")
        return Basket(
            self.public_token,
            ident,
            http_client=self.transport.client,
            base_url=self.transport.base_url,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "Store":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
