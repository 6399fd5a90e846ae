"""Tebex Headless basket client."""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from .errors import HeadlessError, HeadlessValidationError
from .models import AuthLink, BasketResponse
from .transport import BASE_URL, HeadlessTransport

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched, on top of quote()'s own set
_URI_COMPONENT_SAFE = "!*'()"


class Basket:
    """
    Client for a single Tebex basket.

    Use ``await Basket.create(token)`` to open a new basket, or construct
    directly with a known ident to resume one.
    """

    def __init__(
        self,
        public_token: str,
        ident: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = BASE_URL,
    ) -> None:
        """
        Initialize the basket client.

        Args:
            public_token: Webstore public token
            ident: Basket ident issued by the server
            http_client: Shared async client (optional)
            base_url: API root
        """
        self.public_token = public_token
        self.ident = ident
        self.transport = HeadlessTransport(
            public_token,
            ident_getter=lambda: self.ident,
            base_url=base_url,
            http_client=http_client,
        )

    @classmethod
    async def create(
        cls,
        public_token: str,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = BASE_URL,
    ) -> "Basket":
        """
        Create a new basket and return a client bound to it.

        The client is returned only once the server has issued the ident.

        Raises:
            HeadlessRequestError: If the create call fails
            HeadlessError: If the response carries no ident
        """
        logger.info("=== CREATE BASKET ===")
        basket = cls(public_token, "", http_client=http_client, base_url=base_url)
        try:
            data = await basket.transport.request("/accounts/{token}/baskets", "POST")
            ident = data.get("ident") if isinstance(data, dict) else None
            if not ident:
                raise HeadlessError("Basket creation returned no ident")
        except Exception:
            await basket.aclose()
            raise

        basket.ident = ident
        logger.info(f"Basket created: ident={ident}")
        return basket

    async def get_auth_links(self, return_url: str) -> list[AuthLink]:
        """
        Get the authentication links for the basket.

        Args:
            return_url: Where to send the user after authenticating

        Returns:
            Authentication links
        """
        if not return_url:
            raise HeadlessValidationError("Return URL not provided")

        data = await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/auth?returnUrl="
            + quote(return_url, safe=_URI_COMPONENT_SAFE),
        )
        return [AuthLink.from_api(link) for link in data or []]

    async def get_basket(self) -> BasketResponse:
        """Fetch the current state of the basket."""
        data = await self.transport.request("/accounts/{token}/baskets/{basketIdent}", "GET")
        return BasketResponse.from_api(data)

    async def apply_creator_code(self, code: str) -> None:
        if not code:
            raise HeadlessValidationError("Creator code not provided")

        logger.info(f"Applying creator code to basket {self.ident}")
        await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/creator-codes",
            "POST",
            {"creator_code": code},
        )

    async def remove_creator_code(self) -> None:
        logger.info(f"Removing creator code from basket {self.ident}")
        await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/creator-codes/remove",
            "POST",
        )

    async def apply_gift_card(self, code: str) -> None:
        if not code:
            raise HeadlessValidationError("Gift card code not provided")

        logger.info(f"Applying gift card to basket {self.ident}")
        await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/giftcards",
            "POST",
            {"card_number": code},
        )

    async def remove_gift_card(self, code: str) -> None:
        if not code:
            raise HeadlessValidationError("Gift card code not provided")

        logger.info(f"Removing gift card from basket {self.ident}")
        await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/giftcards/remove",
            "POST",
            {"card_number": code},
        )

    async def apply_coupon(self, code: str) -> None:
        if not code:
            raise HeadlessValidationError("Coupon code not provided")

        logger.info(f"Applying coupon to basket {self.ident}")
        await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/coupons",
            "POST",
            {"coupon_code": code},
        )

    async def remove_coupon(self) -> None:
        logger.info(f"Removing coupon from basket {self.ident}")
        await self.transport.request(
            "/accounts/{token}/baskets/{basketIdent}/coupons/remove",
            "POST",
        )

    async def add_package(self, package_id: str, quantity: int = 1) -> None:
        """
        Add a package to the basket.

        Args:
            package_id: Package ID
            quantity: Quantity to add
        """
        if not package_id:
            raise HeadlessValidationError("Package ID not provided")

        logger.info(f"=== ADD PACKAGE: package_id={package_id}, quantity={quantity} ===")
        await self.transport.request(
            "/baskets/{basketIdent}/packages",
            "POST",
            {"package_id": package_id, "quantity": quantity},
        )

    async def remove_package(self, package_id: str) -> None:
        """
        Remove a package from the basket.

        Args:
            package_id: Package ID
        """
        if not package_id:
            raise HeadlessValidationError("Package ID not provided")

        logger.info(f"=== REMOVE PACKAGE: package_id={package_id} ===")
        await self.transport.request(
            "/baskets/{basketIdent}/packages/remove",
            "POST",
            {"package_id": package_id},
        )

    async def update_quantity(self, package_id: str, quantity: Optional[int] = 1) -> None:
        """
        Set the quantity of a package already in the basket.

        A quantity of 0 is rejected like a missing one; use remove_package instead.

        Args:
            package_id: Package ID
            quantity: New quantity
        """
        if not package_id:
            raise HeadlessValidationError("Package ID not provided")
        if quantity is None or quantity == 0:
            raise HeadlessValidationError("Quantity not provided")

        logger.info(f"=== UPDATE QUANTITY: package_id={package_id}, quantity={quantity} ===")
        await self.transport.request(
            "/baskets/{basketIdent}/packages/update",
            "PUT",
            {"package_id": package_id, "quantity": quantity},
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "Basket":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
