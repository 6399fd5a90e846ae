"""Request helper shared by the Headless resource clients."""

import logging
from typing import Any, Callable, Optional

import httpx

from .errors import HeadlessRequestError

logger = logging.getLogger(__name__)

BASE_URL = "https://headless.tebex.io/api"


class HeadlessTransport:
    """Performs Headless API calls and normalizes their outcome."""

    def __init__(
        self,
        public_token: Optional[str] = None,
        *,
        ident_getter: Optional[Callable[[], Optional[str]]] = None,
        base_url: str = BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            public_token: Webstore public token substituted for {token}
            ident_getter: Returns the basket ident substituted for {basketIdent}
            base_url: API root every path is appended to
            http_client: Shared async client. One is created (and owned) if omitted.
        """
        self.public_token = public_token
        self.ident_getter = ident_getter
        self.base_url = base_url
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=30.0,
                headers={"Accept": "application/json"},
            )
        self.client = http_client

    def build_route(self, path: str) -> str:
        """Substitute the {token} and {basketIdent} placeholders in a path template."""
        ident = self.ident_getter() if self.ident_getter else None
        return path.replace("{token}", self.public_token or "").replace(
            "{basketIdent}", ident or ""
        )

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request to the Headless API.

        Args:
            path: Endpoint path template, e.g. '/accounts/{token}/baskets/{basketIdent}'
            method: HTTP method
            body: JSON body, sent only when given

        Returns:
            Parsed JSON response, or None when the response has no body

        Raises:
            HeadlessRequestError: If the response status is not 2xx
        """
        url = self.base_url + self.build_route(path)
        logger.debug(f"{method} {url}")

        kwargs: dict[str, Any] = {"headers": {"Content-Type": "application/json"}}
        if body is not None:
            kwargs["json"] = body

        response = await self.client.request(method, url, **kwargs)

        if not response.is_success:
            logger.warning(f"{method} {url} failed: {response.status_code} {response.reason_phrase}")
            raise HeadlessRequestError(
                response.status_code,
                response.reason_phrase,
                method=method,
                url=url,
            )

        if not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()
