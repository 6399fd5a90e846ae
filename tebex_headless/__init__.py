"""Async client for the Tebex Headless storefront API."""

from .basket import Basket
from .errors import HeadlessError, HeadlessRequestError, HeadlessValidationError
from .models import (
    AuthLink,
    BasketResponse,
    Coupon,
    GiftCard,
    Package,
    Page,
    RevenueShare,
    StoreResponse,
)
from .store import Store
from .transport import BASE_URL, HeadlessTransport

__version__ = "0.1.0"

__all__ = [
    "BASE_URL",
    "AuthLink",
    "Basket",
    "BasketResponse",
    "Coupon",
    "GiftCard",
    "HeadlessError",
    "HeadlessRequestError",
    "HeadlessTransport",
    "HeadlessValidationError",
    "Package",
    "Page",
    "RevenueShare",
    "Store",
    "StoreResponse",
]
