"""Data models for Tebex Headless API payloads."""

from typing import Any, ClassVar, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class HeadlessModel(BaseModel):
    """Base for API payloads. Unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    # Fields holding lists of nested payloads
    nested_models: ClassVar[dict[str, type["HeadlessModel"]]] = {}

    @classmethod
    def from_api(cls, data: Optional[dict[str, Any]]):
        """Build a model from a response body without validating or coercing values."""
        values = dict(data or {})
        for name, model in cls.nested_models.items():
            items = values.get(name)
            if isinstance(items, list):
                values[name] = [
                    model.from_api(item) if isinstance(item, dict) else item for item in items
                ]
        return cls.model_construct(_fields_set=set(values), **values)

    def to_dict(self) -> dict[str, Any]:
        """Return the fields received from the API, values untouched."""
        return self.model_dump(exclude_unset=True, warnings=False)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(indent=indent, exclude_unset=True, warnings=False)


class AuthLink(HeadlessModel):
    """External authentication provider link for a basket."""

    name: Optional[str] = Field(None, description="Provider name")
    url: Optional[str] = Field(None, description="Redirect URL")


class Coupon(HeadlessModel):
    coupon_code: Optional[str] = None


class GiftCard(HeadlessModel):
    card_number: Optional[str] = None


class RevenueShare(HeadlessModel):
    """Revenue share entry of a package."""

    wallet_ref: Optional[str] = Field(None, description="Wallet reference")
    amount: Optional[float] = Field(None, description="Amount sent to the wallet")
    gateway_fee_percent: Optional[float] = Field(None, description="Gateway fee percentage")


class Package(HeadlessModel):
    """Represents a package line in a basket."""

    qty: Optional[int] = Field(None, description="Quantity in the basket")
    type: Optional[Literal["single", "subscription"]] = Field(None, description="Purchase type")
    revenue_share: Optional[list[RevenueShare]] = Field(None, description="Revenue share breakdown")

    nested_models: ClassVar[dict[str, Type[HeadlessModel]]] = {"revenue_share": RevenueShare}


class BasketResponse(HeadlessModel):
    """Represents a server-side basket snapshot."""

    id: Optional[int] = Field(None, description="Numeric basket ID")
    ident: Optional[str] = Field(None, description="Opaque basket identifier")
    complete: Optional[bool] = Field(None, description="Whether checkout completed")
    email: Optional[str] = None
    username: Optional[str] = None
    coupon: Optional[list[Coupon]] = Field(None, description="Applied coupons")
    giftcards: Optional[list[GiftCard]] = Field(None, description="Applied gift cards")
    creator_code: Optional[str] = None
    cancel_url: Optional[str] = None
    complete_url: Optional[str] = None
    complete_auto_redirect: Optional[bool] = None
    country: Optional[str] = None
    ip: Optional[str] = None
    username_id: Optional[int] = None
    base_price: Optional[float] = Field(None, description="Price before tax")
    sales_tax: Optional[float] = Field(None, description="Tax amount")
    total_price: Optional[float] = Field(None, description="Price including tax")
    currency: Optional[str] = Field(None, description="ISO currency code")
    packages: Optional[list[Package]] = Field(None, description="Packages in the basket")

    nested_models: ClassVar[dict[str, type[HeadlessModel]]] = {
        "coupon": Coupon,
        "giftcards": GiftCard,
        "packages": Package,
    }


class StoreResponse(HeadlessModel):
    """Represents webstore metadata."""

    id: Optional[int] = None
    description: Optional[str] = None
    name: Optional[str] = None
    webstore_url: Optional[str] = None
    currency: Optional[str] = None
    lang: Optional[str] = None
    logo: Optional[str] = None
    platform_type: Optional[str] = None
    platform_type_id: Optional[str] = None
    created_at: Optional[str] = Field(None, description="ISO-8601 creation timestamp")


class Page(HeadlessModel):
    """Represents a custom webstore page."""

    id: Optional[int] = None
    created_at: Optional[str] = Field(None, description="ISO-8601 creation timestamp")
    updated_at: Optional[str] = Field(None, description="ISO-8601 update timestamp")
    account_id: Optional[int] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    private: Optional[bool] = None
    hidden: Optional[bool] = None
    disabled: Optional[bool] = None
    sequence: Optional[int] = Field(None, description="Display ordering")
    content: Optional[str] = None
