"""MCP Server for a Tebex Headless webstore."""

import asyncio
import logging
import os
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from .basket import Basket
from .errors import HeadlessError
from .models import BasketResponse
from .store import Store

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("tebex-headless-mcp-server")

# Initialize server
app = Server("tebex-headless-mcp-server")

# Global state
store: Optional[Store] = None
basket: Optional[Basket] = None
basket_ident: Optional[str] = None
basket_lock = asyncio.Lock()


async def ensure_basket() -> Basket:
    """Return the session basket, creating or resuming it on first use."""
    global basket

    if basket is not None:
        return basket

    if store is None:
        raise HeadlessError("TEBEX_PUBLIC_TOKEN is not configured")

    async with basket_lock:
        # Another tool call may have opened it while we waited
        if basket is None:
            if basket_ident:
                basket = store.attach_basket(basket_ident)
            else:
                basket = await store.create_basket()
                logger.info(f"Opened new basket {basket.ident}")

    return basket


def format_basket(data: BasketResponse) -> str:
    """Render a basket snapshot as readable text."""
    lines = [f"Basket {data.ident or ''}".rstrip()]

    if data.packages:
        lines.append(f"\nPackages ({len(data.packages)}):")
        for i, package in enumerate(data.packages, 1):
            name = getattr(package, "name", None) or f"Package {getattr(package, 'id', i)}"
            lines.append(f"\n{i}. {name}")
            lines.append(f"   Quantity: {package.qty}")
            if package.type:
                lines.append(f"   Type: {package.type}")
    else:
        lines.append("\nYour basket is empty")

    if data.coupon:
        lines.append(f"\nCoupons: {', '.join(c.coupon_code or '' for c in data.coupon)}")
    if data.giftcards:
        lines.append(f"Gift cards: {len(data.giftcards)}")
    if data.creator_code:
        lines.append(f"Creator code: {data.creator_code}")

    currency = data.currency or ""
    lines.append(f"\n{'=' * 50}")
    if data.base_price is not None:
        lines.append(f"Base price: {data.base_price} {currency}".rstrip())
    if data.sales_tax is not None:
        lines.append(f"Sales tax: {data.sales_tax} {currency}".rstrip())
    if data.total_price is not None:
        lines.append(f"Total: {data.total_price} {currency}".rstrip())

    return "\n".join(lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    resources = []

    if store is not None:
        resources.extend(
            [
                Resource(
                    uri=AnyUrl("tebex://webstore"),
                    name="Webstore",
                    mimeType="application/json",
                    description="Webstore metadata",
                ),
                Resource(
                    uri=AnyUrl("tebex://pages"),
                    name="Pages",
                    mimeType="application/json",
                    description="Custom webstore pages",
                ),
                Resource(
                    uri=AnyUrl("tebex://basket"),
                    name="Basket",
                    mimeType="application/json",
                    description="Current basket contents",
                ),
            ]
        )

    return resources


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if store is None:
        return "Error: TEBEX_PUBLIC_TOKEN is not configured."

    if uri_str == "tebex://webstore":
        webstore = await store.get_webstore()
        return webstore.to_json(indent=2)

    elif uri_str == "tebex://pages":
        import json

        pages = await store.get_pages()
        return json.dumps([page.to_dict() for page in pages], indent=2)

    elif uri_str == "tebex://basket":
        current = await ensure_basket()
        data = await current.get_basket()
        return data.to_json(indent=2)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    code_schema = {
        "type": "object",
        "properties": {
            "code": {"type": "string", "description": "Code to apply"},
        },
        "required": ["code"],
    }
    empty_schema = {"type": "object", "properties": {}}

    return [
        Tool(
            name="tebex_get_webstore",
            description="Get webstore information (name, currency, language, URL)",
            inputSchema=empty_schema,
        ),
        Tool(
            name="tebex_get_pages",
            description="List the webstore's custom pages",
            inputSchema=empty_schema,
        ),
        Tool(
            name="tebex_get_basket",
            description="Get current basket contents with packages, discounts and totals",
            inputSchema=empty_schema,
        ),
        Tool(
            name="tebex_get_auth_links",
            description="Get the links a customer follows to log in before checkout",
            inputSchema={
                "type": "object",
                "properties": {
                    "return_url": {
                        "type": "string",
                        "description": "URL to return to after authentication",
                    },
                },
                "required": ["return_url"],
            },
        ),
        Tool(
            name="tebex_apply_creator_code",
            description="Apply a creator code to the basket",
            inputSchema=code_schema,
        ),
        Tool(
            name="tebex_remove_creator_code",
            description="Remove the creator code from the basket",
            inputSchema=empty_schema,
        ),
        Tool(
            name="tebex_apply_gift_card",
            description="Apply a gift card to the basket",
            inputSchema=code_schema,
        ),
        Tool(
            name="tebex_remove_gift_card",
            description="Remove a gift card from the basket",
            inputSchema=code_schema,
        ),
        Tool(
            name="tebex_apply_coupon",
            description="Apply a coupon to the basket",
            inputSchema=code_schema,
        ),
        Tool(
            name="tebex_remove_coupon",
            description="Remove the coupon from the basket",
            inputSchema=empty_schema,
        ),
        Tool(
            name="tebex_add_package",
            description="Add a package to the basket",
            inputSchema={
                "type": "object",
                "properties": {
                    "package_id": {"type": "string", "description": "Package ID to add"},
                    "quantity": {
                        "type": "integer",
                        "description": "Quantity to add (default: 1)",
                        "default": 1,
                    },
                },
                "required": ["package_id"],
            },
        ),
        Tool(
            name="tebex_remove_package",
            description="Remove a package from the basket",
            inputSchema={
                "type": "object",
                "properties": {
                    "package_id": {"type": "string", "description": "Package ID to remove"},
                },
                "required": ["package_id"],
            },
        ),
        Tool(
            name="tebex_update_quantity",
            description="Update the quantity of a package in the basket",
            inputSchema={
                "type": "object",
                "properties": {
                    "package_id": {"type": "string", "description": "Package ID to update"},
                    "quantity": {"type": "integer", "description": "New quantity to set"},
                },
                "required": ["package_id", "quantity"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}

    try:
        if store is None:
            return [
                TextContent(
                    type="text",
                    text="Error: TEBEX_PUBLIC_TOKEN is not configured in the MCP settings.",
                )
            ]

        if name == "tebex_get_webstore":
            webstore = await store.get_webstore()

            result_lines = [f"Webstore: {webstore.name}"]
            if webstore.description:
                result_lines.append(f"Description: {webstore.description}")
            result_lines.append(f"URL: {webstore.webstore_url}")
            result_lines.append(f"Currency: {webstore.currency}")
            result_lines.append(f"Language: {webstore.lang}")
            if webstore.platform_type:
                result_lines.append(f"Platform: {webstore.platform_type}")

            return [TextContent(type="text", text="\n".join(result_lines))]

        elif name == "tebex_get_pages":
            pages = await store.get_pages()

            if not pages:
                return [TextContent(type="text", text="No pages found")]

            result_lines = [f"Found {len(pages)} page(s):\n"]
            for i, page in enumerate(pages, 1):
                result_lines.append(f"\n{i}. {page.title}")
                result_lines.append(f"   Slug: {page.slug}")
                if page.hidden or page.private or page.disabled:
                    flags = [flag for flag in ("hidden", "private", "disabled") if getattr(page, flag)]
                    result_lines.append(f"   Flags: {', '.join(flags)}")

            return [TextContent(type="text", text="\n".join(result_lines))]

        elif name == "tebex_get_basket":
            current = await ensure_basket()
            data = await current.get_basket()
            return [TextContent(type="text", text=format_basket(data))]

        elif name == "tebex_get_auth_links":
            current = await ensure_basket()
            links = await current.get_auth_links(arguments.get("return_url", ""))

            if not links:
                return [TextContent(type="text", text="No authentication links available")]

            result_lines = ["Authentication links:\n"]
            for link in links:
                result_lines.append(f"- {link.name}: {link.url}")

            return [TextContent(type="text", text="\n".join(result_lines))]

        elif name == "tebex_apply_creator_code":
            current = await ensure_basket()
            await current.apply_creator_code(arguments.get("code", ""))
            return [TextContent(type="text", text="Creator code applied")]

        elif name == "tebex_remove_creator_code":
            current = await ensure_basket()
            await current.remove_creator_code()
            return [TextContent(type="text", text="Creator code removed")]

        elif name == "tebex_apply_gift_card":
            current = await ensure_basket()
            await current.apply_gift_card(arguments.get("code", ""))
            return [TextContent(type="text", text="Gift card applied")]

        elif name == "tebex_remove_gift_card":
            current = await ensure_basket()
            await current.remove_gift_card(arguments.get("code", ""))
            return [TextContent(type="text", text="Gift card removed")]

        elif name == "tebex_apply_coupon":
            current = await ensure_basket()
            await current.apply_coupon(arguments.get("code", ""))
            return [TextContent(type="text", text="Coupon applied")]

        elif name == "tebex_remove_coupon":
            current = await ensure_basket()
            await current.remove_coupon()
            return [TextContent(type="text", text="Coupon removed")]

        elif name == "tebex_add_package":
            current = await ensure_basket()
            package_id = str(arguments.get("package_id", ""))
            quantity = arguments.get("quantity", 1)

            await current.add_package(package_id, quantity)
            return [
                TextContent(
                    type="text",
                    text=f"Successfully added package {package_id} (quantity: {quantity}) to basket",
                )
            ]

        elif name == "tebex_remove_package":
            current = await ensure_basket()
            package_id = str(arguments.get("package_id", ""))

            await current.remove_package(package_id)
            return [
                TextContent(
                    type="text",
                    text=f"Successfully removed package {package_id} from basket",
                )
            ]

        elif name == "tebex_update_quantity":
            current = await ensure_basket()
            package_id = str(arguments.get("package_id", ""))
            quantity = arguments.get("quantity")

            await current.update_quantity(package_id, quantity)
            return [
                TextContent(
                    type="text",
                    text=f"Successfully updated package {package_id} to quantity {quantity}",
                )
            ]

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except HeadlessError as e:
        logger.error(f"Error executing tool {name}: {e}")
        return [TextContent(type="text", text=f"Error: {e.message}")]
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return [TextContent(type="text", text=f"Error: {str(e)}")]


async def main() -> None:
    """Main entry point for the MCP server."""
    global store, basket_ident

    public_token = os.environ.get("TEBEX_PUBLIC_TOKEN")
    basket_ident = os.environ.get("TEBEX_BASKET_IDENT")

    if public_token:
        store = Store(public_token)
        logger.info("Public token loaded from environment")
        if basket_ident:
            logger.info(f"Will resume basket {basket_ident}")
    else:
        logger.warning("No public token found in environment variable TEBEX_PUBLIC_TOKEN")
        logger.warning("Tool calls will fail until the token is configured")

    logger.info("Starting Tebex Headless MCP Server...")

    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        if store is not None:
            await store.aclose()


if __name__ == "__main__":
    asyncio.run(main())
