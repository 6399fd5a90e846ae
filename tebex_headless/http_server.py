"""HTTP server exposing the Tebex Headless client as a REST API."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .basket import Basket
from .errors import HeadlessRequestError, HeadlessValidationError
from .store import Store

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("tebex-headless-http-server")

# Global state
store: Optional[Store] = None
basket: Optional[Basket] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global store, basket

    # Startup
    logger.info("Starting Tebex Headless HTTP Server...")
    public_token = os.environ.get("TEBEX_PUBLIC_TOKEN")

    if public_token:
        store = Store(public_token)
        logger.info("Public token loaded from environment")
        basket_ident = os.environ.get("TEBEX_BASKET_IDENT")
        if basket_ident:
            basket = store.attach_basket(basket_ident)
    else:
        logger.warning("No public token found in environment variable TEBEX_PUBLIC_TOKEN")

    yield

    # Shutdown
    logger.info("Shutting down Tebex Headless HTTP Server...")
    if store is not None:
        await store.aclose()


app = FastAPI(
    title="Tebex Headless Server",
    description="HTTP API for a Tebex Headless webstore and basket",
    version=__version__,
    lifespan=lifespan,
)


# Request Models
class CodeRequest(BaseModel):
    code: str


class AddPackageRequest(BaseModel):
    package_id: str
    quantity: int = 1


class RemovePackageRequest(BaseModel):
    package_id: str


class UpdateQuantityRequest(BaseModel):
    package_id: str
    quantity: Optional[int] = 1


def _require_store() -> Store:
    if store is None:
        raise HTTPException(status_code=503, detail="TEBEX_PUBLIC_TOKEN is not configured")
    return store


def _require_basket() -> Basket:
    _require_store()
    if basket is None:
        raise HTTPException(status_code=409, detail="No basket created. POST /basket first.")
    return basket


def _http_error(e: Exception, action: str) -> HTTPException:
    """Map a client error onto an HTTP error response."""
    if isinstance(e, HeadlessValidationError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, HeadlessRequestError):
        logger.error(f"{action} error: {e}")
        return HTTPException(status_code=502, detail=e.message)
    logger.error(f"{action} error: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Tebex Headless Server",
        "version": __version__,
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "store": {
                "webstore": "GET /webstore",
                "pages": "GET /pages",
            },
            "basket": {
                "create": "POST /basket",
                "get": "GET /basket",
                "auth": "GET /basket/auth?return_url=...",
                "creator_codes": "POST /basket/creator-codes, POST /basket/creator-codes/remove",
                "giftcards": "POST /basket/giftcards, POST /basket/giftcards/remove",
                "coupons": "POST /basket/coupons, POST /basket/coupons/remove",
                "packages": "POST /basket/packages, POST /basket/packages/remove, PUT /basket/packages",
            },
        },
        "configured": store is not None,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "configured": store is not None,
        "basket": basket.ident if basket else None,
    }


# Store endpoints
@app.get("/webstore")
async def get_webstore():
    """Get webstore metadata."""
    current_store = _require_store()
    try:
        webstore = await current_store.get_webstore()
        return webstore.to_dict()
    except Exception as e:
        raise _http_error(e, "Get webstore")


@app.get("/pages")
async def get_pages():
    """Get the webstore's custom pages."""
    current_store = _require_store()
    try:
        pages = await current_store.get_pages()
        return {
            "count": len(pages),
            "pages": [page.to_dict() for page in pages],
        }
    except Exception as e:
        raise _http_error(e, "Get pages")


# Basket endpoints
@app.post("/basket")
async def create_basket():
    """Create a new basket, replacing the current one."""
    global basket

    current_store = _require_store()
    try:
        basket = await current_store.create_basket()
        return {"success": True, "ident": basket.ident}
    except Exception as e:
        raise _http_error(e, "Create basket")


@app.get("/basket")
async def get_basket():
    """Get the current basket."""
    current = _require_basket()
    try:
        data = await current.get_basket()
        return data.to_dict()
    except Exception as e:
        raise _http_error(e, "Get basket")


@app.get("/basket/auth")
async def get_auth_links(return_url: str = ""):
    """Get the authentication links for the current basket."""
    current = _require_basket()
    try:
        links = await current.get_auth_links(return_url)
        return {"links": [link.to_dict() for link in links]}
    except Exception as e:
        raise _http_error(e, "Get auth links")


@app.post("/basket/creator-codes")
async def apply_creator_code(request: CodeRequest):
    current = _require_basket()
    try:
        await current.apply_creator_code(request.code)
        return {"success": True, "message": "Creator code applied"}
    except Exception as e:
        raise _http_error(e, "Apply creator code")


@app.post("/basket/creator-codes/remove")
async def remove_creator_code():
    current = _require_basket()
    try:
        await current.remove_creator_code()
        return {"success": True, "message": "Creator code removed"}
    except Exception as e:
        raise _http_error(e, "Remove creator code")


@app.post("/basket/giftcards")
async def apply_gift_card(request: CodeRequest):
    current = _require_basket()
    try:
        await current.apply_gift_card(request.code)
        return {"success": True, "message": "Gift card applied"}
    except Exception as e:
        raise _http_error(e, "Apply gift card")


@app.post("/basket/giftcards/remove")
async def remove_gift_card(request: CodeRequest):
    current = _require_basket()
    try:
        await current.remove_gift_card(request.code)
        return {"success": True, "message": "Gift card removed"}
    except Exception as e:
        raise _http_error(e, "Remove gift card")


@app.post("/basket/coupons")
async def apply_coupon(request: CodeRequest):
    current = _require_basket()
    try:
        await current.apply_coupon(request.code)
        return {"success": True, "message": "Coupon applied"}
    except Exception as e:
        raise _http_error(e, "Apply coupon")


@app.post("/basket/coupons/remove")
async def remove_coupon():
    current = _require_basket()
    try:
        await current.remove_coupon()
        return {"success": True, "message": "Coupon removed"}
    except Exception as e:
        raise _http_error(e, "Remove coupon")


@app.post("/basket/packages")
async def add_package(request: AddPackageRequest):
    """Add a package to the basket."""
    current = _require_basket()
    try:
        await current.add_package(request.package_id, request.quantity)
        return {
            "success": True,
            "message": f"Added package {request.package_id} (quantity: {request.quantity})",
        }
    except Exception as e:
        raise _http_error(e, "Add package")


@app.post("/basket/packages/remove")
async def remove_package(request: RemovePackageRequest):
    """Remove a package from the basket."""
    current = _require_basket()
    try:
        await current.remove_package(request.package_id)
        return {"success": True, "message": f"Removed package {request.package_id}"}
    except Exception as e:
        raise _http_error(e, "Remove package")


@app.put("/basket/packages")
async def update_quantity(request: UpdateQuantityRequest):
    """Update a package's quantity in the basket."""
    current = _require_basket()
    try:
        await current.update_quantity(request.package_id, request.quantity)
        return {
            "success": True,
            "message": f"Updated package {request.package_id} to quantity {request.quantity}",
        }
    except Exception as e:
        raise _http_error(e, "Update quantity")


def run_http_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """
    Run the HTTP server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable hot reloading (default: False)
    """
    import uvicorn

    logger.info(f"Starting server on {host}:{port} (reload={'enabled' if reload else 'disabled'})")

    if reload:
        uvicorn.run(
            "tebex_headless.http_server:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["tebex_headless"],
            log_level="info",
        )
    else:
        uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server(reload=True)
