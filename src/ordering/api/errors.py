"""Exception handlers for collaborator failures surfaced through the API."""

import structlog
from catalogue.pricing.port import CatalogUnavailableError
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from identity.cart.port import CartStoreError

logger = structlog.get_logger(__name__)


async def _catalog_unavailable(request: Request, exc: CatalogUnavailableError) -> JSONResponse:
    logger.error("Product catalogue unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"error": "Product catalogue is unavailable, try again shortly"})


async def _cart_store_unavailable(request: Request, exc: CartStoreError) -> JSONResponse:
    logger.error("Cart store unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"error": "Your cart could not be read, try again shortly"})


def register_collaborator_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogUnavailableError, _catalog_unavailable)
    app.add_exception_handler(CartStoreError, _cart_store_unavailable)
