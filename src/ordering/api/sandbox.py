"""Sandbox routes for demos and load tests (non-production only).

Seed a buyer's cart and the catalogue prices behind it, and switch the fake
PayPal provider between succeeding and failing. Every route refuses to run
in production or against a real adapter.
"""

import os

from catalogue.pricing import get_catalog
from catalogue.pricing.fake_adapter import FakeCatalog
from fastapi import APIRouter, HTTPException
from identity.cart import get_cart_store
from identity.cart.fake_store import FakeCartStore
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakePayPal

from ordering.api.schemas import (
    CollaboratorConfigResponse,
    ConfigureCollaboratorRequest,
    SeedCartRequest,
    SeedCartResponse,
)

sandbox_router = APIRouter(prefix="/sandbox", tags=["sandbox"])


def _refuse_in_production() -> None:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Sandbox routes are not available in production")


@sandbox_router.post("/carts/{user_id}", status_code=201, response_model=SeedCartResponse)
async def seed_cart(user_id: str, body: SeedCartRequest) -> SeedCartResponse:
    """Fill a buyer's cart and price its products in the catalogue."""
    _refuse_in_production()

    store = get_cart_store()
    catalog = get_catalog()
    if not isinstance(store, FakeCartStore) or not isinstance(catalog, FakeCatalog):
        raise HTTPException(status_code=400, detail="Seeding is only available with the fake cart store and catalogue")

    lines = [line.model_dump(exclude_none=True) for line in body.items]
    for line in body.items:
        catalog.set_price(line.product_id, line.unit_price, discount=line.discount)
    store.replace_cart(user_id, lines)
    return SeedCartResponse(user_id=user_id, item_count=len(lines))


@sandbox_router.post("/paypal/configure", response_model=CollaboratorConfigResponse)
async def configure_paypal(body: ConfigureCollaboratorRequest) -> CollaboratorConfigResponse:
    """Configure the FakePayPal behavior."""
    _refuse_in_production()

    gateway = get_gateway()
    if not isinstance(gateway, FakePayPal):
        raise HTTPException(status_code=400, detail="PayPal configuration only available for FakePayPal")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason or "Payment declined",
    )
    return CollaboratorConfigResponse(
        adapter=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )
