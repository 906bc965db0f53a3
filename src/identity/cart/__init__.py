"""Cart store adapter factory.

Uses FakeCartStore by default. Select another adapter with the
CART_STORE_ADAPTER environment variable.
"""

import os

from identity.cart.port import CartStore

_cart_store: CartStore | None = None


def get_cart_store() -> CartStore:
    """Return the configured cart store (singleton)."""
    global _cart_store
    if _cart_store is None:
        adapter = os.environ.get("CART_STORE_ADAPTER", "fake")
        if adapter == "fake":
            from identity.cart.fake_store import FakeCartStore

            _cart_store = FakeCartStore()
        else:
            raise ValueError(f"Unknown cart store adapter: {adapter}")
    return _cart_store


def set_cart_store(store: CartStore) -> None:
    """Override the active cart store (useful for tests)."""
    global _cart_store
    _cart_store = store


def reset_cart_store() -> None:
    """Reset the cart store singleton (useful for testing)."""
    global _cart_store
    _cart_store = None
