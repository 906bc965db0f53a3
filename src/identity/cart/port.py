"""Cart store port (abstract interface).

Each user record carries the buyer's cart as a list of line dicts
(``product_id``, ``name``, ``quantity``, ``unit_price``, ``discount``, ...).
The cart is always read and replaced wholesale.
"""

from abc import ABC, abstractmethod


class CartStoreError(Exception):
    """The user record holding the cart could not be read or written."""


class CartStore(ABC):
    """Abstract cart store interface."""

    @abstractmethod
    def get_cart(self, user_id: str) -> list[dict]:
        """Return the user's cart lines (empty when the user has none)."""
        ...

    @abstractmethod
    def replace_cart(self, user_id: str, items: list[dict]) -> None:
        """Replace the user's cart with the given lines."""
        ...

    def clear_cart(self, user_id: str) -> None:
        self.replace_cart(user_id, [])
