"""Product catalogue port (abstract interface).

The order workflow only needs one thing from the catalogue: the current
price and discount of a product, to decide whether a buyer's price snapshot
is still valid. Storage and search stay behind this boundary.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass


class CatalogUnavailableError(Exception):
    """The catalogue could not be reached."""


@dataclass(frozen=True)
class ProductPrice:
    """Current selling price of a product."""

    product_id: str
    calculated_price: float
    discount: float = 0.0  # percent


class ProductCatalog(ABC):
    """Abstract product catalogue interface."""

    @abstractmethod
    def get_price(self, product_id: str) -> ProductPrice | None:
        """Return the current price, or None when the product is no longer sold.

        Raises:
            CatalogUnavailableError: when the catalogue cannot be reached.
        """
        ...

    def get_prices(self, product_ids: Iterable[str]) -> dict[str, ProductPrice]:
        """Look up several products, skipping the ones no longer sold."""
        prices = {}
        for product_id in product_ids:
            price = self.get_price(str(product_id))
            if price is not None:
                prices[str(product_id)] = price
        return prices
