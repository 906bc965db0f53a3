"""In-memory product catalogue for development and testing."""

from catalogue.pricing.port import CatalogUnavailableError, ProductCatalog, ProductPrice


class FakeCatalog(ProductCatalog):
    """Catalogue backed by a dict, configurable to fail like an unreachable service."""

    def __init__(self) -> None:
        self.prices: dict[str, ProductPrice] = {}
        self.should_succeed: bool = True
        self.failure_reason: str = "Catalogue unavailable"
        self.lookups: list[str] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Catalogue unavailable") -> None:
        """Configure catalogue behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def set_price(self, product_id: str, calculated_price: float, discount: float = 0.0) -> None:
        self.prices[str(product_id)] = ProductPrice(
            product_id=str(product_id),
            calculated_price=calculated_price,
            discount=discount,
        )

    def discontinue(self, product_id: str) -> None:
        self.prices.pop(str(product_id), None)

    def get_price(self, product_id: str) -> ProductPrice | None:
        self.lookups.append(str(product_id))
        if not self.should_succeed:
            raise CatalogUnavailableError(self.failure_reason)
        return self.prices.get(str(product_id))

    def reset(self) -> None:
        self.prices.clear()
        self.lookups.clear()
        self.should_succeed = True
        self.failure_reason = "Catalogue unavailable"
