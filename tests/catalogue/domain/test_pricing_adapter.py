"""Tests for the product catalogue abstraction."""

import pytest
from catalogue.pricing import get_catalog, reset_catalog, set_catalog
from catalogue.pricing.fake_adapter import FakeCatalog
from catalogue.pricing.port import CatalogUnavailableError, ProductPrice


class TestFakeCatalog:
    def test_known_product_returns_price(self):
        catalog = FakeCatalog()
        catalog.set_price("prod-a", 12.0, discount=10.0)
        assert catalog.get_price("prod-a") == ProductPrice(product_id="prod-a", calculated_price=12.0, discount=10.0)

    def test_unknown_product_returns_none(self):
        catalog = FakeCatalog()
        assert catalog.get_price("prod-missing") is None

    def test_discontinued_product_returns_none(self):
        catalog = FakeCatalog()
        catalog.set_price("prod-a", 12.0)
        catalog.discontinue("prod-a")
        assert catalog.get_price("prod-a") is None

    def test_outage_raises(self):
        catalog = FakeCatalog()
        catalog.configure(should_succeed=False, failure_reason="Timed out")
        with pytest.raises(CatalogUnavailableError, match="Timed out"):
            catalog.get_price("prod-a")

    def test_lookups_are_recorded(self):
        catalog = FakeCatalog()
        catalog.get_price("prod-a")
        catalog.get_price("prod-b")
        assert catalog.lookups == ["prod-a", "prod-b"]

    def test_get_prices_skips_products_no_longer_sold(self):
        catalog = FakeCatalog()
        catalog.set_price("prod-a", 12.0)
        prices = catalog.get_prices(["prod-a", "prod-gone"])
        assert list(prices) == ["prod-a"]

    def test_reset_restores_defaults(self):
        catalog = FakeCatalog()
        catalog.set_price("prod-a", 12.0)
        catalog.configure(should_succeed=False)
        catalog.reset()
        assert catalog.prices == {}
        assert catalog.should_succeed is True


class TestCatalogFactory:
    def test_defaults_to_fake(self):
        assert isinstance(get_catalog(), FakeCatalog)

    def test_returns_singleton(self):
        assert get_catalog() is get_catalog()

    def test_set_catalog_overrides(self):
        custom = FakeCatalog()
        set_catalog(custom)
        assert get_catalog() is custom

    def test_unknown_adapter_raises(self, monkeypatch):
        monkeypatch.setenv("CATALOG_ADAPTER", "warehouse-db")
        reset_catalog()
        with pytest.raises(ValueError, match="Unknown catalog adapter"):
            get_catalog()
