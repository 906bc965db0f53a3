"""Product catalogue adapter factory.

Provides get_catalog() / set_catalog() to swap implementations. The adapter
is chosen by the CATALOG_ADAPTER environment variable (default: fake).
"""

import os

from catalogue.pricing.port import ProductCatalog

_current_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    """Return the configured product catalogue (singleton)."""
    global _current_catalog
    if _current_catalog is None:
        adapter = os.environ.get("CATALOG_ADAPTER", "fake")
        if adapter == "fake":
            from catalogue.pricing.fake_adapter import FakeCatalog

            _current_catalog = FakeCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _current_catalog


def set_catalog(catalog: ProductCatalog) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to the default catalogue."""
    global _current_catalog
    _current_catalog = None
