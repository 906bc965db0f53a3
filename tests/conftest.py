import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the config overlay and pins every collaborator to its in-memory
    fake, whatever the developer's shell exports.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    for variable in ("CART_STORE_ADAPTER", "CATALOG_ADAPTER", "PAYMENT_ADAPTER", "NOTIFICATION_ADAPTER"):
        os.environ[variable] = "fake"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def fresh_collaborators():
    """Give every test new fake adapters."""
    from catalogue.pricing import reset_catalog
    from identity.cart import reset_cart_store
    from notifications.channel import reset_sink
    from payments.gateway import reset_gateway

    reset_catalog()
    reset_cart_store()
    reset_gateway()
    reset_sink()
    yield
    reset_catalog()
    reset_cart_store()
    reset_gateway()
    reset_sink()
