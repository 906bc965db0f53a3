import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def catalog():
    from catalogue.pricing import set_catalog
    from catalogue.pricing.fake_adapter import FakeCatalog

    fake = FakeCatalog()
    set_catalog(fake)
    return fake


@pytest.fixture()
def cart_store():
    from identity.cart import set_cart_store
    from identity.cart.fake_store import FakeCartStore

    fake = FakeCartStore()
    set_cart_store(fake)
    return fake


@pytest.fixture()
def paypal():
    from payments.gateway import set_gateway
    from payments.gateway.fake_adapter import FakePayPal

    fake = FakePayPal()
    set_gateway(fake)
    return fake


@pytest.fixture()
def sink():
    from notifications.channel import set_sink
    from notifications.channel.fake_sink import FakeNotificationSink

    fake = FakeNotificationSink()
    set_sink(fake)
    return fake
