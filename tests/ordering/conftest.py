import pytest
from ordering.catalogue.product import Product
from ordering.notification import set_email_channel
from ordering.notification.fake_email import FakeEmailAdapter
from ordering.payment import set_gateway
from ordering.payment.fake_adapter import FakeGateway
from protean import current_domain
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


@pytest.fixture()
def email_channel():
    channel = FakeEmailAdapter()
    set_email_channel(channel)
    return channel


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def make_product():
    """Persist a product, optionally with ``(color, size, stock)`` variants, and return it reloaded."""

    def _make(name="Tee", price=20.0, stock=5, variants=(), is_active=True):
        product = Product.create(name=name, price=price, stock=stock, sku=f"SKU-{name.upper()}")
        for color, size, variant_stock in variants:
            product.add_variant(color=color, size=size, stock=variant_stock)
        if not is_active:
            product.deactivate()

        repo = current_domain.repository_for(Product)
        repo.add(product)
        return repo.get(product.id)

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "address": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "USA",
    }
