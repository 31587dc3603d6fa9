import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Reset stores and swapped-in adapters after every test."""
    from storefront.gateway import reset_gateway
    from storefront.notification import reset_channels

    reset_gateway()
    reset_channels()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_channels()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture
def fake_gateway():
    from storefront.gateway import set_gateway
    from storefront.gateway.fake_adapter import FakeGateway

    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture
def outbox():
    """The fake email adapter; ``outbox.sent_emails`` lists what went out."""
    from storefront.notification import get_channel

    return get_channel("email")


@pytest.fixture
def customer():
    from protean import current_domain
    from storefront.account.registration import RegisterAccount

    account_id = current_domain.process(
        RegisterAccount(name="Jane Doe", email="jane@example.com"),
        asynchronous=False,
    )
    from storefront.account.account import Account

    return current_domain.repository_for(Account).get(account_id)


@pytest.fixture
def admin():
    from protean import current_domain
    from storefront.account.account import Account, Role
    from storefront.account.registration import RegisterAccount

    account_id = current_domain.process(
        RegisterAccount(name="Store Admin", email="admin@example.com", role=Role.ADMIN.value),
        asynchronous=False,
    )
    return current_domain.repository_for(Account).get(account_id)


@pytest.fixture
def category():
    from protean import current_domain
    from storefront.catalogue.category import Category
    from storefront.catalogue.category_management import CreateCategory

    category_id = current_domain.process(CreateCategory(name="Footwear"), asynchronous=False)
    return current_domain.repository_for(Category).get(category_id)


@pytest.fixture
def make_product(category):
    """Factory for catalogue products: ``make_product(price=10.0, stock=5)``."""
    from protean import current_domain
    from storefront.catalogue.product import Product
    from storefront.catalogue.product_management import CreateProduct

    counter = {"n": 0}

    def _make(name=None, price=10.0, stock=10, weight=1.0, track_quantity=True, is_featured=False):
        counter["n"] += 1
        product_id = current_domain.process(
            CreateProduct(
                name=name or f"Product {counter['n']}",
                description="A product for tests",
                category_id=str(category.id),
                price=price,
                sku=f"SKU-{counter['n']:04d}",
                weight_value=weight,
                stock_quantity=stock,
                track_quantity=track_quantity,
                is_featured=is_featured,
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _make
