import json
from decimal import Decimal

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db, setup_db

    bed = DomainFixture(marketplace)
    bed.setup()
    setup_db(marketplace)
    yield bed
    drop_db(marketplace)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases and drain the event store
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def catalog():
    """An in-memory catalog with two producers' products."""
    from marketplace.catalog import reset_catalog, set_catalog
    from marketplace.catalog.memory_adapter import InMemoryCatalog

    catalog = InMemoryCatalog()
    catalog.add_product("eggs", "farm-001", "Free-range eggs", Decimal("4.50"), unit="dozen")
    catalog.add_product("honey", "farm-001", "Wildflower honey", Decimal("12.00"), unit="jar")
    catalog.add_product("carrots", "farm-001", "Heirloom carrots", Decimal("2.25"), unit="bunch")
    catalog.add_product("kale", "farm-001", "Curly kale", Decimal("3.00"), unit="bunch", is_available=False)
    catalog.add_product("apples", "farm-002", "Honeycrisp apples", Decimal("3.10"), unit="lb")
    set_catalog(catalog)
    yield catalog
    reset_catalog()


@pytest.fixture(autouse=True)
def email():
    from marketplace.notifications import reset_email_channel, set_email_channel
    from marketplace.notifications.fake_email import FakeEmailAdapter

    adapter = FakeEmailAdapter()
    set_email_channel(adapter)
    yield adapter
    reset_email_channel()


@pytest.fixture()
def stock():
    """Put products on the ledger: ``stock(eggs=10, honey=3)``."""
    from marketplace.inventory.management import InitializeStock
    from protean import current_domain

    def _stock(producer_id="farm-001", **quantities):
        for product_id, quantity in quantities.items():
            current_domain.process(
                InitializeStock(product_id=product_id, producer_id=producer_id, quantity=quantity),
                asynchronous=False,
            )

    return _stock


@pytest.fixture()
def place_order():
    """Check out a cart through the PlaceOrder command and return the order id."""
    from marketplace.ordering.checkout import PlaceOrder
    from protean import current_domain

    def _place_order(items, customer_id="cust-001", producer_id="farm-001", **kwargs):
        return current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                producer_id=producer_id,
                items=json.dumps(items),
                **kwargs,
            ),
            asynchronous=False,
        )

    return _place_order


@pytest.fixture()
def stock_level():
    from marketplace.inventory.ledger import InventoryLedger

    return InventoryLedger().stock_level
