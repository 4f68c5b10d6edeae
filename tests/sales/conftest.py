import decimal
import os

import pytest


@pytest.fixture(scope="session")
def _sales_domain(request):
    """Initialize the sales domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from sales.domain import sales

    sales.init()
    return sales


@pytest.fixture(autouse=True)
def run_around_tests(_sales_domain):
    """Push domain context before each test, cleanup after."""
    from sales.integrations.notifications import reset_dispatcher

    ctx = _sales_domain.domain_context()
    ctx.push()
    reset_dispatcher()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()

    for _, cache in current_domain.caches.items():
        cache.flush_all()

    reset_dispatcher()
    ctx.pop()


@pytest.fixture
def make_product():
    """Persist a product; overrides go straight to ``Product.create``."""
    from protean.utils.globals import current_domain
    from sales.catalog.product import Product

    def _make(**overrides):
        data = {"name": "Linen Shirt", "price": "250.00", "stock": 100}
        data.update(overrides)
        product = Product.create(**data)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture
def make_account():
    """Persist an active wholesale account."""
    from protean.utils.globals import current_domain
    from sales.accounts.account import WholesaleAccount

    def _make(activate=True, credit_used=None, **overrides):
        data = {
            "company_name": "Acme Traders",
            "contact_email": "buying@acme.example",
            "pricing_tier": "wholesaler",
            "credit_limit": "100000.00",
        }
        data.update(overrides)
        account = WholesaleAccount.register(**data)
        if activate:
            account.activate()
        if credit_used is not None:
            account.credit_used = decimal.Decimal(str(credit_used))
        current_domain.repository_for(WholesaleAccount).add(account)
        return account

    return _make
