"""Application tests for placement retries, identifier collisions and post-commit side effects."""

import threading
from decimal import Decimal

import pytest
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain
from sales.accounts.account import WholesaleAccount
from sales.catalog.product import Product
from sales.domain import sales
from sales.errors import IdentifierCollision, InsufficientStock, TransactionConflict
from sales.integrations.notifications import get_dispatcher, set_dispatcher
from sales.integrations.notifications.fake_adapter import InMemoryNotificationDispatcher
from sales.order import identifiers, placement
from sales.order.order import Order
from sales.order.placement import place_order
from sales.projections.order_listing import list_orders


def _place(product, **overrides):
    data = {
        "items": [{"product_id": product.id, "quantity": 2}],
        "email": "buyer@example.com",
        "total_amount": "0",
        "payment_type": "online",
    }
    data.update(overrides)
    return place_order(**data)


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock


class TestVersionConflictRetry:
    def test_conflict_that_clears_is_retried_transparently(self, make_product, monkeypatch):
        product = make_product(stock=10)
        real_reserve = placement.reserve_stock
        attempts = []

        def flaky_reserve(*args, **kwargs):
            attempts.append(1)
            if len(attempts) == 1:
                real_reserve(*args, **kwargs)
                raise ExpectedVersionError("Wrong expected version")
            return real_reserve(*args, **kwargs)

        monkeypatch.setattr(placement, "reserve_stock", flaky_reserve)

        order_number = _place(product)

        assert len(attempts) == 2
        assert current_domain.repository_for(Order).get_by_number(order_number)
        # The abandoned attempt's reservation was rolled back
        assert _stock(product) == 8

    def test_persistent_conflict_gives_up_after_bounded_retries(self, make_product, monkeypatch):
        product = make_product(stock=10)
        attempts = []

        def conflicting_reserve(*args, **kwargs):
            attempts.append(1)
            raise ExpectedVersionError("Wrong expected version")

        monkeypatch.setattr(placement, "reserve_stock", conflicting_reserve)

        with pytest.raises(TransactionConflict) as exc:
            _place(product)

        max_retries = current_domain.config["server"]["version_retry"]["max_retries"]
        assert len(attempts) == max_retries + 1
        assert exc.value.retry_after_seconds == 1
        assert _stock(product) == 10
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_concurrent_orders_for_the_last_unit_serialize(self, make_product, monkeypatch):
        product = make_product(stock=1)
        real_reserve = placement.reserve_stock
        a_reserved = threading.Event()
        b_committed = threading.Event()
        outcomes = {}

        def reserve_then_wait(*args, **kwargs):
            result = real_reserve(*args, **kwargs)
            if threading.current_thread().name == "A" and not a_reserved.is_set():
                a_reserved.set()
                b_committed.wait(timeout=5)
            return result

        monkeypatch.setattr(placement, "reserve_stock", reserve_then_wait)

        def buyer(name, wait_for=None, done=None):
            if wait_for is not None:
                wait_for.wait(timeout=5)
            with sales.domain_context():
                try:
                    outcomes[name] = _place(product, items=[{"product_id": product.id, "quantity": 1}])
                except Exception as exc:
                    outcomes[name] = exc
            if done is not None:
                done.set()

        first = threading.Thread(target=buyer, args=("A",), name="A")
        second = threading.Thread(target=buyer, args=("B", a_reserved, b_committed), name="B")
        first.start()
        second.start()
        first.join(timeout=10)
        second.join(timeout=10)

        assert isinstance(outcomes["B"], str)
        assert isinstance(outcomes["A"], InsufficientStock)
        assert _stock(product) == 0
        assert len(current_domain.repository_for(Order)._dao.query.all().items) == 1


class TestIdentifierCollision:
    def test_exhausted_order_numbers_roll_back_stock_and_credit(self, make_product, make_account, monkeypatch):
        product = make_product(price="100.00", stock=10)
        account = make_account(credit_limit="1000.00")

        def no_free_numbers():
            raise IdentifierCollision(5)

        monkeypatch.setattr(placement, "generate_order_number", no_free_numbers)

        with pytest.raises(IdentifierCollision):
            _place(product, account_id=account.id, payment_type="credit")

        assert _stock(product) == 10
        assert current_domain.repository_for(WholesaleAccount).get(account.id).credit_used == Decimal("0")

    def test_taken_number_is_skipped(self, make_product, monkeypatch):
        product = make_product(stock=10)
        first = _place(product)

        candidates = iter([first, "SS99999999999"])
        monkeypatch.setattr(identifiers._sequence, "next", lambda: next(candidates))

        assert _place(product) == "SS99999999999"


    def test_duplicate_number_at_insert_rolls_back(self, make_product, monkeypatch):
        product = make_product(stock=10)
        existing = _place(product)

        monkeypatch.setattr(placement, "generate_order_number", lambda: existing)

        with pytest.raises(IdentifierCollision):
            _place(product)

        assert _stock(product) == 8
        assert len(current_domain.repository_for(Order)._dao.query.all().items) == 1


class TestSideEffects:
    def test_confirmation_and_admin_notifications_are_queued(self, make_product):
        product = make_product()

        order_number = _place(product)

        assert get_dispatcher().kinds_for(order_number) == ["order_confirmation", "admin_new_order"]

    def test_orders_awaiting_approval_notify_approvers(self, make_product):
        product = make_product()

        order_number = _place(product, requires_approval=True)

        assert "order_awaiting_approval" in get_dispatcher().kinds_for(order_number)

    def test_notification_failure_does_not_fail_the_order(self, make_product):
        product = make_product(stock=10)
        dispatcher = InMemoryNotificationDispatcher()
        dispatcher.configure(should_fail=True)
        set_dispatcher(dispatcher)

        order_number = _place(product)

        assert current_domain.repository_for(Order).get_by_number(order_number)
        assert _stock(product) == 8
        assert dispatcher.queued == []

    def test_cached_listing_is_dropped_after_placement(self, make_product):
        product = make_product()
        assert list_orders() == []

        order_number = _place(product)

        assert [summary["order_number"] for summary in list_orders()] == [order_number]

    def test_failed_placement_sends_nothing(self, make_product):
        product = make_product(stock=1)

        with pytest.raises(InsufficientStock):
            _place(product)

        assert get_dispatcher().queued == []
