"""Tests for the Order aggregate: totals, timeline and the OrderPlaced event."""

import json
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from sales.order.events import OrderPlaced
from sales.order.order import Order

PLACED_AT = datetime(2026, 3, 1, 9, 30)


def _items():
    return [
        {"product_id": "prod-1", "name": "Linen Shirt", "unit_price": Decimal("1400.00"), "quantity": 50, "size": "M"},
        {"product_id": "prod-2", "name": "Canvas Tote", "unit_price": Decimal("35.50"), "quantity": 2},
    ]


def _place(**overrides):
    data = {
        "order_number": "SS12345678001",
        "email": "buyer@example.com",
        "items": _items(),
        "payment_type": "credit",
        "timeline_note": "Order placed with Credit Terms (Net 30)",
        "tax_amount": Decimal("7007.10"),
        "approval_status": "approved",
        "account_id": "acct-1",
        "pricing_tier": "wholesaler",
        "placed_at": PLACED_AT,
    }
    data.update(overrides)
    return Order.place(**data)


class TestPlace:
    def test_totals_follow_line_items(self):
        order = _place()

        assert order.subtotal == Decimal("70071.00")
        assert order.tax_amount == Decimal("7007.10")
        assert order.total_amount == Decimal("77078.10")
        assert len(order.items) == 2
        assert order.items[0].line_total == Decimal("70000.00")

    def test_initial_state(self):
        order = _place()

        assert order.order_status == "pending"
        assert order.payment_status == "pending"
        assert order.approval_status == "approved"
        assert order.is_wholesale is True
        assert str(order.email) == "buyer@example.com"

    def test_timeline_starts_with_the_placement_note(self):
        order = _place()

        assert len(order.timeline) == 1
        assert order.timeline[0].status == "pending"
        assert order.timeline[0].note == "Order placed with Credit Terms (Net 30)"
        assert order.timeline[0].recorded_at == PLACED_AT

    def test_order_placed_event_carries_a_snapshot(self):
        order = _place()

        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_number == "SS12345678001"
        assert event.total_amount == Decimal("77078.10")
        assert event.item_count == 52
        assert json.loads(event.items)[0]["unit_price"] == "1400.00"

    def test_order_without_items_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _place(items=[])
        assert "items" in exc.value.messages

    def test_malformed_email_rejected(self):
        with pytest.raises(ValidationError):
            _place(email="buyer-at-example")

    def test_unknown_payment_type_rejected(self):
        with pytest.raises(ValidationError):
            _place(payment_type="barter")


class TestTotalsInvariants:
    def test_subtotal_cannot_drift_from_line_items(self):
        order = _place()
        with pytest.raises(ValidationError) as exc:
            order.subtotal = Decimal("1.00")
        assert "subtotal" in exc.value.messages

    def test_total_must_equal_subtotal_plus_tax(self):
        order = _place()
        with pytest.raises(ValidationError) as exc:
            order.total_amount = Decimal("1.00")
        assert "total_amount" in exc.value.messages


class TestTimeline:
    def test_entries_are_appended(self):
        order = _place()
        order.record_timeline("confirmed", "Approved by sales", at=PLACED_AT + timedelta(hours=1))

        assert [entry.status for entry in order.timeline] == ["pending", "confirmed"]

    def test_earlier_entry_rejected(self):
        order = _place()
        with pytest.raises(ValidationError) as exc:
            order.record_timeline("confirmed", at=PLACED_AT - timedelta(minutes=1))

        assert "timeline" in exc.value.messages
        assert len(order.timeline) == 1
