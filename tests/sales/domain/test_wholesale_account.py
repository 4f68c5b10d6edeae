"""Tests for the WholesaleAccount aggregate: credit line, approval and lifecycle."""

from datetime import datetime
from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from sales.accounts.account import WholesaleAccount
from sales.accounts.events import WholesaleAccountActivated, WholesaleAccountRegistered
from sales.errors import InactiveAccount, InsufficientCredit


def _active(**overrides):
    data = {"company_name": "Acme Traders", "status": "active"}
    data.update(overrides)
    return WholesaleAccount(**data)


class TestRegistration:
    def test_new_account_is_pending_with_defaults(self):
        account = WholesaleAccount.register(company_name="Acme Traders", contact_email="buying@acme.example")

        assert account.status == "pending"
        assert account.pricing_tier == "standard"
        assert account.payment_terms == "net30"
        assert account.credit_used == Decimal("0")
        assert str(account.contact_email) == "buying@acme.example"
        assert isinstance(account._events[-1], WholesaleAccountRegistered)

    def test_malformed_contact_email_rejected(self):
        with pytest.raises(ValidationError):
            WholesaleAccount.register(company_name="Acme Traders", contact_email="not-an-email")


class TestChargeCredit:
    def test_charge_exactly_the_available_credit_passes(self):
        account = _active(credit_limit=Decimal("1000.00"), credit_used=Decimal("800.00"))
        account.charge_credit(Decimal("200.00"))
        assert account.credit_used == Decimal("1000.00")
        assert account.available_credit == Decimal("0")

    def test_one_cent_over_fails(self):
        account = _active(credit_limit=Decimal("1000.00"), credit_used=Decimal("800.00"))

        with pytest.raises(InsufficientCredit) as exc:
            account.charge_credit(Decimal("200.01"))

        assert exc.value.shortfall == Decimal("0.01")
        assert account.credit_used == Decimal("800.00")

    def test_shortfall_and_message(self):
        account = _active(credit_limit=Decimal("10000.00"), credit_used=Decimal("9000.00"))

        with pytest.raises(InsufficientCredit) as exc:
            account.charge_credit(Decimal("1200.00"))

        assert exc.value.shortfall == Decimal("200.00")
        assert str(exc.value) == "Insufficient credit. Available: 1000.00, Required: 1200.00"
        assert account.credit_used == Decimal("9000.00")
        assert exc.value.to_dict()["code"] == "insufficient_credit"

    def test_zero_limit_means_uncapped(self):
        account = _active(credit_limit=Decimal("0"))
        account.charge_credit(Decimal("1000000.00"))
        assert account.credit_used == Decimal("1000000.00")

    def test_negative_amount_rejected(self):
        account = _active(credit_limit=Decimal("1000.00"))
        with pytest.raises(ValidationError):
            account.charge_credit(Decimal("-1"))

    @pytest.mark.parametrize("status", ["pending", "suspended", "inactive"])
    def test_unusable_account_cannot_draw_credit(self, status):
        account = _active(status=status, credit_limit=Decimal("1000.00"))
        with pytest.raises(InactiveAccount) as exc:
            account.charge_credit(Decimal("10.00"))
        assert str(exc.value) == "Invalid or inactive business account"

    def test_credit_used_above_limit_violates_invariant(self):
        with pytest.raises(ValidationError) as exc:
            _active(credit_limit=Decimal("100.00"), credit_used=Decimal("150.00"))
        assert "credit_used" in exc.value.messages


class TestApprovalAndTerms:
    def test_approval_needed_only_above_limit(self):
        account = _active(requires_approval=True, approval_limit=Decimal("5000.00"))
        assert account.requires_order_approval(Decimal("5000.00")) is False
        assert account.requires_order_approval(Decimal("5000.01")) is True

    def test_no_approval_when_account_does_not_ask(self):
        account = _active(requires_approval=False, approval_limit=Decimal("0"))
        assert account.requires_order_approval(Decimal("999999")) is False

    @pytest.mark.parametrize(
        "terms, days",
        [("net15", 15), ("net30", 30), ("net45", 45), ("net60", 60), ("cod", None), ("prepaid", None)],
    )
    def test_net_days_per_payment_terms(self, terms, days):
        assert _active(payment_terms=terms).net_days == days


class TestLifecycle:
    def test_activate_pending_account(self):
        account = WholesaleAccount.register(company_name="Acme Traders")
        account.activate()

        assert account.status == "active"
        assert isinstance(account.activated_at, datetime)
        assert isinstance(account._events[-1], WholesaleAccountActivated)

    def test_suspend_and_reactivate(self):
        account = _active()
        account.suspend("Overdue invoices")
        assert account.status == "suspended"
        assert account.suspension_reason == "Overdue invoices"

        account.activate()
        assert account.status == "active"
        assert account.suspension_reason is None

    def test_only_active_accounts_can_be_suspended(self):
        account = WholesaleAccount.register(company_name="Acme Traders")
        with pytest.raises(ValidationError):
            account.suspend("No reason")

    def test_deactivated_account_cannot_be_activated(self):
        account = _active()
        account.deactivate()
        with pytest.raises(ValidationError):
            account.activate()
