"""Who is buying: a retail checkout or a wholesale account.

Placement asks the context for prices, minimums, tax, credit settlement,
approval and due dates instead of branching on an optional account.
"""

import decimal
from dataclasses import dataclass
from datetime import datetime, timedelta

from protean.utils.globals import current_domain

from sales.accounts.account import WholesaleAccount
from sales.catalog.product import Product
from sales.errors import MOQViolation
from sales.ledger.credit import charge_credit
from sales.order.order import CREDIT_PAYMENT_TYPES, ApprovalStatus
from sales.pricing.resolver import resolve_price, to_money

ZERO = decimal.Decimal("0")
DEFAULT_TAX_RATE = decimal.Decimal("0.10")


def wholesale_tax_rate() -> decimal.Decimal:
    return decimal.Decimal(str(getattr(current_domain, "WHOLESALE_TAX_RATE", DEFAULT_TAX_RATE)))


@dataclass(frozen=True)
class StandardOrder:
    """Retail checkout: list and bracket pricing, no minimums, no tax, no credit."""

    account = None
    is_wholesale = False

    def unit_price(self, product: Product, quantity: int) -> decimal.Decimal:
        return resolve_price(product, None, quantity)

    def check_minimum(self, product: Product, quantity: int) -> None:
        return None

    def tax_on(self, subtotal: decimal.Decimal) -> decimal.Decimal:
        return ZERO

    def settle(self, payment_type: str, amount: decimal.Decimal) -> None:
        return None

    def approval_status(self, total: decimal.Decimal, requested: bool) -> str:
        return ApprovalStatus.PENDING.value if requested else ApprovalStatus.NOT_REQUIRED.value

    def due_date(self, payment_type: str, placed_at: datetime) -> datetime | None:
        return None

    @property
    def net_days(self) -> int | None:
        return None


@dataclass(frozen=True)
class WholesaleOrder:
    """Checkout on behalf of an active wholesale account."""

    account: WholesaleAccount
    tax_rate: decimal.Decimal = DEFAULT_TAX_RATE
    is_wholesale = True

    def unit_price(self, product: Product, quantity: int) -> decimal.Decimal:
        return resolve_price(product, self.account, quantity)

    def check_minimum(self, product: Product, quantity: int) -> None:
        if product.moq and product.moq > 1 and quantity < product.moq:
            raise MOQViolation(product.name, moq=product.moq, requested=quantity)

    def tax_on(self, subtotal: decimal.Decimal) -> decimal.Decimal:
        return to_money(subtotal * self.tax_rate)

    def settle(self, payment_type: str, amount: decimal.Decimal) -> None:
        if payment_type in CREDIT_PAYMENT_TYPES:
            charge_credit(self.account, amount)

    def approval_status(self, total: decimal.Decimal, requested: bool) -> str:
        if requested or self.account.requires_order_approval(total):
            return ApprovalStatus.PENDING.value
        return ApprovalStatus.APPROVED.value

    def due_date(self, payment_type: str, placed_at: datetime) -> datetime | None:
        if payment_type not in CREDIT_PAYMENT_TYPES or self.net_days is None:
            return None
        return placed_at + timedelta(days=self.net_days)

    @property
    def net_days(self) -> int | None:
        return self.account.net_days
