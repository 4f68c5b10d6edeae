"""Product aggregate: list price, tier price list, quantity brackets and stock counters."""

import decimal
from datetime import datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Decimal,
    Dict,
    Integer,
    List,
    String,
    ValueObject,
)

from sales.domain import sales
from sales.errors import InsufficientStock
from sales.shared.tiers import PricingTier


@sales.value_object(part_of="Product")
class TierPrice:
    """Override price for buyers on a given pricing tier."""

    tier = String(required=True, choices=PricingTier)
    price = Decimal(min_value=0)


@sales.value_object(part_of="Product")
class PriceBracket:
    """Quantity bracket: an explicit unit price or a percentage off the base price.

    ``max_quantity`` is open-ended when absent. An explicit ``price`` wins over
    ``discount_percent`` when both are set.
    """

    min_quantity = Integer(required=True, min_value=1)
    max_quantity = Integer(min_value=1)
    price = Decimal(min_value=0)
    discount_percent = Decimal(min_value=0, max_value=100)

    @invariant.post
    def must_carry_price_or_discount(self):
        if self.price is None and self.discount_percent is None:
            raise ValidationError({"price_brackets": ["A price bracket needs a price or a discount percentage"]})

    @invariant.post
    def max_quantity_not_below_min(self):
        if self.max_quantity is not None and self.max_quantity < self.min_quantity:
            raise ValidationError(
                {
                    "price_brackets": [
                        f"Bracket max quantity ({self.max_quantity}) is below its min quantity ({self.min_quantity})"
                    ]
                }
            )

    def matches(self, quantity: int) -> bool:
        if quantity < self.min_quantity:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity


@sales.aggregate
class Product:
    """A sellable catalog item as seen by checkout.

    Aggregate ``stock`` and the optional per-size counters in ``size_stock`` are
    kept independently; neither is derived from the other.
    """

    name = String(required=True, max_length=255)
    sku = String(max_length=64)
    price = Decimal(required=True, min_value=0)
    tier_prices = List(content_type=ValueObject(TierPrice))
    price_brackets = List(content_type=ValueObject(PriceBracket))
    moq = Integer(default=1, min_value=1)
    bulk_pricing_enabled = Boolean(default=False)
    stock = Integer(default=0, min_value=0)
    size_stock = Dict()
    is_active = Boolean(default=True)
    created_at = DateTime(default=datetime.now)
    updated_at = DateTime(default=datetime.now)

    @invariant.post
    def tiers_are_listed_once(self):
        tiers = [entry.tier for entry in self.tier_prices or []]
        if len(tiers) != len(set(tiers)):
            raise ValidationError({"tier_prices": ["Each pricing tier can be listed only once"]})

    @invariant.post
    def size_stock_is_non_negative(self):
        for size, quantity in (self.size_stock or {}).items():
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 0:
                raise ValidationError({"size_stock": [f"Stock for size '{size}' must be a non-negative integer"]})

    @classmethod
    def create(
        cls,
        name,
        price,
        stock=0,
        sku=None,
        tier_prices=None,
        price_brackets=None,
        size_stock=None,
        moq=1,
        bulk_pricing_enabled=False,
    ):
        """Build a product from plain data.

        ``tier_prices`` is a ``{tier: price}`` mapping, ``price_brackets`` a list
        of dicts with ``min_quantity``, ``max_quantity``, ``price`` and
        ``discount_percent`` keys, ``size_stock`` a ``{size: quantity}`` mapping.
        """
        tiers = [
            TierPrice(tier=tier, price=decimal.Decimal(str(tier_price)) if tier_price is not None else None)
            for tier, tier_price in (tier_prices or {}).items()
        ]
        brackets = [PriceBracket(**bracket) for bracket in (price_brackets or [])]

        return cls(
            name=name,
            sku=sku,
            price=decimal.Decimal(str(price)),
            stock=stock,
            tier_prices=tiers,
            price_brackets=brackets,
            size_stock={str(size): quantity for size, quantity in (size_stock or {}).items()},
            moq=moq,
            bulk_pricing_enabled=bulk_pricing_enabled,
        )

    def tracks_size(self, size) -> bool:
        return size is not None and str(size) in (self.size_stock or {})

    def stock_for_size(self, size) -> int | None:
        """Per-size stock, or None when the size is not tracked."""
        if not self.tracks_size(size):
            return None
        return self.size_stock[str(size)]

    @property
    def size_stock_drift(self) -> int:
        """Units by which the per-size counters exceed aggregate stock.

        The two counters are not reconciled with each other; a positive value
        is reported, never corrected.
        """
        return max(0, sum((self.size_stock or {}).values()) - self.stock)

    def tier_price_for(self, tier):
        for entry in self.tier_prices or []:
            if entry.tier == tier and entry.price is not None:
                return entry.price
        return None

    def reserve(self, quantity, size=None):
        """Take ``quantity`` units out of stock.

        When ``size`` is tracked its counter is checked and decremented; the
        aggregate counter is always checked and decremented. Both checks run
        before either counter moves.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        size_available = self.stock_for_size(size)
        if size_available is not None and size_available < quantity:
            raise InsufficientStock(self.name, requested=quantity, available=size_available, size=str(size))

        if self.stock < quantity:
            raise InsufficientStock(self.name, requested=quantity, available=self.stock)

        with atomic_change(self):
            if size_available is not None:
                self.size_stock = {**self.size_stock, str(size): size_available - quantity}
            self.stock = self.stock - quantity
            self.updated_at = datetime.now()

    def restock(self, quantity, size=None):
        """Add units back; a size that was not tracked starts being tracked."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        with atomic_change(self):
            if size is not None:
                current = self.stock_for_size(size) or 0
                self.size_stock = {**(self.size_stock or {}), str(size): current + quantity}
            self.stock = self.stock + quantity
            self.updated_at = datetime.now()
