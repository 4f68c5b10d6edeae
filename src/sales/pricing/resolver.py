"""Unit price resolution for tiered and volume pricing.

The same ``resolve_price`` serves the price preview and the charged price at
checkout, so a quote and a charge made against the same product state always
agree.

Resolution order:

1. Start from the product's list price.
2. An exact match on the buyer's pricing tier in the product's tier price list
   replaces it. No match keeps the list price.
3. Quantity brackets are tried from the highest ``min_quantity`` down; the
   first one the quantity falls into wins. Its explicit price replaces the
   running price, otherwise its discount percentage is taken off it.
4. The result is clamped at zero and rounded to cents.
"""

from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def tier_of(account) -> str | None:
    if account is None:
        return None
    return getattr(account, "pricing_tier", None) or None


def select_bracket(brackets, quantity: int):
    """Most specific bracket for ``quantity``, or None."""
    for bracket in sorted(brackets or [], key=lambda b: b.min_quantity, reverse=True):
        if bracket.matches(quantity):
            return bracket
    return None


def tier_price(product, tier: str | None) -> Decimal | None:
    if not tier:
        return None
    price = product.tier_price_for(tier)
    return to_decimal(price) if price is not None else None


def resolve_price(product, account, quantity: int) -> Decimal:
    """Unit price for ``quantity`` units of ``product`` bought by ``account`` (may be None)."""
    if quantity is None or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})

    price = to_decimal(product.price)

    override = tier_price(product, tier_of(account))
    if override is not None:
        price = override

    bracket = select_bracket(product.price_brackets, quantity)
    if bracket is not None:
        if bracket.price is not None:
            price = to_decimal(bracket.price)
        elif bracket.discount_percent is not None:
            price = price * (1 - to_decimal(bracket.discount_percent) / HUNDRED)

    return to_money(max(price, Decimal("0")))


def line_total(unit_price, quantity: int) -> Decimal:
    return to_money(to_decimal(unit_price) * quantity)


def pricing_info(product, account, quantity: int = 1) -> dict:
    """Price preview for the read path.

    Reports the list price, the tier override (if any), the unit price the
    buyer would be charged for ``quantity`` and the configuration behind it.
    """
    tier = tier_of(account)
    unit_price = resolve_price(product, account, quantity)
    bracket = select_bracket(product.price_brackets, quantity)

    return {
        "product_id": str(product.id),
        "name": product.name,
        "standard_price": to_money(product.price),
        "tier_price": tier_price(product, tier),
        "pricing_tier": tier,
        "quantity": quantity,
        "unit_price": unit_price,
        "line_total": line_total(unit_price, quantity),
        "applied_bracket": bracket.to_dict() if bracket is not None else None,
        "quantity_pricing": [b.to_dict() for b in sorted(product.price_brackets or [], key=lambda b: b.min_quantity)],
        "moq": product.moq,
        "bulk_pricing_enabled": product.bulk_pricing_enabled,
    }
