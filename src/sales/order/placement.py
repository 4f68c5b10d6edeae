"""Order placement: one all-or-nothing transaction across pricing, stock and credit.

``PlaceOrderHandler`` runs inside the Unit of Work that ``@handle`` opens for
each attempt. Every line is priced and checked before any counter moves, then
stock is reserved line by line, credit is drawn, an order number is taken and
the order is staged. Any exception aborts the Unit of Work and the in-memory
snapshot it staged is discarded, so no partial reservation or credit draw ever
reaches the store.

Optimistic-lock conflicts on products or accounts surface at commit as
``ExpectedVersionError``. ``@handle`` retries the whole attempt with backoff
(``server.version_retry``); ``place_order`` turns a conflict that outlives the
retries into ``TransactionConflict``.
"""

import decimal
import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Boolean, Decimal, Identifier, String, Text
from protean.utils.globals import current_domain

from sales.catalog.product import Product
from sales.domain import sales
from sales.errors import IdentifierCollision, OrderValidationError, TransactionConflict
from sales.ledger.credit import load_account
from sales.ledger.inventory import load_product, reserve_stock
from sales.order.identifiers import generate_order_number, max_attempts
from sales.order.order import (
    CREDIT_PAYMENT_TYPES,
    Order,
    PaymentStatus,
    PaymentType,
    ShippingAddress,
)
from sales.order.pricing_context import StandardOrder, WholesaleOrder, wholesale_tax_rate
from sales.pricing.resolver import line_total, to_money
from sales.shared.email import EmailAddress

logger = structlog.get_logger(__name__)

ZERO = decimal.Decimal("0")


class PlacementState(Enum):
    STARTED = "started"
    VALIDATING = "validating"
    PRICING = "pricing"
    RESERVING = "reserving"
    CHARGING = "charging"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    ABORTED = "aborted"


@sales.command(part_of="Order")
class PlaceOrder:
    items = Text(required=True)  # JSON: list of {product_id, quantity, size?, name?, price?}
    email = String(required=True, max_length=254)
    total_amount = Decimal(required=True, min_value=0)
    payment_type = String(required=True, choices=PaymentType)
    payment_status = String(choices=PaymentStatus)
    shipping_address = Text()  # JSON: address dict
    phone = String(max_length=30)
    account_id = Identifier()
    user_id = Identifier()
    requires_approval = Boolean(default=False)
    purchase_order_number = String(max_length=100)
    notes = Text()


@dataclass(frozen=True)
class LineRequest:
    product_id: str
    quantity: int
    size: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class PricedLine:
    product: Product
    quantity: int
    unit_price: decimal.Decimal
    size: str | None = None

    @property
    def line_total(self) -> decimal.Decimal:
        return line_total(self.unit_price, self.quantity)

    def as_item(self) -> dict:
        return {
            "product_id": str(self.product.id),
            "name": self.product.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "size": self.size,
        }


def _load_json(raw, field_name):
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise OrderValidationError({field_name: ["Must be valid JSON"]}) from None


def parse_line_items(raw) -> list[LineRequest]:
    """Turn the submitted items into line requests, collecting every problem found."""
    data = _load_json(raw, "items")
    if not isinstance(data, list) or not data:
        raise OrderValidationError({"items": ["No items in order"]})

    errors = []
    lines = []
    for position, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            errors.append(f"Line {position}: must be an object")
            continue

        product_id = item.get("product_id") or item.get("product")
        quantity = item.get("quantity")
        if not product_id:
            errors.append(f"Line {position}: product_id is required")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            errors.append(f"Line {position}: quantity must be a positive whole number")
        if product_id and isinstance(quantity, int) and not isinstance(quantity, bool) and quantity >= 1:
            lines.append(
                LineRequest(
                    product_id=str(product_id),
                    quantity=quantity,
                    size=item.get("size") or None,
                    name=item.get("name"),
                )
            )

    if errors:
        raise OrderValidationError({"items": errors})
    return lines


def parse_shipping_address(raw) -> dict | None:
    data = _load_json(raw, "shipping_address")
    if data is None:
        return None
    if not isinstance(data, dict):
        raise OrderValidationError({"shipping_address": ["Must be an object"]})
    try:
        ShippingAddress(**data)
    except (ValidationError, TypeError) as exc:
        messages = exc.messages if isinstance(exc, ValidationError) else {"shipping_address": [str(exc)]}
        raise OrderValidationError(messages) from None
    return data


def validate_email(email: str) -> str:
    try:
        EmailAddress(address=email)
    except ValidationError as exc:
        raise OrderValidationError(exc.messages) from None
    return email


def timeline_note(payment_type: str, net_days: int | None) -> str:
    if payment_type == PaymentType.COD.value:
        return "Order placed with Cash on Delivery"
    if payment_type == PaymentType.CREDIT.value:
        return f"Order placed with Credit Terms (Net {net_days or 30})"
    if payment_type == PaymentType.INVOICE.value:
        return "Order placed - Invoice will be generated"
    return "Order placed with Online Payment"


class OrderPlacement:
    """A single placement attempt, logged as it moves through its states."""

    def __init__(self, command: PlaceOrder):
        self.command = command
        self.state = PlacementState.STARTED
        self.log = logger.bind(
            account_id=str(command.account_id) if command.account_id else None,
            payment_type=command.payment_type,
        )
        self.log.info("order.placement.started")

    def _enter(self, state: PlacementState, **details):
        self.state = state
        self.log.info(f"order.placement.{state.value}", **details)

    def run(self) -> str:
        try:
            return self._place()
        except Exception as exc:
            self.log.info(
                "order.placement.aborted",
                failed_in=self.state.value,
                error=type(exc).__name__,
                reason=str(exc),
            )
            raise

    def _place(self) -> str:
        command = self.command

        self._enter(PlacementState.VALIDATING)
        lines = parse_line_items(command.items)
        shipping_address = parse_shipping_address(command.shipping_address)
        validate_email(command.email)
        context = self._context()

        self._enter(PlacementState.PRICING, line_count=len(lines))
        priced = self._price(lines, context)

        self._enter(PlacementState.RESERVING)
        for line in priced:
            reserve_stock(line.product, line.quantity, size=line.size)

        subtotal = sum((line.line_total for line in priced), ZERO)
        tax_amount = context.tax_on(subtotal)
        total = subtotal + tax_amount
        if to_money(command.total_amount) != total:
            self.log.warning(
                "order.placement.total_mismatch",
                submitted=str(command.total_amount),
                computed=str(total),
            )

        self._enter(PlacementState.CHARGING, total=str(total))
        context.settle(command.payment_type, total)

        self._enter(PlacementState.PERSISTING)
        placed_at = datetime.now()
        order_number = generate_order_number()
        order = Order.place(
            order_number=order_number,
            email=command.email,
            items=[line.as_item() for line in priced],
            payment_type=command.payment_type,
            timeline_note=timeline_note(command.payment_type, context.net_days),
            shipping_address=shipping_address,
            tax_amount=tax_amount,
            payment_status=self._payment_status(),
            approval_status=context.approval_status(total, bool(command.requires_approval)),
            account_id=context.account.id if context.is_wholesale else None,
            pricing_tier=context.account.pricing_tier if context.is_wholesale else None,
            due_date=context.due_date(command.payment_type, placed_at),
            user_id=command.user_id,
            phone=command.phone,
            purchase_order_number=command.purchase_order_number,
            notes=command.notes,
            placed_at=placed_at,
        )

        try:
            current_domain.repository_for(Order).add(order)
        except ValidationError as exc:
            if "order_number" in exc.messages:
                raise IdentifierCollision(max_attempts()) from exc
            raise

        self.log.info("order.placement.staged", order_number=order_number, total=str(total))
        return order_number

    def _context(self):
        command = self.command
        if not command.account_id:
            if command.payment_type in CREDIT_PAYMENT_TYPES:
                raise OrderValidationError(
                    {"payment_type": ["Credit and invoice payments require a wholesale account"]}
                )
            return StandardOrder()

        account = load_account(command.account_id)
        account.ensure_usable()
        return WholesaleOrder(account=account, tax_rate=wholesale_tax_rate())

    def _price(self, lines: list[LineRequest], context) -> list[PricedLine]:
        # One instance per product, so repeated lines draw on the same counters
        products: dict[str, Product] = {}
        priced = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                product = products[line.product_id] = load_product(line.product_id, name=line.name)

            context.check_minimum(product, line.quantity)
            priced.append(
                PricedLine(
                    product=product,
                    quantity=line.quantity,
                    unit_price=context.unit_price(product, line.quantity),
                    size=line.size,
                )
            )
        return priced

    def _payment_status(self) -> str:
        if self.command.payment_type == PaymentType.ONLINE.value and self.command.payment_status:
            return self.command.payment_status
        return PaymentStatus.PENDING.value


@sales.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command: PlaceOrder) -> str:
        return OrderPlacement(command).run()


def place_order(
    items,
    email,
    total_amount,
    payment_type,
    shipping_address=None,
    account_id=None,
    **fields,
) -> str:
    """Place an order and return its order number.

    ``items`` and ``shipping_address`` may be passed as Python structures;
    they are serialized for the command.
    """
    command = PlaceOrder(
        items=items if isinstance(items, str) else json.dumps(items, default=str),
        email=email,
        total_amount=total_amount,
        payment_type=payment_type,
        shipping_address=(
            shipping_address
            if shipping_address is None or isinstance(shipping_address, str)
            else json.dumps(shipping_address)
        ),
        account_id=account_id,
        **fields,
    )

    try:
        order_number = current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        logger.warning("order.placement.conflict", account_id=account_id, reason=str(exc))
        raise TransactionConflict() from exc

    logger.info(f"order.placement.{PlacementState.COMMITTED.value}", order_number=order_number)
    return order_number
